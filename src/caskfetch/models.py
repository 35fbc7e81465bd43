"""Data types shared by the cache store and fetch strategies."""

from dataclasses import dataclass
from pathlib import Path

from typing_extensions import TypedDict


class StrategyMetadata(TypedDict, total=False):
    """Key-value payload a formula or cask attaches to its download.

    Read-only input to a strategy. Only the password archive strategy
    requires keys (``sha256``, ``password``, ``name``).
    """

    sha256: str
    password: str
    name: str  # Archive basename without ".zip"
    url: str


@dataclass(frozen=True)
class ArtifactIdentity:
    """Name and version of an artifact, as resolved from its definition.

    Examples:
        >>> ArtifactIdentity("firefox", "120.0").slug
        'firefox-120.0'
    """

    name: str
    version: str

    def __post_init__(self):
        for field_name in ("name", "version"):
            value = getattr(self, field_name)
            if not value or "/" in value:
                raise ValueError(
                    f"Invalid artifact {field_name}: {value!r}. "
                    f"Must be non-empty and contain no '/'."
                )

    @property
    def slug(self) -> str:
        return f"{self.name}-{self.version}"


@dataclass(frozen=True)
class CacheLocation:
    """Where an artifact lives in the cache and where users find it.

    Attributes:
        cached_path: Canonical copy inside the cache root
        symlink_path: Stable path that always points at ``cached_path``
    """

    cached_path: Path
    symlink_path: Path

    def is_complete(self) -> bool:
        """Check that the symlink resolves to an existing, non-empty file."""
        if not self.symlink_path.is_symlink():
            return False
        target = self.symlink_path.resolve()
        return target.is_file() and target.stat().st_size > 0
