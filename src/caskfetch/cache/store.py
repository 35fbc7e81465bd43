"""Path computation for cached artifacts."""

import logging
import os
from pathlib import Path
from typing import Optional

from caskfetch.cache.config import CacheConfig
from caskfetch.errors import CacheUnavailableError
from caskfetch.models import ArtifactIdentity, CacheLocation

logger = logging.getLogger(__name__)


class CacheStore:
    """Maps artifact identities to cache locations.

    Layout::

        <cache_dir>/<category>/<name>-<version><ext>   cached path
        <symlink_dir>/<name>                           stable symlink
        <prefix>/Caskroom/<name>/<version>/            staging directory

    No other component computes these paths. The store has no caching
    policy of its own; locations are recomputed on every call.
    """

    def __init__(self, config: Optional[CacheConfig] = None):
        """Initialize cache store.

        Args:
            config: Cache configuration (uses defaults if None)
        """
        self.config = config or CacheConfig()

    @property
    def cache_root(self) -> Path:
        return self.config.cache_root

    @property
    def category(self) -> str:
        """Top-level category of the cache root (its basename)."""
        return self.cache_root.name

    @staticmethod
    def _mkdir(path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise CacheUnavailableError(f"Cannot create directory {path}: {e}") from e
        except OSError as e:
            logger.error(f"OS error creating directory {path}: {e}")
            raise CacheUnavailableError(f"Cannot create directory {path}: {e}") from e

        if not os.access(path, os.W_OK):
            raise CacheUnavailableError(f"Directory is not writable: {path}")

    def resolve(self, identity: ArtifactIdentity, extension: str = "") -> CacheLocation:
        """Compute the cache location for an artifact.

        Creates the directories containing both paths so callers can write
        immediately.

        Args:
            identity: Artifact name and version
            extension: File extension including the dot (e.g. '.zip')

        Returns:
            CacheLocation for the artifact

        Raises:
            CacheUnavailableError: If the cache root cannot be written

        Examples:
            >>> store.resolve(ArtifactIdentity("f", "1.0"), ".zip").cached_path
            PosixPath('/home/me/.caskfetch_cache/Cask/f-1.0.zip')
        """
        if extension and not extension.startswith("."):
            extension = f".{extension}"

        cached_path = self.cache_root / f"{identity.slug}{extension}"
        symlink_path = self.config.symlink_dir / identity.name

        self._mkdir(cached_path.parent)
        self._mkdir(symlink_path.parent)

        logger.debug(f"Resolved {identity.slug} to {cached_path}")
        return CacheLocation(cached_path=cached_path, symlink_path=symlink_path)

    def artifact_dir(self, name: str) -> Path:
        """Versioned staging area for all versions of an artifact."""
        return self.config.caskroom / name

    def staging_dir(self, identity: ArtifactIdentity, create: bool = True) -> Path:
        """Staging directory for one version of an artifact.

        Args:
            identity: Artifact name and version
            create: Create the directory if absent

        Returns:
            Path to the staging directory
        """
        path = self.artifact_dir(identity.name) / identity.version
        if create:
            self._mkdir(path)
        return path

    @staticmethod
    def link(location: CacheLocation) -> Path:
        """Create or replace the stable symlink pointing at the cached path.

        Args:
            location: Location whose symlink should be (re)created

        Returns:
            The symlink path
        """
        symlink_path = location.symlink_path
        tmp_link = symlink_path.with_name(f".{symlink_path.name}.tmp")

        if tmp_link.is_symlink() or tmp_link.exists():
            tmp_link.unlink()
        tmp_link.symlink_to(location.cached_path)
        # Atomic replace, so readers never see a missing link
        os.replace(tmp_link, symlink_path)

        logger.info(f"Linked {symlink_path} -> {location.cached_path}")
        return symlink_path
