"""Cache configuration management."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CACHE_DIR = Path.home() / ".caskfetch_cache"
DEFAULT_PREFIX = Path.home() / ".caskfetch"

# Debounce delays for deferred tasks, in seconds
CLEANUP_DELAY = 10
PATCH_DELAY = 8


@dataclass
class CacheConfig:
    """Configuration for the fetch cache and staging area.

    Attributes:
        cache_dir: Directory holding one cache root per category
        category: Top-level category of the cache root ('Cask' or 'Formula').
            The cache root is ``cache_dir / category``.
        symlink_dir: Directory for stable, human-facing symlinks. Defaults to
            ``cache_dir / 'links'``.
        prefix: Install prefix; staging happens under ``prefix/Caskroom``
        checksum_algorithm: Algorithm for archive verification ('md5', 'sha256')
        verbose: Log each extracted and repackaged member at INFO
        cleanup_delay: Seconds before stale staging directories are removed
        patch_delay: Seconds before an installed definition copy is patched
        download_timeout: Default timeout in seconds for downloads (None = no limit)
    """

    cache_dir: Path = DEFAULT_CACHE_DIR
    category: str = "Cask"
    symlink_dir: Optional[Path] = None
    prefix: Path = DEFAULT_PREFIX
    checksum_algorithm: str = "sha256"
    verbose: bool = False
    cleanup_delay: int = CLEANUP_DELAY
    patch_delay: int = PATCH_DELAY
    download_timeout: Optional[float] = None

    def __post_init__(self):
        """Ensure paths are expanded, absolute Path objects."""
        if self.cache_dir is None:
            self.cache_dir = DEFAULT_CACHE_DIR
        self.cache_dir = Path(self.cache_dir).expanduser().absolute()

        if self.symlink_dir is None:
            self.symlink_dir = self.cache_dir / "links"
        else:
            self.symlink_dir = Path(self.symlink_dir).expanduser().absolute()

        if self.prefix is None:
            self.prefix = DEFAULT_PREFIX
        self.prefix = Path(self.prefix).expanduser().absolute()

    @property
    def cache_root(self) -> Path:
        """Cache root for this category."""
        return self.cache_dir / self.category

    @property
    def caskroom(self) -> Path:
        """Versioned staging area."""
        return self.prefix / "Caskroom"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "CacheConfig":
        """Load configuration from file.

        Args:
            config_path: Path to config file. If None, uses default location.

        Returns:
            CacheConfig instance
        """
        if config_path is None:
            config_path = DEFAULT_CACHE_DIR / "config.json"

        if not config_path.exists():
            return cls()

        with open(config_path, "r") as f:
            data = json.load(f)

        for key in ("cache_dir", "symlink_dir", "prefix"):
            if data.get(key) is not None:
                data[key] = Path(data[key])

        return cls(**data)

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to file.

        Args:
            config_path: Path to config file. If None, uses default location.
        """
        if config_path is None:
            config_path = self.cache_dir / "config.json"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "cache_dir": str(self.cache_dir),
            "category": self.category,
            "symlink_dir": str(self.symlink_dir),
            "prefix": str(self.prefix),
            "checksum_algorithm": self.checksum_algorithm,
            "verbose": self.verbose,
            "cleanup_delay": self.cleanup_delay,
            "patch_delay": self.patch_delay,
            "download_timeout": self.download_timeout,
        }

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @classmethod
    def from_env(cls) -> "CacheConfig":
        """Create configuration from environment variables.

        Environment variables:
            CASKFETCH_CACHE_DIR: Cache directory path
            CASKFETCH_CATEGORY: Cache root category
            CASKFETCH_SYMLINK_DIR: Symlink directory path
            CASKFETCH_PREFIX: Install prefix
            CASKFETCH_VERBOSE: Verbose extraction logging (true/false)
            CASKFETCH_CLEANUP_DELAY: Cleanup delay in seconds
            CASKFETCH_PATCH_DELAY: Source patch delay in seconds
            CASKFETCH_TIMEOUT: Download timeout in seconds

        Returns:
            CacheConfig instance
        """
        kwargs = {}

        if os.getenv("CASKFETCH_CACHE_DIR"):
            kwargs["cache_dir"] = Path(os.getenv("CASKFETCH_CACHE_DIR"))

        if os.getenv("CASKFETCH_SYMLINK_DIR"):
            kwargs["symlink_dir"] = Path(os.getenv("CASKFETCH_SYMLINK_DIR"))

        if os.getenv("CASKFETCH_PREFIX"):
            kwargs["prefix"] = Path(os.getenv("CASKFETCH_PREFIX"))

        if os.getenv("CASKFETCH_CATEGORY"):
            kwargs["category"] = os.getenv("CASKFETCH_CATEGORY")

        if os.getenv("CASKFETCH_VERBOSE"):
            kwargs["verbose"] = os.getenv("CASKFETCH_VERBOSE", "").lower() == "true"

        if os.getenv("CASKFETCH_CLEANUP_DELAY"):
            kwargs["cleanup_delay"] = int(os.getenv("CASKFETCH_CLEANUP_DELAY"))

        if os.getenv("CASKFETCH_PATCH_DELAY"):
            kwargs["patch_delay"] = int(os.getenv("CASKFETCH_PATCH_DELAY"))

        if os.getenv("CASKFETCH_TIMEOUT"):
            kwargs["download_timeout"] = float(os.getenv("CASKFETCH_TIMEOUT"))

        return cls(**kwargs)


# Global cache configuration instance
_global_config: Optional[CacheConfig] = None


def get_global_config() -> CacheConfig:
    """Get global cache configuration.

    Returns:
        Global CacheConfig instance
    """
    global _global_config
    if _global_config is None:
        # Environment wins over the config file when set
        if os.getenv("CASKFETCH_CACHE_DIR") or os.getenv("CASKFETCH_PREFIX"):
            _global_config = CacheConfig.from_env()
        else:
            try:
                _global_config = CacheConfig.load()
            except (OSError, ValueError, TypeError):
                _global_config = CacheConfig.from_env()
    return _global_config


def set_global_config(config: Optional[CacheConfig]) -> None:
    """Set global cache configuration.

    Args:
        config: CacheConfig instance to use globally, or None to reset
    """
    global _global_config
    _global_config = config
