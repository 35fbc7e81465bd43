"""Base interface for fetch strategies.

A strategy retrieves (or deliberately skips retrieving) one artifact and
leaves it in the cache. Every strategy implements the same ``fetch``
contract; they differ only in how the bytes are obtained and processed.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional, Tuple

from caskfetch.cache.config import CacheConfig, get_global_config
from caskfetch.cache.store import CacheStore
from caskfetch.download import Downloader
from caskfetch.errors import MissingMetadataError
from caskfetch.models import ArtifactIdentity, CacheLocation, StrategyMetadata
from caskfetch.tasks.scheduler import DeferredTaskScheduler, get_scheduler
from caskfetch.utils import url_extension

logger = logging.getLogger(__name__)


class FetchStrategy(ABC):
    """Abstract base class for fetch strategies.

    Collaborators (store, downloader, scheduler) are injected so that
    strategies stay free of global state; defaults come from the global
    configuration.

    Examples:
        Create a custom strategy:
        >>> class MirrorStrategy(FetchStrategy):
        ...     tag = "mirror"
        ...
        ...     def fetch(self, timeout=None):
        ...         ...
    """

    tag: ClassVar[str] = ""

    def __init__(
        self,
        url: str,
        name: str,
        version: str,
        meta: Optional[StrategyMetadata] = None,
        config: Optional[CacheConfig] = None,
        store: Optional[CacheStore] = None,
        downloader: Optional[Downloader] = None,
        scheduler: Optional[DeferredTaskScheduler] = None,
    ):
        """Initialize strategy.

        Args:
            url: Declared download URL
            name: Artifact name (token)
            version: Artifact version
            meta: Strategy metadata from the definition
            config: Cache configuration (uses global if None)
            store: Cache store (built from config if None)
            downloader: Downloader (a new one if None)
            scheduler: Deferred task scheduler (the default if None)
        """
        self.url = url
        self.identity = ArtifactIdentity(name, version)
        self.meta: Mapping[str, Any] = MappingProxyType(dict(meta or {}))
        self.config = config or get_global_config()
        self.store = store or CacheStore(self.config)
        self.downloader = downloader or Downloader()
        self.scheduler = scheduler or get_scheduler()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.identity.slug!r}, url={self.url!r})"

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def version(self) -> str:
        return self.identity.version

    @property
    def cache(self) -> Path:
        """Cache root this strategy writes into."""
        return self.store.cache_root

    @property
    def extension(self) -> str:
        return url_extension(self.url)

    @property
    def location(self) -> CacheLocation:
        """Cache location, recomputed from the identity on every access."""
        return self.store.resolve(self.identity, self.extension)

    @property
    def cached_location(self) -> Path:
        return self.location.cached_path

    @property
    def symlink_location(self) -> Path:
        return self.location.symlink_path

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    def require_meta(self, *keys: str) -> Tuple[Any, ...]:
        """Values for ``keys`` from the metadata, in order.

        Raises:
            MissingMetadataError: If any key is absent or empty
        """
        missing = [key for key in keys if not self.meta.get(key)]
        if missing:
            logger.error(f"{self!r} is missing metadata: {', '.join(missing)}")
            raise MissingMetadataError(
                f"{self.name} requires metadata keys: {', '.join(missing)}"
            )
        return tuple(self.meta[key] for key in keys)

    def resolve_timeout(self, timeout: Optional[float]) -> Optional[float]:
        return timeout if timeout is not None else self.config.download_timeout

    @abstractmethod
    def fetch(self, timeout: Optional[float] = None) -> None:
        """Make the artifact available in the cache.

        Args:
            timeout: Download timeout in seconds (config default if None)

        Raises:
            FetchError: On any failure; nothing is retried
        """
        pass
