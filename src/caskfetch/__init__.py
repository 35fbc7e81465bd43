"""caskfetch: Pluggable download strategies for a package manager's artifact cache."""

__version__ = "0.1.0"

from caskfetch.cache import CacheConfig, CacheStore, ChecksumVerifier
from caskfetch.errors import (
    ArchiveError,
    CacheUnavailableError,
    ChecksumMismatchError,
    DownloadFailedError,
    FetchError,
    MissingMetadataError,
    UnknownStrategyError,
)
from caskfetch.models import ArtifactIdentity, CacheLocation, StrategyMetadata
from caskfetch.strategies import (
    FetchStrategy,
    StrategySelector,
    resolve_strategy,
)

__all__ = [
    "__version__",
    "ArtifactIdentity",
    "CacheLocation",
    "StrategyMetadata",
    "CacheConfig",
    "CacheStore",
    "ChecksumVerifier",
    "FetchStrategy",
    "StrategySelector",
    "resolve_strategy",
    "FetchError",
    "MissingMetadataError",
    "ChecksumMismatchError",
    "CacheUnavailableError",
    "DownloadFailedError",
    "UnknownStrategyError",
    "ArchiveError",
]
