"""Local artifact cache.

Key components:
- CacheStore: Maps artifact identities to cached and symlink paths
- CacheConfig: Configuration management
- ChecksumVerifier: Digest verification of downloaded files
"""

from caskfetch.cache.config import CacheConfig, get_global_config, set_global_config
from caskfetch.cache.store import CacheStore
from caskfetch.cache.validation import (
    ChecksumVerifier,
    compute_checksum,
    compute_checksum_from_bytes,
)

__all__ = [
    "CacheStore",
    "CacheConfig",
    "ChecksumVerifier",
    "compute_checksum",
    "compute_checksum_from_bytes",
    "get_global_config",
    "set_global_config",
]
