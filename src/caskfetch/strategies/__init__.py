"""Interchangeable download strategies and tag resolution.

- FetchStrategy: Abstract base class for all strategies
- CurlDownloadStrategy: Download once, then link (tags 'curl', 'nounzip')
- NoDownloadStrategy: Mark the cache without transferring ('no_download')
- PasswordUnzipDownloadStrategy: Verified password-protected zips ('password_unzip')
- DropboxDownloadStrategy: Share links forced to direct download ('dropbox')
- StrategySelector: Tag resolution layered over a base resolver
"""

from caskfetch.strategies.base import FetchStrategy
from caskfetch.strategies.dropbox import DropboxDownloadStrategy
from caskfetch.strategies.no_download import NoDownloadStrategy
from caskfetch.strategies.password_unzip import PasswordUnzipDownloadStrategy
from caskfetch.strategies.plain import CurlDownloadStrategy
from caskfetch.strategies.registry import (
    StrategyRegistry,
    StrategySelector,
    detect_from_tag,
    get_registry,
    get_selector,
    register_strategy,
    resolve_strategy,
)

__all__ = [
    "FetchStrategy",
    "CurlDownloadStrategy",
    "NoDownloadStrategy",
    "PasswordUnzipDownloadStrategy",
    "DropboxDownloadStrategy",
    "StrategyRegistry",
    "StrategySelector",
    "detect_from_tag",
    "get_registry",
    "get_selector",
    "register_strategy",
    "resolve_strategy",
]
