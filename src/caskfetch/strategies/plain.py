"""Default strategy: download once, then link."""

import logging
from typing import Optional

from caskfetch.strategies.base import FetchStrategy

logger = logging.getLogger(__name__)


class CurlDownloadStrategy(FetchStrategy):
    """Downloads the URL to the cached path unless it is already there.

    Subclasses change where the bytes come from by overriding
    ``download_url``.
    """

    tag = "curl"

    @property
    def download_url(self) -> str:
        return self.url

    def fetch(self, timeout: Optional[float] = None) -> None:
        location = self.location

        if location.cached_path.exists():
            logger.debug(f"Already downloaded: {location.cached_path}")
        else:
            self.downloader.download(
                self.download_url,
                location.cached_path,
                timeout=self.resolve_timeout(timeout),
            )

        self.store.link(location)
