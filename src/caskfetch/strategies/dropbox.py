"""Strategy for cloud share links that need a direct-download flag."""

from caskfetch.strategies.plain import CurlDownloadStrategy
from caskfetch.utils import with_query

DIRECT_DOWNLOAD_QUERY = "dl=1"


class DropboxDownloadStrategy(CurlDownloadStrategy):
    """Rewrites a share link's query to ``dl=1`` before downloading.

    Share links answer with an HTML preview page unless the query forces a
    direct download. The source publishes no checksum, so the downloaded
    file is cached without any integrity check.

    Examples:
        >>> strategy = DropboxDownloadStrategy(
        ...     'https://www.dropbox.com/s/abc/f.zip?dl=0', 'f', '1.0')
        >>> strategy.download_url
        'https://www.dropbox.com/s/abc/f.zip?dl=1'
    """

    tag = "dropbox"

    @property
    def download_url(self) -> str:
        return with_query(self.url, DIRECT_DOWNLOAD_QUERY)
