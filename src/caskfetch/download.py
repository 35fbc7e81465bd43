"""Downloader used by fetch strategies.

HTTP(S) URLs are fetched with ``requests``; cloud storage paths
(``s3://``, ``gs://``, ...) go through ``cloudfiles``. Retries, if any,
belong to the transport; this module never retries.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import requests

from caskfetch.errors import DownloadFailedError
from caskfetch.utils import is_cloud_path, is_http_url, split_cloud_path

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class Downloader:
    """Writes the body of a URL to a local file.

    The body is streamed to ``<target>.incomplete`` and renamed into place,
    so a failed transfer never leaves a truncated target behind.

    Examples:
        >>> Downloader().download('https://host/f.zip', Path('/tmp/f.zip'))
        PosixPath('/tmp/f.zip')
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def download(
        self, url: str, to: Union[str, Path], timeout: Optional[float] = None
    ) -> Path:
        """Download ``url`` to ``to``.

        Args:
            url: Source URL
            to: Destination file path
            timeout: Transport timeout in seconds

        Returns:
            Destination path

        Raises:
            DownloadFailedError: On any transport failure
        """
        target = Path(to)
        partial = target.with_name(target.name + ".incomplete")
        logger.info(f"Downloading {url} to {target}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if is_cloud_path(url):
                self._download_cloud(url, partial)
            elif is_http_url(url):
                self._download_http(url, partial, timeout)
            else:
                raise DownloadFailedError(f"Unsupported URL scheme: {url}")
            os.replace(partial, target)
        except DownloadFailedError:
            self._discard(partial)
            raise
        except (requests.RequestException, OSError) as e:
            self._discard(partial)
            logger.error(f"Download of {url} failed: {e}")
            raise DownloadFailedError(f"Download of {url} failed: {e}") from e

        return target

    @staticmethod
    def _discard(partial: Path) -> None:
        # exists() is False when the parent is not a directory
        if partial.exists():
            partial.unlink()

    def _download_http(self, url: str, to: Path, timeout: Optional[float]) -> None:
        with self.session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(to, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)

    def _download_cloud(self, url: str, to: Path) -> None:
        from cloudfiles import CloudFiles

        dir_path, filename = split_cloud_path(url)
        try:
            content = CloudFiles(dir_path).get(filename)
        except Exception as e:
            raise DownloadFailedError(f"Download of {url} failed: {e}") from e

        if content is None:
            raise DownloadFailedError(f"Download of {url} failed: not found")

        with open(to, "wb") as f:
            f.write(content)
