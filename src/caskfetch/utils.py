"""Utility functions for caskfetch."""

from pathlib import Path, PurePosixPath
from typing import Union
from urllib.parse import urlsplit, urlunsplit

CLOUD_PREFIXES = (
    "s3://",
    "gs://",
    "gcs://",
    "az://",
    "azure://",
)


def is_cloud_path(path: Union[str, Path]) -> bool:
    """Check if a path is a cloud storage path.

    Args:
        path: Path to check

    Returns:
        True if path starts with a cloud storage protocol

    Examples:
        >>> is_cloud_path('s3://bucket/file.zip')
        True
        >>> is_cloud_path('https://host/file.zip')
        False
    """
    return str(path).startswith(CLOUD_PREFIXES)


def is_http_url(url: str) -> bool:
    return urlsplit(url).scheme in ("http", "https")


def url_extension(url: str) -> str:
    """Extension of the last path component of a URL, including the dot.

    Examples:
        >>> url_extension('https://host/dl/f.zip?dl=0')
        '.zip'
        >>> url_extension('https://host/download')
        ''
    """
    return PurePosixPath(urlsplit(url).path).suffix


def with_query(url: str, query: str) -> str:
    """Replace the query component of a URL.

    Examples:
        >>> with_query('https://www.dropbox.com/s/abc/f.zip?dl=0', 'dl=1')
        'https://www.dropbox.com/s/abc/f.zip?dl=1'
    """
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=query))


def split_cloud_path(path: str) -> tuple:
    """Split a cloud path into its directory and filename."""
    parts = path.rsplit("/", 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return "", parts[0]
