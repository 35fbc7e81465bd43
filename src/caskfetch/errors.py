"""Exceptions raised by fetch strategies.

Every failure of a strategy's ``fetch`` propagates synchronously to the
caller as a subclass of :class:`FetchError`. Nothing here is retried.
"""


class FetchError(Exception):
    """Base exception for fetch failures."""

    pass


class MissingMetadataError(FetchError):
    """Raised when a required key is absent from strategy metadata."""

    pass


class ChecksumMismatchError(FetchError):
    """Raised when downloaded content does not match its expected digest."""

    pass


class CacheUnavailableError(FetchError):
    """Raised when the cache root or staging area cannot be written."""

    pass


class DownloadFailedError(FetchError):
    """Raised when the downloader cannot retrieve a URL."""

    pass


class UnknownStrategyError(FetchError, KeyError):
    """Raised when no resolver knows a strategy tag."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class ArchiveError(FetchError):
    """Raised when a verified archive cannot be extracted or repackaged."""

    pass
