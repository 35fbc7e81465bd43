"""Tests for the downloader."""

import pytest
import requests

from caskfetch.download import Downloader
from caskfetch.errors import DownloadFailedError


class FakeResponse:
    def __init__(self, chunks, status=200):
        self.chunks = chunks
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Error")

    def iter_content(self, chunk_size=None):
        for chunk in self.chunks:
            if isinstance(chunk, Exception):
                raise chunk
            yield chunk


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, stream=False, timeout=None):
        self.requests.append((url, stream, timeout))
        if self.error is not None:
            raise self.error
        return self.response


class TestHttpDownload:
    """Test HTTP(S) downloads."""

    def test_download_writes_body(self, tmp_path):
        session = FakeSession(FakeResponse([b"abc", b"def"]))
        target = tmp_path / "sub" / "f.zip"

        result = Downloader(session).download("https://host/f.zip", target, timeout=3)

        assert result == target
        assert target.read_bytes() == b"abcdef"
        assert session.requests == [("https://host/f.zip", True, 3)]
        assert not (tmp_path / "sub" / "f.zip.incomplete").exists()

    def test_http_error(self, tmp_path):
        session = FakeSession(FakeResponse([], status=404))
        target = tmp_path / "f.zip"

        with pytest.raises(DownloadFailedError, match="404"):
            Downloader(session).download("https://host/f.zip", target)
        assert not target.exists()

    def test_connection_error(self, tmp_path):
        session = FakeSession(error=requests.ConnectionError("refused"))

        with pytest.raises(DownloadFailedError, match="refused") as exc:
            Downloader(session).download("https://host/f.zip", tmp_path / "f.zip")
        assert isinstance(exc.value.__cause__, requests.ConnectionError)

    def test_interrupted_transfer_leaves_no_partial_file(self, tmp_path):
        chunks = [b"abc", requests.exceptions.ChunkedEncodingError("reset")]
        session = FakeSession(FakeResponse(chunks))
        target = tmp_path / "f.zip"

        with pytest.raises(DownloadFailedError):
            Downloader(session).download("https://host/f.zip", target)

        assert list(tmp_path.iterdir()) == []

    def test_unsupported_scheme(self, tmp_path):
        with pytest.raises(DownloadFailedError, match="Unsupported URL scheme"):
            Downloader(FakeSession()).download("ftp://host/f.zip", tmp_path / "f.zip")

    def test_unwritable_destination(self, tmp_path):
        """Test a destination whose parent cannot be created fails cleanly."""
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")

        with pytest.raises(DownloadFailedError) as exc:
            Downloader(FakeSession(FakeResponse([b"abc"]))).download(
                "https://host/f.zip", blocker / "sub" / "f.zip"
            )
        assert isinstance(exc.value.__cause__, OSError)
        assert blocker.read_bytes() == b""


class TestCloudDownload:
    """Test cloud storage downloads through cloudfiles."""

    def test_download_from_bucket(self, tmp_path, monkeypatch):
        opened = []

        class FakeCloudFiles:
            def __init__(self, path):
                opened.append(path)

            def get(self, filename):
                return b"bucket data" if filename == "f.zip" else None

        monkeypatch.setattr("cloudfiles.CloudFiles", FakeCloudFiles)
        target = tmp_path / "f.zip"

        Downloader(FakeSession()).download("gs://bucket/artifacts/f.zip", target)

        assert target.read_bytes() == b"bucket data"
        assert opened == ["gs://bucket/artifacts"]

    def test_missing_object(self, tmp_path, monkeypatch):
        class FakeCloudFiles:
            def __init__(self, path):
                pass

            def get(self, filename):
                return None

        monkeypatch.setattr("cloudfiles.CloudFiles", FakeCloudFiles)

        with pytest.raises(DownloadFailedError, match="not found"):
            Downloader(FakeSession()).download("s3://bucket/f.zip", tmp_path / "f.zip")
        assert not (tmp_path / "f.zip").exists()
