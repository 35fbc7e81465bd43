"""Shared fixtures for caskfetch tests."""

import os
import struct
import zlib
from pathlib import Path

import pytest

from caskfetch.cache.config import CacheConfig, set_global_config
from caskfetch.cache.store import CacheStore
from caskfetch.errors import DownloadFailedError


class FakeDownloader:
    """Serves fixture bytes by URL and records every transfer."""

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.calls = []

    def download(self, url, to, timeout=None):
        self.calls.append((url, Path(to), timeout))
        if url not in self.files:
            raise DownloadFailedError(f"Download of {url} failed: 404")
        Path(to).parent.mkdir(parents=True, exist_ok=True)
        Path(to).write_bytes(self.files[url])
        return Path(to)


class RecordingScheduler:
    """Captures scheduled tasks instead of running them."""

    def __init__(self):
        self.tasks = []

    def schedule(self, delay_seconds, action, *args, **kwargs):
        self.tasks.append((delay_seconds, action, args, kwargs))

    def run_all(self):
        for _, action, args, kwargs in self.tasks:
            action(*args, **kwargs)


def _crc_table():
    table = []
    for i in range(256):
        c = i
        for _ in range(8):
            c = (c >> 1) ^ 0xEDB88320 if c & 1 else c >> 1
        table.append(c)
    return table


_CRC_TABLE = _crc_table()


def _zipcrypto_encrypt(data: bytes, password: bytes) -> bytes:
    keys = [0x12345678, 0x23456789, 0x34567890]

    def crc(value, byte):
        return (value >> 8) ^ _CRC_TABLE[(value ^ byte) & 0xFF]

    def update(byte):
        keys[0] = crc(keys[0], byte)
        keys[1] = (keys[1] + (keys[0] & 0xFF)) & 0xFFFFFFFF
        keys[1] = (keys[1] * 134775813 + 1) & 0xFFFFFFFF
        keys[2] = crc(keys[2], keys[1] >> 24)

    for byte in password:
        update(byte)

    out = bytearray()
    for byte in data:
        temp = (keys[2] | 2) & 0xFFFF
        out.append(byte ^ (((temp * (temp ^ 1)) >> 8) & 0xFF))
        update(byte)
    return bytes(out)


def make_encrypted_zip(files, password: str) -> bytes:
    """Build a stored, ZipCrypto-encrypted zip.

    Args:
        files: Mapping of archive name -> bytes, or name -> (bytes, mode)
        password: Archive password
    """
    local_parts = []
    central_parts = []
    offset = 0
    date = (0 << 9) | (1 << 5) | 1  # 1980-01-01

    for name, content in files.items():
        mode = 0o100644
        if isinstance(content, tuple):
            content, mode = content
        crc = zlib.crc32(content) & 0xFFFFFFFF
        header = os.urandom(11) + bytes([(crc >> 24) & 0xFF])
        payload = _zipcrypto_encrypt(header + content, password.encode())
        filename = name.encode("ascii")

        local = struct.pack(
            "<4s5H3L2H",
            b"PK\x03\x04", 20, 0x1, 0, 0, date,
            crc, len(payload), len(content), len(filename), 0,
        )
        local_parts.append(local + filename + payload)

        central = struct.pack(
            "<4s6H3L5H2L",
            b"PK\x01\x02", (3 << 8) | 20, 20, 0x1, 0, 0, date,
            crc, len(payload), len(content), len(filename), 0, 0, 0, 0,
            mode << 16, offset,
        )
        central_parts.append(central + filename)
        offset += len(local) + len(filename) + len(payload)

    central_dir = b"".join(central_parts)
    end = struct.pack(
        "<4s4H2LH",
        b"PK\x05\x06", 0, 0, len(files), len(files),
        len(central_dir), offset, 0,
    )
    return b"".join(local_parts) + central_dir + end


@pytest.fixture
def config(tmp_path):
    """Cache configuration rooted in a temporary directory."""
    return CacheConfig(cache_dir=tmp_path / "cache", prefix=tmp_path / "prefix")


@pytest.fixture
def store(config):
    return CacheStore(config)


@pytest.fixture
def downloader():
    return FakeDownloader()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture(autouse=True)
def reset_global_config():
    """Keep tests from leaking global configuration."""
    set_global_config(None)
    yield
    set_global_config(None)
