"""Checksum verification for downloaded archives."""

import hashlib
from pathlib import Path
from typing import Union

from caskfetch.errors import ChecksumMismatchError

SUPPORTED_ALGORITHMS = ("md5", "sha256")


def _new_hasher(algorithm: str):
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported algorithm: {algorithm}")
    return hashlib.new(algorithm)


def compute_checksum(file_path: Union[str, Path], algorithm: str = "sha256") -> str:
    """Compute checksum for a file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('md5', 'sha256')

    Returns:
        Hex digest of checksum

    Raises:
        ValueError: If algorithm not supported
    """
    hasher = _new_hasher(algorithm)

    # Read file in chunks to handle large files
    with open(file_path, "rb") as f:
        while chunk := f.read(8192):
            hasher.update(chunk)

    return hasher.hexdigest()


def compute_checksum_from_bytes(data: bytes, algorithm: str = "sha256") -> str:
    """Compute checksum from bytes.

    Args:
        data: Bytes to hash
        algorithm: Hash algorithm ('md5', 'sha256')

    Returns:
        Hex digest of checksum
    """
    hasher = _new_hasher(algorithm)
    hasher.update(data)
    return hasher.hexdigest()


class ChecksumVerifier:
    """Verifies a file's digest against an expected value.

    The file is read once and never modified. On mismatch it is left in
    place so the caller can inspect or delete it.

    Examples:
        >>> verifier = ChecksumVerifier()
        >>> verifier.verify(Path("f.zip"), "9f86d08...")
    """

    def __init__(self, algorithm: str = "sha256"):
        _new_hasher(algorithm)
        self.algorithm = algorithm

    def verify(self, file_path: Union[str, Path], expected_digest: str) -> None:
        """Verify file checksum matches expected value.

        Args:
            file_path: Path to file
            expected_digest: Expected hex digest (case-insensitive)

        Raises:
            ChecksumMismatchError: If checksums don't match
        """
        actual = compute_checksum(file_path, self.algorithm)

        if actual != expected_digest.strip().lower():
            raise ChecksumMismatchError(
                f"Checksum mismatch for {file_path}: "
                f"expected {expected_digest}, got {actual}"
            )

    def matches(self, file_path: Union[str, Path], expected_digest: str) -> bool:
        """Return True if the file's digest equals ``expected_digest``."""
        try:
            self.verify(file_path, expected_digest)
        except ChecksumMismatchError:
            return False
        return True
