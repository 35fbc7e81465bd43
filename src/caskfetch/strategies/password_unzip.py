"""Strategy for password-protected zip archives."""

import logging
import os
import stat
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import List, Optional

from caskfetch.cache.validation import ChecksumVerifier
from caskfetch.errors import ArchiveError
from caskfetch.strategies.plain import CurlDownloadStrategy

logger = logging.getLogger(__name__)

REQUIRED_META = ("sha256", "password", "name")


def check_member_name(archive: Path, name: str) -> None:
    """Reject absolute entry names and names containing ``..``."""
    member = PurePosixPath(name.replace("\\", "/"))
    if member.is_absolute() or ".." in member.parts:
        logger.error(f"Unsafe entry {name!r} in {archive}")
        raise ArchiveError(f"Unsafe entry {name!r} in {archive}")


class PasswordUnzipDownloadStrategy(CurlDownloadStrategy):
    """Downloads, verifies and unpacks a password-protected zip.

    Steps, all inside the artifact's staging directory:

    1. Download ``<meta name>.zip`` unless it is already there.
    2. Verify its checksum. An unverified archive is never extracted; on
       mismatch the archive is kept for inspection and the cache is not
       touched.
    3. Extract it with the password into the staging directory.
    4. Repackage the extracted entries into the cached zip, keeping file
       modes and timestamps.
    5. Point the stable symlink at the cached zip and delete the archive.

    Each step checks what already exists, so a fetch interrupted halfway
    resumes. Once the cached zip exists, a fetch only relinks.

    Examples:
        >>> strategy = PasswordUnzipDownloadStrategy(
        ...     'https://host/f.zip', 'f', '1.0',
        ...     meta={'sha256': '...', 'password': 'p', 'name': 'f'})
        >>> strategy.fetch()
    """

    tag = "password_unzip"

    @property
    def extension(self) -> str:
        return ".zip"

    def fetch(self, timeout: Optional[float] = None) -> None:
        sha256, password, archive_name = self.require_meta(*REQUIRED_META)

        staged_path = self.store.staging_dir(self.identity)
        archive = staged_path / f"{archive_name}.zip"
        location = self.location

        if location.cached_path.exists():
            logger.debug(f"Already cached: {location.cached_path}")
            self.store.link(location)
            archive.unlink(missing_ok=True)
            return

        if archive.exists():
            logger.debug(f"Archive already downloaded: {archive}")
        else:
            self.downloader.download(
                self.url, archive, timeout=self.resolve_timeout(timeout)
            )

        ChecksumVerifier(self.config.checksum_algorithm).verify(archive, sha256)

        members = self.extract(archive, staged_path, password)
        self.repackage(staged_path, members, location.cached_path)

        self.store.link(location)
        archive.unlink()

    def _log_member(self, message: str) -> None:
        if self.verbose:
            logger.info(message)
        else:
            logger.debug(message)

    def extract(self, archive: Path, destination: Path, password: str) -> List[str]:
        """Extract ``archive`` into ``destination``.

        Args:
            archive: Verified zip file
            destination: Directory to extract into
            password: Archive password

        Returns:
            Sorted top-level entry names of the archive

        Raises:
            ArchiveError: If the archive is corrupt, the password is wrong, or
                an entry would land outside ``destination``
        """
        logger.info(f"Extracting {archive.name} into {destination}")
        members = set()
        try:
            with zipfile.ZipFile(archive) as zf:
                zf.setpassword(password.encode())
                for name in zf.namelist():
                    check_member_name(archive, name)
                for info in zf.infolist():
                    extracted = Path(zf.extract(info, destination))
                    mode = info.external_attr >> 16
                    if mode and not info.is_dir():
                        extracted.chmod(stat.S_IMODE(mode))
                    self._log_member(f"  inflating: {info.filename}")
                    members.add(Path(os.path.relpath(extracted, destination)).parts[0])
        except (RuntimeError, zipfile.BadZipFile, zlib.error) as e:
            logger.error(f"Cannot extract {archive}: {e}")
            raise ArchiveError(f"Cannot extract {archive}: {e}") from e

        return sorted(members)

    def repackage(self, source_dir: Path, members: List[str], target: Path) -> Path:
        """Zip ``members`` of ``source_dir`` into ``target``.

        Entries keep their paths relative to ``source_dir`` along with their
        mode bits and modification times. The zip is written next to the
        target and renamed into place.

        Raises:
            ArchiveError: If an entry cannot be read or the target written
        """
        partial = target.with_name(target.name + ".incomplete")
        logger.info(f"Repackaging {len(members)} entries into {target}")
        try:
            with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for member in members:
                    root = source_dir / member
                    paths = [root]
                    if root.is_dir():
                        paths.extend(sorted(root.rglob("*")))
                    for path in paths:
                        arcname = path.relative_to(source_dir).as_posix()
                        zf.write(path, arcname)
                        self._log_member(f"  adding: {arcname}")
            os.replace(partial, target)
        except OSError as e:
            partial.unlink(missing_ok=True)
            logger.error(f"Cannot repackage into {target}: {e}")
            raise ArchiveError(f"Cannot repackage into {target}: {e}") from e

        return target
