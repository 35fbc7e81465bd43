"""Strategy for artifacts that are already materialized on disk."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from caskfetch.strategies.plain import CurlDownloadStrategy

logger = logging.getLogger(__name__)

EXPECTED_CATEGORY = "Cask"


def remove_stale_versions(artifact_dir: Path, keep_version: str) -> None:
    """Delete every version directory of an artifact except ``keep_version``.

    Hidden entries (such as ``.metadata``) are left alone.

    Args:
        artifact_dir: Versioned staging area of one artifact
        keep_version: Version to keep
    """
    artifact_dir = Path(artifact_dir)
    if not artifact_dir.is_dir():
        return

    for child in artifact_dir.iterdir():
        if child.name == keep_version or child.name.startswith("."):
            continue
        logger.info(f"Removing stale version {child}")
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


class NoDownloadStrategy(CurlDownloadStrategy):
    """Marks the cache as populated without transferring anything.

    Only acts on a ``Cask`` cache root; for any other category ``fetch`` is a
    no-op. On a cask root it touches the cached path and schedules removal of
    the artifact's other staged versions. The cleanup runs later in a
    detached task and is never awaited.
    """

    tag = "no_download"

    def fetch(self, timeout: Optional[float] = None) -> None:
        if self.store.category != EXPECTED_CATEGORY:
            logger.debug(
                f"Skipping {self.name}: cache category is {self.store.category!r}"
            )
            return

        self.cached_location.touch()

        self.scheduler.schedule(
            self.config.cleanup_delay,
            remove_stale_versions,
            self.store.artifact_dir(self.name),
            self.version,
        )
