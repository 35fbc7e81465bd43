"""Rewrites relative requires in installed copies of a definition.

When a definition file pulls in a support library with ``require_relative``,
the copy that the installer stores under the prefix can no longer find that
library. After an install or reinstall, a deferred task locates the newest
stored copy and points the require at the library's absolute path.
"""

import logging
import os
import re
from pathlib import Path
from typing import List, Optional

from caskfetch.cache.config import CacheConfig, get_global_config
from caskfetch.tasks.scheduler import DeferredTaskScheduler, get_scheduler

logger = logging.getLogger(__name__)

INSTALL_COMMANDS = frozenset({"install", "reinstall"})

DEFINITION_SUFFIX = ".rb"

REQUIRE_RELATIVE = re.compile(r"""^\s*require_relative\s+["']([^"']+)["']\s*$""", re.M)


def definition_copy_patterns(name: str) -> List[str]:
    """Glob patterns, relative to the prefix, for stored definition copies.

    Examples:
        >>> definition_copy_patterns('foo')[0]
        'C*/foo/.metadata/*/.brew/foo.rb'
    """
    return [
        f"C*/{name}/{metadata}*/{location}/{name}{DEFINITION_SUFFIX}"
        for metadata in (".metadata/", "")
        for location in (".brew", "*/Casks")
    ]


def find_definition_copy(prefix: Path, name: str) -> Optional[Path]:
    """Most recently changed stored copy of a definition, or None."""
    candidates = {
        path
        for pattern in definition_copy_patterns(name)
        for path in Path(prefix).glob(pattern)
        if path.is_file()
    }
    if not candidates:
        return None
    return max(candidates, key=lambda path: path.stat().st_ctime)


def find_support_path(definition_path: Path) -> Optional[Path]:
    """Absolute path of the first library a definition requires relatively."""
    match = REQUIRE_RELATIVE.search(Path(definition_path).read_text())
    if match is None:
        return None
    support = Path(definition_path).parent / match.group(1)
    if not support.suffix:
        support = support.with_suffix(DEFINITION_SUFFIX)
    return support.resolve()


def patch_definition_copy(
    prefix: Path, definition_path: Path, support_path: Path
) -> Optional[Path]:
    """Replace the relative require of ``support_path`` in the stored copy.

    Args:
        prefix: Install prefix holding the stored copies
        definition_path: Original definition file
        support_path: Absolute path of the required library

    Returns:
        Path of the patched copy, or None if no copy was found
    """
    definition_path = Path(definition_path)
    copy_path = find_definition_copy(prefix, definition_path.stem)
    if copy_path is None:
        logger.debug(f"No stored copy of {definition_path.stem} under {prefix}")
        return None

    relative = os.path.relpath(
        Path(support_path).with_suffix(""), definition_path.parent
    )
    pattern = re.compile(
        rf"""(require)_relative\s+["']{re.escape(relative)}["']$""", re.M
    )
    text = copy_path.read_text()
    patched = pattern.sub(lambda m: f"{m.group(1)} '{support_path}'", text)

    if patched != text:
        copy_path.write_text(patched)
        logger.info(f"Patched require of {relative} in {copy_path}")
    return copy_path


def schedule_source_patch(
    command: str,
    definition_path: Path,
    support_path: Optional[Path] = None,
    config: Optional[CacheConfig] = None,
    scheduler: Optional[DeferredTaskScheduler] = None,
) -> bool:
    """Schedule the source patch if ``command`` installs or reinstalls.

    Args:
        command: Name of the invoking command
        definition_path: Definition file being installed
        support_path: Required library; discovered from the definition if None
        config: Cache configuration (uses global if None)
        scheduler: Scheduler to use (uses the default if None)

    Returns:
        True if a task was scheduled
    """
    if command not in INSTALL_COMMANDS:
        return False

    definition_path = Path(definition_path).resolve()
    if support_path is None:
        support_path = find_support_path(definition_path)
        if support_path is None:
            logger.debug(f"{definition_path} has no relative require to patch")
            return False

    config = config or get_global_config()
    scheduler = scheduler or get_scheduler()
    scheduler.schedule(
        config.patch_delay,
        patch_definition_copy,
        Path(config.prefix),
        definition_path,
        Path(support_path).resolve(),
    )
    return True
