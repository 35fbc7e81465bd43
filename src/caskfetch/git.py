"""Read-only git metadata for the repository holding the definitions.

Remote and branch are read once per repository root and cached for the
lifetime of the process. The author is read on every call.
"""

import functools
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
from urllib.parse import urlparse, urlunparse


def _git(root: Path, *args: str) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", "-C", str(root), *args],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError):
        # Git not available
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def sanitize_remote_url(url: Optional[str]) -> Optional[str]:
    """Remove credentials from git remote URLs.

    Args:
        url: Git remote URL (potentially with embedded credentials)

    Returns:
        URL without userinfo, or None if it cannot be parsed

    Examples:
        >>> sanitize_remote_url('https://token@github.com/user/repo.git')
        'https://github.com/user/repo.git'
        >>> sanitize_remote_url('git@github.com:user/repo.git')
        'git@github.com:user/repo.git'
    """
    if not url:
        return None

    # SSH, git:// and local remotes carry no credentials
    if url.startswith(("git@", "ssh://", "git://", "/", "file://")):
        return url

    try:
        parsed = urlparse(url)
    except ValueError:
        return None

    if parsed.scheme in ("http", "https") and "@" in parsed.netloc:
        host_with_port = parsed.netloc.split("@")[-1]
        return urlunparse(parsed._replace(netloc=host_with_port))
    return url


def find_repository_root(start: Union[str, Path]) -> Optional[Path]:
    """Nearest directory at or above ``start`` that contains ``.git``."""
    start = Path(start).expanduser().resolve()
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


@dataclass(frozen=True)
class RepositoryInfo:
    """Git metadata of one repository.

    Attributes:
        root: Repository root directory
        remote_url: Sanitized URL of the default remote
        branch: Current branch name
    """

    root: Path
    remote_url: Optional[str] = None
    branch: Optional[str] = None

    @property
    def repo(self) -> str:
        return self.root.name

    @property
    def dir(self) -> Path:
        return self.root / ".git"

    @property
    def remote(self) -> Optional[str]:
        """Remote URL without a trailing ``.git``."""
        if self.remote_url is None:
            return None
        return self.remote_url[:-4] if self.remote_url.endswith(".git") else self.remote_url

    @property
    def remote_path(self) -> Optional[str]:
        """Path component of the remote, e.g. ``owner/repo``."""
        remote = self.remote
        if remote is None:
            return None
        if remote.startswith("git@"):
            # scp-like syntax: git@host:owner/repo
            path = remote.split(":", 1)[-1]
        else:
            path = urlparse(remote).path
        return path.strip("/") or None

    @property
    def github_repository(self) -> Optional[str]:
        """``owner/repo`` slug of the remote."""
        return self.remote_path

    @property
    def github_owner(self) -> Optional[str]:
        path = self.remote_path
        return path.split("/")[0] if path else None

    def author(self) -> Optional[str]:
        """Configured ``user.name`` for this repository."""
        return _git(self.root, "config", "user.name")


@functools.lru_cache(maxsize=None)
def _repository_info(root: Path) -> RepositoryInfo:
    remote = _git(root, "config", "--get", "remote.origin.url")
    branch = _git(root, "branch", "--show-current")
    return RepositoryInfo(
        root=root,
        remote_url=sanitize_remote_url(remote),
        branch=branch,
    )


def repository_info(start: Optional[Union[str, Path]] = None) -> Optional[RepositoryInfo]:
    """Cached git metadata for the repository enclosing ``start``.

    Args:
        start: Directory or file inside the repository (defaults to cwd)

    Returns:
        RepositoryInfo, or None if ``start`` is not inside a repository
    """
    root = find_repository_root(start if start is not None else Path.cwd())
    if root is None:
        return None
    return _repository_info(root)
