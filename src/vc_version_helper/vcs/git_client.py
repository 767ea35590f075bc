"""
Git client implementation for vc_version_helper.

This module wraps the read-only Git queries needed to resolve a version:
``describe``, ``rev-parse`` and ``status``. All subprocess calls go
through :meth:`GitClient._run` so that unit tests can mock them easily.
:func:`query_repository` packages the answers into a
:data:`RepositoryDescribeResult` and never raises for environmental
problems such as a missing Git executable.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from vc_version_helper.versioning.version_model import (
    Described,
    NotAvailable,
    QueryFailed,
    RepositoryDescribeResult,
)
from vc_version_helper.versioning.resolver import clamp_hash_length


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_ABBREV = 9
MIN_ABBREV = 4


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for querying a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def is_available() -> bool:
        """Return True if a ``git`` executable is on the PATH."""
        return shutil.which("git") is not None

    @staticmethod
    def is_repo(path: Path) -> bool:
        """Return True if ``path`` is the root of a Git repository."""
        return (path / ".git").exists()

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is
            True, or cannot be started at all.
        """
        full_cmd = ["git", "-C", str(self.repo_root)] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("Failed to start Git: %s", e)
            raise GitError(f"Failed to start Git: {e}") from e

        if check and result.returncode != 0:
            logger.debug(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def describe(self, prefix: str = "", abbrev: int = DEFAULT_ABBREV) -> str:
        """Describe HEAD relative to the nearest ``<prefix>*.*.*`` tag.

        Returns
        -------
        str
            Text such as ``v1.2.3`` or ``v1.2.3-5-gabc1234f9``.

        Raises
        ------
        GitError
            If no matching tag exists or Git fails.
        """
        result = self._run(
            ["describe", "--match", f"{prefix}*.*.*", "--tags", f"--abbrev={abbrev}"],
            check=True,
        )
        return result.stdout.strip()

    def get_commit_hash(self, length: int = DEFAULT_ABBREV) -> str:
        """Return the abbreviated hash of HEAD.

        Raises
        ------
        GitError
            If HEAD cannot be resolved (e.g. no commits yet).
        """
        result = self._run(["rev-parse", f"--short={length}", "HEAD"], check=True)
        return result.stdout.strip()

    def get_current_branch(self) -> str:
        """Get the name of the current branch (``HEAD`` when detached)."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], check=True)
        return result.stdout.strip()

    def is_dirty(self) -> bool:
        """Return True if tracked files have uncommitted changes.

        Untracked files (status ``??``) do not make the tree dirty.
        """
        result = self._run(["status", "--porcelain"], check=True)
        for line in result.stdout.splitlines():
            if len(line) < 3:
                continue
            if line[:2] == "??":
                continue
            return True
        return False


def query_repository(
    source_dir: Path,
    prefix: str = "",
    hash_length: Optional[int] = None,
    branch: bool = False,
) -> RepositoryDescribeResult:
    """Query Git in ``source_dir`` for the nearest version tag.

    The checked-out branch is only read when ``branch`` is True.

    Returns
    -------
    RepositoryDescribeResult
        :class:`NotAvailable` when Git is missing or ``source_dir`` is not a
        repository root, :class:`QueryFailed` (with the bare HEAD hash when
        it can be read) when ``git describe`` fails, otherwise
        :class:`Described` with the describe text and HEAD hash.
    """
    source_dir = Path(source_dir)
    if not GitClient.is_available():
        return NotAvailable("Git executable not found")
    if not GitClient.is_repo(source_dir):
        return NotAvailable(f"Directory '{source_dir}' is not a git repository")

    client = GitClient(source_dir)
    clamped = clamp_hash_length(hash_length)
    # Git never abbreviates below four characters; shorter hashes are
    # truncated by the resolver.
    abbrev = DEFAULT_ABBREV if clamped is None else max(clamped, MIN_ABBREV)

    branch_name = _branch(client) if branch else None
    try:
        raw_text = client.describe(prefix, abbrev)
    except GitError as exc:
        return QueryFailed(
            error_text=str(exc),
            commit_hash=_head_hash(client, abbrev),
            branch=branch_name,
        )
    return Described(raw_text=raw_text, commit_hash=_head_hash(client, abbrev), branch=branch_name)


def _head_hash(client: GitClient, abbrev: int) -> Optional[str]:
    try:
        return client.get_commit_hash(abbrev)
    except GitError as exc:
        logger.debug("Failed to get commit hash from Git: %s", exc)
        return None


def _branch(client: GitClient) -> Optional[str]:
    try:
        return client.get_current_branch()
    except GitError as exc:
        logger.debug("Failed to get current branch from Git: %s", exc)
        return None


def query_dirty(source_dir: Path) -> bool:
    """Return the dirty flag for ``source_dir``, False when it cannot be read."""
    try:
        return GitClient(Path(source_dir)).is_dirty()
    except GitError as exc:
        logger.debug("Could not determine working tree state: %s", exc)
        return False
