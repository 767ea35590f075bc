"""
Version control system (VCS) integration.

Contains the Git client used to collect the describe text, commit hash
and working tree state that version resolution works from.
"""

from .git_client import GitClient, GitError, query_dirty, query_repository  # noqa: F401
