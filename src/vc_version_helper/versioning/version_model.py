"""
Data models for version resolution.

The :class:`VersionTriple` holds the numeric ``MAJOR.MINOR.PATCH`` part of
a semantic version. The ``NotAvailable``, ``QueryFailed`` and ``Described``
records describe what the repository query produced, and
:class:`ResolvedVersion` is the immutable result handed back to callers.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Union


TRIPLE_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True, order=True)
class VersionTriple:
    """Numeric ``MAJOR.MINOR.PATCH`` triple.

    Ordering compares the fields as integers, major first, so
    ``VersionTriple(10, 0, 0) > VersionTriple(9, 0, 0)``.
    """

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> Optional["VersionTriple"]:
        """Parse the leading triple of ``text``.

        Trailing pre-release or build text is ignored. Returns ``None``
        when ``text`` does not start with ``MAJOR.MINOR.PATCH``.
        """
        match = TRIPLE_PATTERN.match(text)
        if not match:
            return None
        return cls(*(int(group) for group in match.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class NotAvailable:
    """Git is missing or the source directory is not a repository."""

    reason: str = ""


@dataclass(frozen=True)
class QueryFailed:
    """``git describe`` ran but failed (e.g. no matching tag yet).

    ``commit_hash`` carries the bare HEAD hash when it could still be read.
    """

    error_text: str
    commit_hash: Optional[str] = None
    branch: Optional[str] = None


@dataclass(frozen=True)
class Described:
    """``git describe`` produced text such as ``v1.2.3-5-gabc1234f9``."""

    raw_text: str
    commit_hash: Optional[str] = None
    branch: Optional[str] = None


RepositoryDescribeResult = Union[NotAvailable, QueryFailed, Described]


@dataclass(frozen=True)
class ResolvedVersion:
    """Result of a version resolution.

    Attributes
    ----------
    triple : VersionTriple
        The resolved numeric version (tag's triple when tagged).
    short_version : str
        ``MAJOR.MINOR.PATCH`` of the resolved version.
    full_version : str
        SemVer string with pre-release and build metadata.
    is_tagged : bool
        A matching tag was found in history.
    is_development : bool
        HEAD is ahead of the nearest tag.
    is_dirty : bool
        The working tree has uncommitted changes.
    tag_name : Optional[str]
        Full tag text, prefix included.
    commit_hash : Optional[str]
        Abbreviated commit hash, truncated to the configured length.
    commits_since_tag : Optional[int]
        Number of commits between the tag and HEAD.
    branch : Optional[str]
        Checked-out branch, when it was queried.
    """

    triple: VersionTriple
    short_version: str
    full_version: str
    is_tagged: bool = False
    is_development: bool = False
    is_dirty: bool = False
    tag_name: Optional[str] = None
    commit_hash: Optional[str] = None
    commits_since_tag: Optional[int] = None
    branch: Optional[str] = None

    @property
    def major(self) -> int:
        return self.triple.major

    @property
    def minor(self) -> int:
        return self.triple.minor

    @property
    def patch(self) -> int:
        return self.triple.patch

    def as_dict(self) -> Dict[str, Any]:
        """Flatten the record into output-name keyed values."""
        data = asdict(self)
        del data["triple"]
        data["version"] = data.pop("short_version")
        data["major"] = self.major
        data["minor"] = self.minor
        data["patch"] = self.patch
        return data
