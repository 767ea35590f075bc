"""
Classification of ``git describe`` output.

Describe text comes in two recognised shapes: an exact tag such as
``v1.2.3`` or a development description such as ``v1.2.3-5-gabc1234f9``
(five commits after ``v1.2.3``, HEAD at ``abc1234f9``). The patterns are
tried in order and the first match wins. Anything else is reported as
:class:`Unrecognized` so the caller can fall back to its default version.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Pattern, Tuple, Union


@dataclass(frozen=True)
class ExactTag:
    """HEAD sits exactly on a version tag."""

    tag_name: str
    version: str


@dataclass(frozen=True)
class DevelopmentTag:
    """HEAD is ``commits`` commits ahead of a version tag."""

    tag_name: str
    version: str
    commits: int
    commit_hash: str


@dataclass(frozen=True)
class Unrecognized:
    """Describe text matched none of the known shapes."""

    raw_text: str


DescribeMatch = Union[ExactTag, DevelopmentTag, Unrecognized]


def _exact(match: re.Match) -> DescribeMatch:
    return ExactTag(tag_name=match.group("tag"), version=match.group("version"))


def _development(match: re.Match) -> DescribeMatch:
    return DevelopmentTag(
        tag_name=match.group("tag"),
        version=match.group("version"),
        commits=int(match.group("commits")),
        commit_hash=match.group("hash"),
    )


def build_patterns(prefix: str = "") -> List[Tuple[Pattern[str], Callable[..., DescribeMatch]]]:
    """Return the ordered ``(pattern, builder)`` pairs for ``prefix``.

    A configured prefix is matched literally, so characters such as ``.``
    or ``+`` in it carry no regex meaning. Without a prefix an optional
    leading ``v`` is accepted, so ``v1.2.3`` and ``1.2.3`` both count as
    version tags.
    """
    lead = re.escape(prefix) if prefix else "v?"
    tag = rf"(?P<tag>{lead}(?P<version>\d+\.\d+\.\d+))"
    return [
        (re.compile(rf"^{tag}$"), _exact),
        (re.compile(rf"^{tag}-(?P<commits>\d+)-g(?P<hash>[0-9a-f]+)$"), _development),
    ]


def classify_describe(raw_text: str, prefix: str = "") -> DescribeMatch:
    """Classify describe text into an exact tag, a development tag or neither.

    Parameters
    ----------
    raw_text : str
        Output of ``git describe --tags``; surrounding whitespace is ignored.
    prefix : str
        Literal text expected before the version digits (e.g. ``"v"``).
        When empty, an optional ``v`` is accepted instead.

    Returns
    -------
    DescribeMatch
        :class:`ExactTag`, :class:`DevelopmentTag` or :class:`Unrecognized`.
    """
    text = raw_text.strip()
    for pattern, builder in build_patterns(prefix):
        match = pattern.match(text)
        if match:
            return builder(match)
    return Unrecognized(raw_text=raw_text)
