"""
Version resolution for vc_version_helper.

:func:`resolve` turns a :class:`Configuration` and the result of a
repository query into a :class:`ResolvedVersion`. It performs no I/O and
keeps no state between calls: identical inputs always produce an
identical result.

Environmental problems (no Git, no repository, unparsable describe text)
never abort resolution; they fall back to the default version and log a
single line saying so. Caller mistakes (no outputs requested, malformed
default version) raise :class:`ConfigError` subclasses, and a tag that
contradicts the default version raises :class:`MismatchError` when
``fail_on_mismatch`` is set and is logged as a warning otherwise.
"""

from __future__ import annotations

import logging
from typing import Optional

from vc_version_helper.config.loader import (
    VERSION_OUTPUTS,
    Configuration,
    MalformedDefaultError,
    MissingOutputError,
)

from .describe_classifier import DevelopmentTag, ExactTag, Unrecognized, classify_describe
from .version_model import (
    NotAvailable,
    QueryFailed,
    RepositoryDescribeResult,
    ResolvedVersion,
    VersionTriple,
)


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


MAX_HASH_LENGTH = 40


class MismatchError(Exception):
    """Raised when the default version contradicts the repository tag."""

    def __init__(self, message: str, default_version: str, tag_version: str) -> None:
        super().__init__(message)
        self.default_version = default_version
        self.tag_version = tag_version


def clamp_hash_length(hash_length: Optional[int]) -> Optional[int]:
    """Bound ``hash_length`` to [1, 40].

    ``0`` becomes ``1``; negative values and values above 40 become 40.
    ``None`` means no truncation.
    """
    if hash_length is None:
        return None
    if hash_length < 0 or hash_length > MAX_HASH_LENGTH:
        return MAX_HASH_LENGTH
    return max(hash_length, 1)


def _truncate(commit_hash: Optional[str], hash_length: Optional[int]) -> Optional[str]:
    if not commit_hash:
        return None
    if hash_length is None:
        return commit_hash
    return commit_hash[:hash_length]


def _append_build(version: str, build: str) -> str:
    """Attach build metadata, extending any ``+build`` already present."""
    separator = "." if "+" in version else "+"
    return f"{version}{separator}{build}"


def validate_configuration(config: Configuration) -> VersionTriple:
    """Check the configuration and return the default version's triple.

    Raises
    ------
    MissingOutputError
        If none of ``version``, ``full_version``, ``major``, ``minor`` or
        ``patch`` is requested.
    MalformedDefaultError
        If the default version does not start with ``MAJOR.MINOR.PATCH``.
    """
    if not any(name in VERSION_OUTPUTS for name in config.outputs):
        raise MissingOutputError(
            "At least one output (version, full_version, major, minor or patch) is required."
        )
    triple = VersionTriple.parse(config.default_version)
    if triple is None:
        raise MalformedDefaultError(
            f"Default version '{config.default_version}' does not follow semver format "
            f"(MAJOR.MINOR.PATCH)."
        )
    return triple


def _mismatch_message(
    config: Configuration, default: VersionTriple, match: ExactTag | DevelopmentTag
) -> Optional[str]:
    """Describe how the default contradicts the tag, or None when it does not."""
    tag = VersionTriple.parse(match.version)
    if isinstance(match, ExactTag):
        if default != tag:
            return (
                f"Project version ({config.default_version}) does not match "
                f"Git tag ({match.version})."
            )
    elif default < tag:
        return (
            f"Project version ({config.default_version}) must be at least equal to "
            f"tagged ancestor ({match.version})."
        )
    return None


def resolve(
    config: Configuration,
    describe_result: RepositoryDescribeResult,
    dirty: bool = False,
) -> ResolvedVersion:
    """Resolve the project version.

    Parameters
    ----------
    config : Configuration
        Caller options.
    describe_result : RepositoryDescribeResult
        What the repository query produced.
    dirty : bool
        Whether the working tree has uncommitted changes. Ignored unless
        ``config.detect_dirty`` is set.

    Returns
    -------
    ResolvedVersion
        Fully populated result.

    Raises
    ------
    ConfigError
        For a caller mistake (see :func:`validate_configuration`).
    MismatchError
        If ``config.fail_on_mismatch`` is set and the tag contradicts the
        default version.
    """
    default = validate_configuration(config)
    hash_length = clamp_hash_length(config.hash_length)
    is_dirty = bool(dirty) and config.detect_dirty

    if isinstance(describe_result, NotAvailable):
        logger.info(
            "%s, using default version %s.",
            describe_result.reason or "No repository information",
            config.default_version,
        )
        return ResolvedVersion(
            triple=default,
            short_version=str(default),
            full_version=config.default_version,
        )

    if isinstance(describe_result, QueryFailed):
        commit_hash = _truncate(describe_result.commit_hash, hash_length)
        if commit_hash:
            logger.warning(
                "Git describe failed (%s), using default version %s with commit %s.",
                describe_result.error_text,
                config.default_version,
                commit_hash,
            )
            build = f"{commit_hash}.dirty" if is_dirty else commit_hash
            full_version = _append_build(config.default_version, build)
        else:
            logger.warning(
                "Git describe failed (%s), using default version %s.",
                describe_result.error_text,
                config.default_version,
            )
            full_version = config.default_version
        return ResolvedVersion(
            triple=default,
            short_version=str(default),
            full_version=full_version,
            is_dirty=is_dirty,
            commit_hash=commit_hash,
            branch=describe_result.branch,
        )

    match = classify_describe(describe_result.raw_text, config.prefix)

    if isinstance(match, Unrecognized):
        logger.warning(
            "Failed to parse version from git describe output '%s', using default version %s.",
            describe_result.raw_text,
            config.default_version,
        )
        return ResolvedVersion(
            triple=default,
            short_version=str(default),
            full_version=config.default_version,
            is_dirty=is_dirty,
            commit_hash=_truncate(describe_result.commit_hash, hash_length),
            branch=describe_result.branch,
        )

    mismatch = _mismatch_message(config, default, match)
    if mismatch and config.fail_on_mismatch:
        raise MismatchError(mismatch, config.default_version, match.version)
    if mismatch:
        logger.warning("%s Using the tag version.", mismatch)

    triple = VersionTriple.parse(match.version)

    if isinstance(match, ExactTag):
        full_version = f"{triple}-dirty" if is_dirty else str(triple)
        resolved = ResolvedVersion(
            triple=triple,
            short_version=str(triple),
            full_version=full_version,
            is_tagged=True,
            is_dirty=is_dirty,
            tag_name=match.tag_name,
            commit_hash=_truncate(describe_result.commit_hash, hash_length),
            branch=describe_result.branch,
        )
    else:
        commit_hash = _truncate(match.commit_hash, hash_length)
        build = f"{commit_hash}.dirty" if is_dirty else commit_hash
        resolved = ResolvedVersion(
            triple=triple,
            short_version=str(triple),
            full_version=f"{triple}-dev.{match.commits}+{build}",
            is_tagged=True,
            is_development=True,
            is_dirty=is_dirty,
            tag_name=match.tag_name,
            commit_hash=commit_hash,
            commits_since_tag=match.commits,
            branch=describe_result.branch,
        )

    logger.debug("Resolved version %s from '%s'", resolved.full_version, describe_result.raw_text)
    return resolved
