"""
Version resolution logic.

This package classifies ``git describe`` output and resolves it against
the caller's default version. See
:mod:`vc_version_helper.versioning.describe_classifier`,
:mod:`vc_version_helper.versioning.version_model` and
:mod:`vc_version_helper.versioning.resolver` for details.
"""

from .describe_classifier import (  # noqa: F401
    DevelopmentTag,
    ExactTag,
    Unrecognized,
    classify_describe,
)
from .resolver import MismatchError, clamp_hash_length, resolve  # noqa: F401
from .version_model import (  # noqa: F401
    Described,
    NotAvailable,
    QueryFailed,
    RepositoryDescribeResult,
    ResolvedVersion,
    VersionTriple,
)
