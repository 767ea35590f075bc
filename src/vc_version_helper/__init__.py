"""
Top-level package for vc_version_helper.

Resolves a project's semantic version from Git tags and commit history.
The ``gitversion`` command is defined in ``vc_version_helper.cli``; library
callers use :func:`resolve` together with
:func:`vc_version_helper.vcs.query_repository`.
"""

__all__ = [
    "__version__",
    "__default_version__",
    "Configuration",
    "ResolvedVersion",
    "resolve",
]

from vc_version_helper.config.loader import Configuration  # noqa: E402
from vc_version_helper.versioning.resolver import resolve  # noqa: E402
from vc_version_helper.versioning.version_model import ResolvedVersion  # noqa: E402

# Declared version - bumped manually before tagging a release
__default_version__ = "0.1.0"

# Full version - resolved from the v<MAJOR>.<MINOR>.<PATCH> tags of this
# checkout, or the declared version when installed without Git metadata
try:
    from vc_version_helper._version import generate_version
    __version__ = generate_version(__default_version__)
except Exception:
    # Fallback if resolution fails (e.g. unexpected Git behaviour)
    __version__ = __default_version__
