"""
Configuration for vc_version_helper.

Provides the :class:`Configuration` record and a loader for the optional
``.gitversion.json`` file. See :mod:`vc_version_helper.config.loader` for
implementation details.
"""

from .loader import (  # noqa: F401
    ConfigError,
    Configuration,
    MalformedDefaultError,
    MissingOutputError,
    build_configuration,
    load_config,
)
