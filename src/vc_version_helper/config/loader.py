"""
Configuration loading for vc_version_helper.

Settings come from two places: an optional JSON file named
``.gitversion.json`` in the source directory, and explicit values passed
by the caller (usually the CLI). Explicit values win. The loader only
checks that each key has the right type; whether the default version is
a valid semantic version is checked by the resolver, which raises
:class:`MalformedDefaultError`.

If the configuration file is malformed or a key has the wrong type, a
:class:`ConfigError` is raised.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


logger = logging.getLogger(__name__)
# Attach a null handler so nothing is printed until the CLI configures
# logging; propagation is re-enabled there.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILENAME = ".gitversion.json"
DEFAULT_VERSION = "0.0.0"

# Outputs that satisfy the "at least one output requested" rule.
VERSION_OUTPUTS: Tuple[str, ...] = ("version", "full_version", "major", "minor", "patch")
# Informational outputs that may be requested alongside them.
EXTRA_OUTPUTS: Tuple[str, ...] = (
    "tag_name",
    "commit_hash",
    "commits_since_tag",
    "is_tagged",
    "is_development",
    "is_dirty",
    "branch",
)
ALL_OUTPUTS: Tuple[str, ...] = VERSION_OUTPUTS + EXTRA_OUTPUTS


class ConfigError(Exception):
    """Raised when the version configuration is missing or invalid."""

    pass


class MissingOutputError(ConfigError):
    """Raised when no version output was requested."""

    pass


class MalformedDefaultError(ConfigError):
    """Raised when the default version is not ``MAJOR.MINOR.PATCH[...]``."""

    pass


@dataclass(frozen=True)
class Configuration:
    """Options controlling a single version resolution.

    Attributes
    ----------
    default_version : str
        Version used when no tag resolves; also the expected version for
        the mismatch check.
    prefix : str
        Literal text required before the tag's version digits.
    source_dir : Path
        Directory in which Git is queried.
    hash_length : Optional[int]
        Truncation length for the displayed commit hash. ``None`` keeps the
        hash as Git printed it.
    fail_on_mismatch : bool
        Turn tag/default divergence into a :class:`MismatchError`.
    detect_dirty : bool
        Mark uncommitted changes in the full version.
    outputs : Tuple[str, ...]
        Names of the requested output fields.
    """

    default_version: str = DEFAULT_VERSION
    prefix: str = ""
    source_dir: Path = field(default_factory=Path.cwd)
    hash_length: Optional[int] = None
    fail_on_mismatch: bool = False
    detect_dirty: bool = False
    outputs: Tuple[str, ...] = VERSION_OUTPUTS


# key -> accepted types
_KEY_TYPES: Dict[str, Tuple[type, ...]] = {
    "default_version": (str,),
    "prefix": (str,),
    "hash_length": (int,),
    "fail_on_mismatch": (bool,),
    "detect_dirty": (bool,),
    "outputs": (list,),
}


def load_config(source_dir: Path) -> Dict[str, Any]:
    """Load ``.gitversion.json`` from ``source_dir`` and return its values.

    A missing file is not an error: an empty dictionary is returned and
    the built-in defaults apply.

    Raises:
        ConfigError: If the file is unreadable, is not a JSON object,
            contains unknown keys, or a value has the wrong type.
    """
    config_path = Path(source_dir) / CONFIG_FILENAME

    if not config_path.exists():
        logger.debug("No configuration file at %s, using defaults", config_path)
        return {}

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    unknown = sorted(key for key in data if key not in _KEY_TYPES)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key, value in data.items():
        expected = _KEY_TYPES[key]
        # bool is an int subclass; reject it where a number is expected.
        if not isinstance(value, expected) or (bool not in expected and isinstance(value, bool)):
            names = " or ".join(t.__name__ for t in expected)
            raise ConfigError(f"'{key}' must be of type {names}")

    if "outputs" in data:
        data["outputs"] = _validate_outputs(data["outputs"])

    logger.debug("Loaded version configuration from: %s", config_path)
    return data


def _validate_outputs(outputs: Any) -> Tuple[str, ...]:
    names = tuple(outputs)
    bad = [name for name in names if name not in ALL_OUTPUTS]
    if bad:
        raise ConfigError(
            f"Unknown output(s): {', '.join(map(str, bad))}. "
            f"Choose from: {', '.join(ALL_OUTPUTS)}"
        )
    return names


def build_configuration(
    source_dir: Optional[Path] = None,
    file_values: Optional[Dict[str, Any]] = None,
    **overrides: Any,
) -> Configuration:
    """Merge file values and explicit overrides into a :class:`Configuration`.

    Overrides set to ``None`` are ignored so that unset CLI options do not
    mask values from the configuration file.
    """
    values: Dict[str, Any] = dict(file_values or {})
    values.update({key: value for key, value in overrides.items() if value is not None})

    unknown = sorted(key for key in values if key not in _KEY_TYPES)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    if "outputs" in values:
        values["outputs"] = _validate_outputs(values["outputs"])

    return Configuration(
        source_dir=Path(source_dir) if source_dir is not None else Path.cwd(),
        **values,
    )
