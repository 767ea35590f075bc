"""
Command line interface for the vc_version_helper tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``gitversion`` command. It loads the
configuration, queries Git, resolves the version and prints the
requested fields on stdout. Diagnostics go to stderr so that build
scripts can capture stdout directly, e.g.
``VERSION=$(gitversion -o full_version)``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import click
from click.core import ParameterSource

from vc_version_helper import __version__
from vc_version_helper.config.loader import (
    ALL_OUTPUTS,
    ConfigError,
    build_configuration,
    load_config,
)
from vc_version_helper.vcs.git_client import query_dirty, query_repository
from vc_version_helper.versioning.resolver import (
    MismatchError,
    resolve,
    validate_configuration,
)
from vc_version_helper.versioning.version_model import NotAvailable, ResolvedVersion

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_CONFIG_ERROR = 3
EXIT_VERSION_MISMATCH = 4

PACKAGE_LOGGER = "vc_version_helper"


# ---------------------------------------------------------------------------
# Status display
# ---------------------------------------------------------------------------

def print_error(message: str) -> None:
    """Print an error message."""
    click.echo(f"✗ {message}", err=True)


def configure_logging(verbose: bool) -> None:
    """Send package log records to stderr.

    Module loggers start detached from the root logger; they are
    reattached here once a handler exists.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )
    for name in list(logging.root.manager.loggerDict):
        if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
            logging.getLogger(name).propagate = True


# ---------------------------------------------------------------------------
# Output rendering
# ---------------------------------------------------------------------------

def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_outputs(resolved: ResolvedVersion, outputs: Iterable[str], output_format: str) -> str:
    """Render the requested fields of ``resolved``.

    ``text`` prints the bare value for a single field and ``name=value``
    lines otherwise; ``json`` prints one object keyed by field name.
    """
    data = resolved.as_dict()
    selected: Dict[str, Any] = {name: data[name] for name in outputs}
    if output_format == "json":
        return json.dumps(selected, indent=2)
    if len(selected) == 1:
        return _format_value(next(iter(selected.values())))
    return "\n".join(f"{name}={_format_value(value)}" for name, value in selected.items())


def _explicit(ctx: click.Context, name: str, value: Any) -> Any:
    """Return ``value`` only if the user passed the option."""
    if ctx.get_parameter_source(name) == ParameterSource.DEFAULT:
        return None
    return value


@click.command()
@click.option(
    "--source-dir",
    "-C",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to query (default: current directory).",
)
@click.option("--default-version", default=None, help="Version used when no tag resolves (default: 0.0.0).")
@click.option("--prefix", default=None, help="Literal text before the version in tag names, e.g. 'v'.")
@click.option("--hash-length", type=int, default=None, help="Commit hash length, clamped to 1-40.")
@click.option("--fail-on-mismatch", is_flag=True, help="Fail if the Git tag contradicts the default version.")
@click.option("--dirty/--no-dirty", "detect_dirty", default=True, help="Mark uncommitted changes in the full version.")
@click.option(
    "--output",
    "-o",
    "outputs",
    multiple=True,
    type=click.Choice(ALL_OUTPUTS),
    help="Field to print; repeatable (default: version fields).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="gitversion")
@click.pass_context
def main(
    ctx: click.Context,
    source_dir: Optional[Path],
    default_version: Optional[str],
    prefix: Optional[str],
    hash_length: Optional[int],
    fail_on_mismatch: bool,
    detect_dirty: bool,
    outputs: tuple,
    output_format: str,
    verbose: bool,
) -> None:
    """Print the project version derived from Git tags and history.

    Tags must look like PREFIX + MAJOR.MINOR.PATCH. On a tag the version is
    the tag itself; after a tag it is MAJOR.MINOR.PATCH-dev.N+HASH; without
    a tag the default version is used.
    """
    configure_logging(verbose)

    try:
        source = source_dir if source_dir is not None else Path.cwd()

        try:
            file_values = load_config(source)
            # The config file may switch dirty detection off; the flag
            # only overrides it when given explicitly.
            dirty_override = _explicit(ctx, "detect_dirty", detect_dirty)
            if dirty_override is None and "detect_dirty" not in file_values:
                dirty_override = detect_dirty
            config = build_configuration(
                source,
                file_values,
                default_version=default_version,
                prefix=prefix,
                hash_length=hash_length,
                fail_on_mismatch=_explicit(ctx, "fail_on_mismatch", fail_on_mismatch),
                detect_dirty=dirty_override,
                outputs=outputs or None,
            )
            validate_configuration(config)
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        describe_result = query_repository(
            config.source_dir,
            config.prefix,
            config.hash_length,
            branch="branch" in config.outputs,
        )
        dirty = False
        if config.detect_dirty and not isinstance(describe_result, NotAvailable):
            dirty = query_dirty(config.source_dir)

        try:
            resolved = resolve(config, describe_result, dirty=dirty)
        except MismatchError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_VERSION_MISMATCH)

        logger.debug("Resolved %s", resolved)
        click.echo(render_outputs(resolved, config.outputs, output_format))
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except click.exceptions.Exit:
        # Click uses its own Exit exception; re-raise to let Click handle it
        raise
    except Exception as exc:
        logging.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
