"""
Version of vc_version_helper itself, resolved with its own machinery.

The default version is set manually in ``__init__.py``. When the package
runs from a Git checkout tagged ``v<MAJOR>.<MINOR>.<PATCH>``, the tag and
commit history take over, exactly as they would for any other project:

* on a tag: ``0.2.0``
* after a tag: ``0.2.0-dev.3+1a2b3c4d5``
* no tag yet: ``0.1.0+1a2b3c4d5``

Installed copies (no ``.git`` next to the sources) report the default.
"""

from pathlib import Path
from typing import Optional

from vc_version_helper.config.loader import Configuration
from vc_version_helper.vcs.git_client import query_repository
from vc_version_helper.versioning.resolver import resolve


TAG_PREFIX = "v"


def _checkout_root() -> Path:
    # src/vc_version_helper/_version.py -> checkout root
    return Path(__file__).resolve().parents[2]


def generate_version(default_version: str, repo_path: Optional[Path] = None) -> str:
    """
    Generate the full version string for this package.

    Args:
        default_version: The version declared in ``__init__.py``.
        repo_path: Repository to query. Defaults to the checkout holding
            this file.

    Returns:
        The resolved full version (SemVer 2.0.0).
    """
    source_dir = repo_path if repo_path is not None else _checkout_root()
    config = Configuration(
        default_version=default_version,
        prefix=TAG_PREFIX,
        source_dir=source_dir,
        outputs=("full_version",),
    )
    describe_result = query_repository(source_dir, prefix=TAG_PREFIX)
    return resolve(config, describe_result).full_version
