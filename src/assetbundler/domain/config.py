from __future__ import annotations

"""
Build Manifest Management.

A manifest is a JSON document describing a registry (cache directory,
public roots, minification switch, isolation) and the groups it serves.
Relative paths inside a manifest are resolved against the manifest's own
directory by the build engine.
"""

import json
import logging
import os
from typing import Any, Dict

from assetbundler.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_PUBLIC_DIRS,
    ISOLATION_PROCESS,
)
from assetbundler.domain.errors import ConfigError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """
    Generate the default manifest.

    Returns:
        Dict[str, Any]: Default values for every manifest key.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "base_dir": os.getcwd(),

        # Registry
        "cache_dir": "",
        "cache_url": "",
        "minify": False,
        "roots": ["."],
        "publics": list(DEFAULT_PUBLIC_DIRS),

        # Build execution
        "isolation": ISOLATION_PROCESS,
        "build_timeout": None,

        # Served assets
        "groups": [],
        "asset_groups": {},
        "load": [],

        # Diagnostics
        "log_file": "",
    }


def get_default_group() -> Dict[str, Any]:
    """Default values of a single served group entry."""
    return {
        "type": "",
        "files": [],
        "minify": None,
        "name": None,
        "scope": None,
        "sub_scopes": None,
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_manifest(path: str) -> Dict[str, Any]:
    """
    Read a manifest from disk and merge it over the defaults.

    Args:
        path: Path of the JSON manifest.

    Returns:
        Dict[str, Any]: Raw (not yet validated) manifest with "base_dir" set
                        to the manifest's directory.

    Raises:
        ConfigError: The file is missing, unreadable or not a JSON object.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"The manifest {path} doesn't exist")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"The manifest {path} must contain a JSON object")

    manifest = get_default_config()
    manifest.update(data)
    manifest["base_dir"] = os.path.dirname(os.path.abspath(path))

    logger.debug(f"Manifest loaded from {path}")
    return manifest


def save_manifest(manifest: Dict[str, Any], path: str) -> None:
    """
    Write a manifest to disk, without the derived "base_dir" key.

    Args:
        manifest: Manifest to persist.
        path: Destination path.
    """
    data = {k: v for k, v in manifest.items() if k != "base_dir"}
    data["version"] = CURRENT_CONFIG_VERSION
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=4)
    logger.debug(f"Manifest saved to {path}")
