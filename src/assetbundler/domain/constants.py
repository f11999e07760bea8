from __future__ import annotations

"""
Domain Constants.

Centralizes the scope identifiers, built-in type tags and manifest
defaults shared by the registry, the build engine and the CLI.
"""

from typing import Final, Tuple

CURRENT_CONFIG_VERSION = "1.0.0"

# -----------------------------------------------------------------------------
# SCOPE HIERARCHY
# -----------------------------------------------------------------------------
GLOBAL_SCOPE: Final[str] = "global"
ALL_SUB_SCOPE: Final[str] = "all"

# -----------------------------------------------------------------------------
# ASSET TYPES
# -----------------------------------------------------------------------------
JAVASCRIPT_TYPE: Final[str] = "javascript"
CSS_TYPE: Final[str] = "css"

# Marker inserted between a bundle name and its source extension
MINIFIED_MARKER: Final[str] = ".min"

# -----------------------------------------------------------------------------
# BUILD ISOLATION
# -----------------------------------------------------------------------------
ISOLATION_PROCESS: Final[str] = "process"
ISOLATION_FORK: Final[str] = "fork"
ISOLATION_THREAD: Final[str] = "thread"
ISOLATION_MODES: Final[Tuple[str, ...]] = (ISOLATION_PROCESS, ISOLATION_FORK, ISOLATION_THREAD)

# -----------------------------------------------------------------------------
# MANIFEST DEFAULTS
# -----------------------------------------------------------------------------
DEFAULT_PUBLIC_DIRS: Final[Tuple[str, ...]] = ("public",)
DEFAULT_CACHE_URL: Final[str] = "/"
MANIFEST_FILENAME: Final[str] = "assets.json"
