from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema: one sub-command per task
(build, render, clean, init) sharing the manifest and diagnostic options.
Provides logic to translate parsed namespaces into manifest overrides and
render scopes.
"""

import argparse
from typing import Any, Dict, Optional

from assetbundler.domain.asset_models import CurrentScope
from assetbundler.domain.constants import ISOLATION_MODES, MANIFEST_FILENAME

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the assetbundler CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-c", "--config",
        dest="manifest_path",
        default=MANIFEST_FILENAME,
        help=f"Path of the JSON manifest (default: {MANIFEST_FILENAME}).",
    )
    common.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    p = argparse.ArgumentParser(
        prog="assetbundler",
        description="Serve, minify and render JavaScript and CSS asset groups.",
    )
    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- build ---
    p_build = sub.add_parser("build", parents=[common], help="Build every minified bundle.")
    _add_registry_overrides(p_build)
    p_build.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the full result as JSON.",
    )

    # --- render ---
    p_render = sub.add_parser("render", parents=[common], help="Print the include tags of a scope.")
    _add_registry_overrides(p_render)
    p_render.add_argument("--scope", dest="scope", default=None, help="Scope (e.g. controller) to render.")
    p_render.add_argument("--sub-scope", dest="sub_scope", default=None, help="Sub-scope (e.g. action) to render.")
    p_render.add_argument(
        "--type",
        dest="type_tag",
        default=None,
        help="Render only this asset type (default: every type in use).",
    )
    p_render.add_argument(
        "--no-build",
        action="store_true",
        help="Render without building; minified groups fall back to source tags.",
    )

    # --- clean ---
    sub.add_parser("clean", parents=[common], help="Delete the minified bundles of the cache directory.")

    # --- init ---
    p_init = sub.add_parser("init", parents=[common], help="Write a starter manifest.")
    p_init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing manifest.",
    )

    return p


def _add_registry_overrides(p: argparse.ArgumentParser) -> None:
    """Options overriding registry-level manifest keys."""
    p.add_argument(
        "--no-minify",
        action="store_true",
        help="Disable minification regardless of the manifest.",
    )
    p.add_argument(
        "--isolation",
        dest="isolation",
        choices=ISOLATION_MODES,
        default=None,
        help="Failure domain used for builds.",
    )
    p.add_argument(
        "--timeout",
        dest="build_timeout",
        type=float,
        default=None,
        help="Seconds a single bundle build may take.",
    )

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into manifest overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Manifest keys to replace; unset options are omitted.
    """
    overrides: Dict[str, Any] = {}

    if getattr(args, "no_minify", False):
        overrides["minify"] = False
    if getattr(args, "isolation", None):
        overrides["isolation"] = args.isolation
    if getattr(args, "build_timeout", None) is not None:
        overrides["build_timeout"] = args.build_timeout

    return overrides


def args_to_scope(args: argparse.Namespace) -> Optional[CurrentScope]:
    """Build the render scope from --scope/--sub-scope; None without --scope."""
    scope = getattr(args, "scope", None)
    if not scope:
        return None
    return CurrentScope(scope, getattr(args, "sub_scope", None) or None)
