from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading of the
manifest and merging of command-line overrides, execution of the selected
command and result rendering. Exit codes: 0 on success, 1 when a build
fails, 2 for configuration problems.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from assetbundler.core.assets.types import normalize_type_tag
from assetbundler.core.pipeline.engine import run_build
from assetbundler.core.services.cache import CacheDirectory
from assetbundler.domain.asset_models import RegistryResult
from assetbundler.domain.config import get_default_config, load_manifest, save_manifest
from assetbundler.domain.errors import ConfigError
from assetbundler.infra.fs import normalize_path
from assetbundler.infra.logging import LoggingConfig, configure_logging, get_logger
from assetbundler.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_BUILD_FAILURE = 1
EXIT_CONFIG_ERROR = 2

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console first, the manifest may add a log file)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=None))

    if args.command == "init":
        return _cmd_init(args.manifest_path, force=bool(args.force))

    # 3. Manifest resolution
    try:
        manifest = load_manifest(args.manifest_path)
    except ConfigError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if manifest.get("log_file"):
        log_file = normalize_path(str(manifest["log_file"]), manifest["base_dir"])
        configure_logging(LoggingConfig(level=log_level, console=True, log_file=log_file), force=True)

    if args.command == "clean":
        return _cmd_clean(manifest)

    # 4. Merge command-line overrides
    manifest = _merge_config(manifest, cli_args.args_to_overrides(args))

    # 5. Build execution phase
    render_only = args.command == "render"
    try:
        result = run_build(
            manifest,
            render_scope=cli_args.args_to_scope(args) if render_only else None,
            build=not (render_only and args.no_build),
        )
    except KeyboardInterrupt:
        logger.warning("Build interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        msg = f"Unexpected failure during build: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_BUILD_FAILURE

    # 6. Output rendering phase
    if render_only:
        _print_tags(result, args.type_tag)
    elif args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result)

    return _exit_code(result)

# -----------------------------------------------------------------------------
# COMMANDS
# -----------------------------------------------------------------------------

def _cmd_init(path: str, *, force: bool) -> int:
    """Write a starter manifest next to the public directory."""
    if os.path.exists(path) and not force:
        msg = f"The manifest {path} already exists (use --force to overwrite)."
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    manifest = get_default_config()
    manifest["cache_dir"] = "public/minified"
    manifest["minify"] = True

    try:
        save_manifest(manifest, path)
    except OSError as e:
        msg = f"Failed to write manifest {path}: {e}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print(f"Manifest written to {path}")
    return EXIT_OK


def _cmd_clean(manifest: Dict[str, Any]) -> int:
    """Delete the minified bundles of the manifest's cache directory."""
    if not manifest.get("cache_dir"):
        print("ERROR: No cache directory configured (\"cache_dir\").", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    cache = CacheDirectory(normalize_path(str(manifest["cache_dir"]), manifest["base_dir"]))
    if not cache.exists():
        print(f"Nothing to clean: {cache.path} doesn't exist")
        return EXIT_OK

    removed = cache.purge_all()
    print(f"Removed {removed} minified file(s) from {cache.path}")
    return EXIT_OK

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the manifest.

    Only registry-level keys can be overridden from the command line.

    Args:
        base: The loaded manifest.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged manifest.
    """
    out = dict(base)
    for k in ("minify", "isolation", "build_timeout"):
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _exit_code(result: RegistryResult) -> int:
    """Map a result to the process exit code."""
    if result.ok:
        return EXIT_OK
    if result.summary.get("stage") == "build":
        return EXIT_BUILD_FAILURE
    return EXIT_CONFIG_ERROR


def _print_tags(result: RegistryResult, type_tag: Optional[str]) -> None:
    """Print the rendered include tags, one type per line."""
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    if type_tag:
        print(result.html.get(normalize_type_tag(type_tag), ""))
        return

    for html in result.html.values():
        if html:
            print(html)


def _print_human_summary(result: RegistryResult) -> None:
    """
    Format and print the build result to the standard output.

    Args:
        result: The build result to render.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    summary = result.summary
    print("Build completed.")
    print(f"Cache directory: {result.cache_dir}")
    if not result.minify:
        print("Minification disabled: sources are served individually.")

    stats_keys = {
        "groups": "Groups",
        "written": "Bundles written",
        "unchanged": "Bundles unchanged",
        "skipped": "Groups not minified",
    }
    for key, label in stats_keys.items():
        if key in summary:
            print(f"{label}: {summary[key]}")

    for tag, reports in result.reports.items():
        for report in reports:
            if report.cache_path:
                state = "written" if report.written else "unchanged"
                print(f"  - {tag}: {report.cache_path} ({state})")

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
