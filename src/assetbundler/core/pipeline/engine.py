from __future__ import annotations

"""
Manifest-driven build orchestration.

This module coordinates a complete run for a manifest:
1. Validates the manifest and resolves its paths.
2. Discovers the public directories used as search paths.
3. Constructs the registry and serves every configured group.
4. Registers and loads the named asset groups.
5. Builds every type in use (when minifying).
6. Renders the include tags for the requested scope.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from assetbundler.core.assets.registry import AssetRegistry, ScopeLike
from assetbundler.core.pipeline.validator import validate_config
from assetbundler.domain.asset_models import (
    BuildReport,
    RegistryResult,
    create_error_result,
    create_success_result,
)
from assetbundler.domain.constants import DEFAULT_CACHE_URL
from assetbundler.domain.errors import AssetError, BuildError
from assetbundler.infra.fs import discover_public_dirs, normalize_path, public_url_for

logger = logging.getLogger(__name__)


def run_build(
        config: Optional[Dict[str, Any]],
        *,
        render_scope: ScopeLike = None,
        build: bool = True,
        minify_override: Optional[bool] = None,
) -> RegistryResult:
    """
    Execute a full serve/build/render run for a manifest.

    Never raises for configuration or build problems: they are reported
    through the returned result.

    Args:
        config: The manifest dictionary (raw or partial).
        render_scope: Scope to render tags for; only global groups otherwise.
        build: If False, groups are served and rendered without building.
        minify_override: Replaces the manifest's "minify" switch when set.

    Returns:
        RegistryResult: Status, build reports, rendered tags and summary.
    """
    logger.info("Build run started.")

    # -------------------------------------------------------------------------
    # 1) Manifest & Path Normalization
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Manifest Warning: {warning}")

    if minify_override is not None:
        cfg["minify"] = bool(minify_override)

    base_dir = normalize_path(cfg.get("base_dir", ""), os.getcwd())

    if not cfg["cache_dir"]:
        msg = "No cache directory configured (\"cache_dir\")."
        logger.error(msg)
        return create_error_result(msg, cfg)

    cache_dir = normalize_path(cfg["cache_dir"], base_dir)
    cfg["cache_dir"] = cache_dir

    try:
        os.makedirs(cache_dir, exist_ok=True)
    except OSError as e:
        msg = f"Failed to create cache directory {cache_dir}: {e}"
        logger.critical(msg)
        return create_error_result(msg, cfg)

    roots = [normalize_path(root, base_dir) for root in cfg["roots"]]
    search_paths = discover_public_dirs(roots, cfg["publics"])
    logger.debug(f"Search paths: {search_paths}")

    cache_url = cfg["cache_url"] or public_url_for(cache_dir, search_paths, DEFAULT_CACHE_URL)

    # -------------------------------------------------------------------------
    # 2) Registry & Serving
    # -------------------------------------------------------------------------
    try:
        registry = AssetRegistry(
            cache_dir,
            minify=cfg["minify"],
            search_roots=search_paths,
            isolation=cfg["isolation"],
            build_timeout=cfg["build_timeout"],
            cache_url=cache_url,
        )

        for name, entries in cfg["asset_groups"].items():
            registry.register_asset_group(name, _serve_entries, entries)

        for name in cfg["load"]:
            registry.load_asset_group(name)

        _serve_entries(registry, cfg["groups"])
    except AssetError as e:
        msg = f"Invalid registry configuration: {e}"
        logger.error(msg)
        return create_error_result(msg, cfg, search_paths)

    # -------------------------------------------------------------------------
    # 3) Build
    # -------------------------------------------------------------------------
    reports: Dict[str, List[BuildReport]] = {}
    if build:
        for tag in registry.types_in_use():
            try:
                reports[tag] = registry.build(tag)
            except BuildError as e:
                failed = 1 + len(e.failures)
                msg = f"Build failed for {tag} ({failed} group(s)): {e}"
                logger.error(msg)
                return create_error_result(msg, cfg, search_paths, reports, stage="build")

    # -------------------------------------------------------------------------
    # 4) Render
    # -------------------------------------------------------------------------
    html: Dict[str, str] = {}
    for tag in registry.types_in_use():
        html[tag] = registry.render(tag, render_scope)

    result = create_success_result(cfg, search_paths, reports, html)
    logger.info(
        f"Build run finished: {result.summary['groups']} group(s), "
        f"{result.summary['written']} written, {result.summary['unchanged']} unchanged."
    )
    return result


def _serve_entries(registry: AssetRegistry, entries: List[Dict[str, Any]]) -> None:
    """Serve validated manifest group entries; also used as asset group initializer."""
    for entry in entries:
        registry.serve(
            entry["type"],
            entry["files"],
            minify=entry.get("minify"),
            name=entry.get("name"),
            scope=entry.get("scope"),
            sub_scopes=entry.get("sub_scopes"),
        )
