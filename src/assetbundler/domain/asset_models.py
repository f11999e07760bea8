from __future__ import annotations

"""
Asset Domain Data Models.

Defines the value objects exchanged between the registry, file groups,
the isolated build unit and the interface layer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from assetbundler.domain.constants import DEFAULT_CACHE_URL

# -----------------------------------------------------------------------------
# TYPE & GROUP MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AssetExtension:
    """
    Pair of extensions owned by an asset type.

    Attributes:
        source_ext: Extension of the source files (e.g. ".js").
        minified_ext: Extension of the minified bundle (e.g. ".min.js").
    """
    source_ext: str
    minified_ext: str


@dataclass
class GroupOptions:
    """
    Resolved configuration of a single file group.

    Attributes:
        minify: Whether the group is concatenated and minified on build.
        name: Bundle name; derived from the file list when minifying.
        search_paths: Ordered directories searched for the source files.
        cache_dir: Directory the minified bundle is written to.
        cache_url: URL prefix under which cache_dir is published.
        isolation: Failure domain used for builds ("process", "fork" or "thread").
        build_timeout: Seconds to wait for the build unit, None waits forever.
    """
    minify: bool = False
    name: Optional[str] = None
    search_paths: List[str] = field(default_factory=list)
    cache_dir: str = ""
    cache_url: str = DEFAULT_CACHE_URL
    isolation: str = "process"
    build_timeout: Optional[float] = None


@dataclass(frozen=True)
class CurrentScope:
    """
    Scope of the request being rendered.

    Attributes:
        scope_id: Scope identifier, typically the controller.
        sub_scope_id: Sub-scope identifier, typically the action; None means "all".
    """
    scope_id: str
    sub_scope_id: Optional[str] = None

# -----------------------------------------------------------------------------
# BUILD RESULT MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class BuildReport:
    """
    Outcome of one file group build.

    Attributes:
        cache_path: Absolute path of the bundle ("" when skipped).
        skipped: True when the group does not minify.
        written: True when the bundle content changed and was rewritten.
        resolved_files: Number of source files found on the search paths.
        digest: SHA-1 digest of the minified bundle.
    """
    cache_path: str = ""
    skipped: bool = False
    written: bool = False
    resolved_files: int = 0
    digest: str = ""


@dataclass(frozen=True)
class RegistryResult:
    """
    Result of a manifest-driven build run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        cache_dir: Directory holding the minified bundles.
        search_paths: Directories used to locate sources.
        minify: Effective registry-level minification flag.
        reports: Build reports keyed by asset type tag.
        html: Rendered tags keyed by asset type tag.
        summary: Execution counters.
    """
    ok: bool
    error: str
    cache_dir: str = ""
    search_paths: List[str] = field(default_factory=list)
    minify: bool = False
    reports: Dict[str, List[BuildReport]] = field(default_factory=dict)
    html: Dict[str, str] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        search_paths: Optional[List[str]] = None,
        reports: Optional[Dict[str, List[BuildReport]]] = None,
        stage: str = "config",
) -> RegistryResult:
    """
    Create a failed build result.

    Args:
        error: Detailed error description.
        cfg: The manifest used during the failed run.
        search_paths: Search paths resolved before the failure.
        reports: Reports of the groups built before the failure.
        stage: Phase that failed, "config" or "build".

    Returns:
        RegistryResult: An immutable error result object.
    """
    return RegistryResult(
        ok=False,
        error=error,
        cache_dir=str(cfg.get("cache_dir", "")),
        search_paths=list(search_paths or []),
        minify=bool(cfg.get("minify", False)),
        reports=dict(reports or {}),
        summary={"stage": stage},
    )


def create_success_result(
        cfg: Dict[str, Any],
        search_paths: List[str],
        reports: Dict[str, List[BuildReport]],
        html: Dict[str, str],
) -> RegistryResult:
    """
    Create a successful build result and compute its summary counters.

    Args:
        cfg: The validated manifest.
        search_paths: Directories used to locate sources.
        reports: Build reports keyed by type tag.
        html: Rendered tags keyed by type tag.

    Returns:
        RegistryResult: An immutable success result object.
    """
    all_reports = [r for items in reports.values() for r in items]
    summary = {
        "groups": len(all_reports),
        "written": sum(1 for r in all_reports if r.written),
        "unchanged": sum(1 for r in all_reports if not r.skipped and not r.written),
        "skipped": sum(1 for r in all_reports if r.skipped),
    }
    return RegistryResult(
        ok=True,
        error="",
        cache_dir=str(cfg.get("cache_dir", "")),
        search_paths=list(search_paths),
        minify=bool(cfg.get("minify", False)),
        reports=reports,
        html=html,
        summary=summary,
    )
