from __future__ import annotations

"""
Isolated Bundle Build Unit.

Encapsulates the work executed inside the build failure domain for a single
file group: locating the sources on the search paths, minifying and
concatenating them, and refreshing the cached bundle only when its content
changed. Runs in a child process by default, so everything it receives must
be picklable and everything it returns is a plain dictionary.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from assetbundler.core.assets.types import AssetType
from assetbundler.core.services.cache import CacheDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildJob:
    """
    Picklable description of one bundle build.

    Attributes:
        files: Normalized, root-relative source paths in group order.
        search_paths: Directories searched for each file, in priority order.
        cache_path: Absolute path of the bundle to refresh.
        asset_type: Capability providing the minifier.
    """
    files: Tuple[str, ...]
    search_paths: Tuple[str, ...]
    cache_path: str
    asset_type: AssetType

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def resolve_source_files(files: Sequence[str], search_paths: Sequence[str]) -> List[str]:
    """
    Locate source files on the search paths.

    Iterates search paths in the outer loop and files in the inner loop, so
    every match in the first search path comes before any match in the
    second one. A file contributes at most once, from the first search path
    that contains it; files found nowhere are skipped.

    Args:
        files: Root-relative file paths (e.g. "/js/app.js").
        search_paths: Ordered directories to look in.

    Returns:
        List[str]: Absolute paths in concatenation order.
    """
    resolved: List[str] = []
    processed = set()

    for directory in search_paths:
        for file in files:
            if file in processed:
                continue
            path = os.path.join(directory, file.lstrip("/"))
            if os.path.isfile(path):
                resolved.append(path)
                processed.add(file)

    missing = [f for f in files if f not in processed]
    if missing:
        logger.debug(f"Skipping files not found on any search path: {missing}")

    return resolved


def build_bundle_task(job: BuildJob) -> Dict[str, Any]:
    """
    Minify, concatenate and persist the bundle described by a job.

    I/O and decoding failures are returned as a failure record. Exceptions
    raised by the minifier itself propagate to the isolation layer.

    Args:
        job: The bundle to build.

    Returns:
        Dict[str, Any]: Status record with "ok", "cache_path", "written",
                        "resolved_files", "digest" and, on failure, "error".
    """
    try:
        sources = resolve_source_files(job.files, job.search_paths)

        chunks: List[str] = []
        for path in sources:
            with open(path, "r", encoding="utf-8") as f:
                chunks.append(job.asset_type.minify(f.read()))
        minified = "".join(chunks)

        digest = CacheDirectory.compute_digest(minified)
        write = CacheDirectory.file_digest(job.cache_path) != digest

        if write:
            _atomic_write(job.cache_path, minified)
            logger.debug(f"Wrote bundle {job.cache_path} ({len(sources)} file(s))")
        else:
            logger.debug(f"Bundle {job.cache_path} unchanged, write skipped")

        return {
            "ok": True,
            "cache_path": job.cache_path,
            "written": write,
            "resolved_files": len(sources),
            "digest": digest,
        }

    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Build failed for {job.cache_path}: {e}")
        return {
            "ok": False,
            "cache_path": job.cache_path,
            "error": str(e),
        }

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _atomic_write(path: str, content: str) -> None:
    """Write through a temporary sibling so readers never see a partial bundle."""
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".bundle-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        # mkstemp creates 0600 files; bundles are served publicly
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
