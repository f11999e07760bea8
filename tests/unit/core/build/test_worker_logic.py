from __future__ import annotations

"""
Unit tests for the isolated bundle build unit.

Verifies:
1. Search-path-major resolution order and first-match semantics.
2. Bundle persistence, digest-based write skipping and file mode.
3. Failure records for I/O and decoding errors.
"""

import os
import stat
from pathlib import Path
from typing import Tuple

import pytest

from assetbundler.core.assets.types import FunctionAssetType, Javascript
from assetbundler.core.build.worker import BuildJob, build_bundle_task, resolve_source_files
from assetbundler.core.processing.minifier import minify_javascript, passthrough
from assetbundler.core.services.cache import CacheDirectory


@pytest.fixture
def two_roots(tmp_path: Path) -> Tuple[Path, Path]:
    """
    Two search paths:
        first/  b.js, shared.js
        second/ a.js, shared.js
    """
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "b.js").write_text("B1;", encoding="utf-8")
    (first / "shared.js").write_text("S1;", encoding="utf-8")
    (second / "a.js").write_text("A2;", encoding="utf-8")
    (second / "shared.js").write_text("S2;", encoding="utf-8")
    return first, second


def test_resolution_is_search_path_major(two_roots: Tuple[Path, Path]) -> None:
    """TC-01: Matches in the first search path precede those in the second."""
    first, second = two_roots

    resolved = resolve_source_files(["/a.js", "/b.js", "/shared.js"], [str(first), str(second)])

    assert resolved == [
        os.path.join(str(first), "b.js"),
        os.path.join(str(first), "shared.js"),
        os.path.join(str(second), "a.js"),
    ]


def test_resolution_skips_missing_files(two_roots: Tuple[Path, Path]) -> None:
    first, _ = two_roots
    assert resolve_source_files(["/ghost.js", "/b.js"], [str(first)]) == [os.path.join(str(first), "b.js")]


def test_build_task_concatenates_in_resolution_order(two_roots: Tuple[Path, Path], tmp_path: Path) -> None:
    first, second = two_roots
    cache_path = tmp_path / "bundle.min.js"
    job = BuildJob(
        files=("/a.js", "/b.js"),
        search_paths=(str(first), str(second)),
        cache_path=str(cache_path),
        asset_type=FunctionAssetType(".js", passthrough, str),
    )

    result = build_bundle_task(job)

    assert result["ok"] is True
    assert result["written"] is True
    assert result["resolved_files"] == 2
    assert cache_path.read_text(encoding="utf-8") == "B1;A2;"
    assert result["digest"] == CacheDirectory.compute_digest("B1;A2;")


def test_build_task_skips_identical_content(public_dir: Path, cache_dir: Path) -> None:
    """TC-02: An unchanged bundle is not rewritten."""
    cache_path = cache_dir / "app.min.js"
    job = BuildJob(("/js/app.js",), (str(public_dir),), str(cache_path), Javascript())

    assert build_bundle_task(job)["written"] is True
    mtime = cache_path.stat().st_mtime_ns

    second = build_bundle_task(job)

    assert second["written"] is False
    assert cache_path.stat().st_mtime_ns == mtime
    assert cache_path.read_text(encoding="utf-8") == minify_javascript((public_dir / "js/app.js").read_text())


def test_build_task_rewrites_changed_content(public_dir: Path, cache_dir: Path) -> None:
    cache_path = cache_dir / "app.min.js"
    cache_path.write_text("stale", encoding="utf-8")
    job = BuildJob(("/js/app.js",), (str(public_dir),), str(cache_path), Javascript())

    assert build_bundle_task(job)["written"] is True
    assert cache_path.read_text(encoding="utf-8") != "stale"


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_bundle_is_world_readable(public_dir: Path, cache_dir: Path) -> None:
    cache_path = cache_dir / "app.min.js"
    build_bundle_task(BuildJob(("/js/app.js",), (str(public_dir),), str(cache_path), Javascript()))

    mode = stat.S_IMODE(cache_path.stat().st_mode)
    assert mode & 0o644 == 0o644


def test_build_task_reports_io_failure(public_dir: Path, tmp_path: Path) -> None:
    """TC-03: An unwritable cache path yields a failure record, not an exception."""
    cache_path = tmp_path / "missing-dir" / "app.min.js"
    job = BuildJob(("/js/app.js",), (str(public_dir),), str(cache_path), Javascript())

    result = build_bundle_task(job)

    assert result["ok"] is False
    assert result["error"]
    assert not cache_path.exists()


def test_build_task_reports_decoding_failure(tmp_path: Path) -> None:
    (tmp_path / "bin.js").write_bytes(b"\xff\xfe\xfa invalid utf-8")
    job = BuildJob(("/bin.js",), (str(tmp_path),), str(tmp_path / "out.min.js"), Javascript())

    result = build_bundle_task(job)

    assert result["ok"] is False
    assert not (tmp_path / "out.min.js").exists()


def test_build_task_leaves_no_temporary_files(public_dir: Path, cache_dir: Path) -> None:
    cache_path = cache_dir / "app.min.js"
    build_bundle_task(BuildJob(("/js/app.js",), (str(public_dir),), str(cache_path), Javascript()))

    assert sorted(p.name for p in cache_dir.iterdir()) == ["app.min.js"]


def test_empty_resolution_writes_empty_bundle(tmp_path: Path) -> None:
    """A group whose files exist nowhere still produces its artifact."""
    out = tmp_path / "empty.min.js"
    result = build_bundle_task(BuildJob(("/ghost.js",), (str(tmp_path),), str(out), Javascript()))

    assert result["ok"] is True
    assert result["resolved_files"] == 0
    assert out.read_text() == ""
