from __future__ import annotations

"""
Integration tests for the manifest-driven build engine.

Verifies that run_build() serves, builds and renders a manifest end to end
and reports configuration and build failures through the result object.
"""

import hashlib
from pathlib import Path
from typing import Any, Dict

import pytest

from assetbundler.core.pipeline.engine import run_build
from assetbundler.domain.asset_models import CurrentScope


@pytest.fixture
def manifest(tmp_path: Path, public_dir: Path) -> Dict[str, Any]:
    """A manifest rooted at tmp_path, building in thread isolation."""
    return {
        "base_dir": str(tmp_path),
        "cache_dir": "public/minified",
        "minify": True,
        "isolation": "thread",
        "groups": [
            {"type": "javascript", "files": ["js/app"], "name": "app"},
            {"type": "css", "files": ["css/a", "css/b"]},
            {"type": "javascript", "files": ["js/a"], "scope": "Admin", "sub_scopes": ["index"]},
        ],
    }


def test_run_build_success(manifest: Dict[str, Any], public_dir: Path) -> None:
    """TC-01: Every group is built and rendered with URLs under the public directory."""
    result = run_build(manifest, render_scope=CurrentScope("Admin", "index"))

    assert result.ok is True, result.error
    cache = public_dir / "minified"
    css_name = hashlib.sha1("/css/a.css/css/b.css".encode("utf-8")).hexdigest() + ".min.css"

    assert (cache / "app.min.js").is_file()
    assert (cache / css_name).is_file()
    assert result.search_paths == [str(public_dir)]
    assert result.summary == {"groups": 3, "written": 3, "unchanged": 0, "skipped": 0}
    assert result.html["css"] == f'<link rel="stylesheet" href="/minified/{css_name}" type="text/css" />'
    assert result.html["javascript"].startswith('<script src="/minified/app.min.js"')
    assert result.html["javascript"].count("<script") == 2


def test_run_build_is_idempotent(manifest: Dict[str, Any]) -> None:
    run_build(manifest)
    second = run_build(manifest)

    assert second.ok is True
    assert second.summary["written"] == 0
    assert second.summary["unchanged"] == 3


def test_run_build_without_minify(manifest: Dict[str, Any], public_dir: Path) -> None:
    result = run_build(manifest, minify_override=False)

    assert result.ok is True
    assert result.summary["skipped"] == 3
    assert list((public_dir / "minified").iterdir()) == []
    assert result.html["css"] == (
        '<link rel="stylesheet" href="/css/a.css" type="text/css" />'
        '<link rel="stylesheet" href="/css/b.css" type="text/css" />'
    )


def test_render_without_build_lists_sources(manifest: Dict[str, Any]) -> None:
    result = run_build(manifest, build=False)

    assert result.ok is True
    assert result.reports == {}
    assert result.html["javascript"] == '<script src="/js/app.js" type="text/javascript"></script>'


def test_asset_groups_are_loaded(manifest: Dict[str, Any]) -> None:
    manifest["groups"] = []
    manifest["minify"] = False
    manifest["asset_groups"] = {"ui": [{"type": "css", "files": ["css/a"]}]}
    manifest["load"] = ["ui"]

    result = run_build(manifest)

    assert result.ok is True
    assert result.html == {"css": '<link rel="stylesheet" href="/css/a.css" type="text/css" />'}


def test_missing_cache_dir_setting(manifest: Dict[str, Any]) -> None:
    manifest["cache_dir"] = ""

    result = run_build(manifest)

    assert result.ok is False
    assert "cache_dir" in result.error
    assert result.summary["stage"] == "config"


def test_unknown_type_is_config_error(manifest: Dict[str, Any]) -> None:
    manifest["groups"].append({"type": "less", "files": ["style"]})

    result = run_build(manifest)

    assert result.ok is False
    assert '"less"' in result.error
    assert result.summary["stage"] == "config"


def test_unknown_asset_group_is_config_error(manifest: Dict[str, Any]) -> None:
    manifest["load"] = ["missing"]
    result = run_build(manifest)
    assert result.ok is False
    assert result.summary["stage"] == "config"


def test_no_public_directory(manifest: Dict[str, Any], tmp_path: Path) -> None:
    manifest["publics"] = ["static"]
    manifest["cache_dir"] = str(tmp_path / "cache")

    result = run_build(manifest)

    assert result.ok is False
    assert result.summary["stage"] == "config"


def test_build_failure_reported(manifest: Dict[str, Any], public_dir: Path) -> None:
    """TC-02: An undecodable source fails the build stage."""
    (public_dir / "js" / "app.js").write_bytes(b"\xff\xfe broken")

    result = run_build(manifest)

    assert result.ok is False
    assert result.summary["stage"] == "build"
    assert "javascript" in result.error
