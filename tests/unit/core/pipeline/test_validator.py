from __future__ import annotations

"""
Unit tests for the Manifest Validation Service.

Verifies:
1. Type coercion and defaults for registry-level keys.
2. Group entry normalization and discarding of invalid entries.
3. Strict mode error raising.
"""

import pytest

from assetbundler.core.pipeline.validator import validate_config


def test_non_dict_manifest_falls_back_to_defaults() -> None:
    cfg, warnings = validate_config(["not", "a", "dict"])

    assert cfg["groups"] == []
    assert cfg["isolation"] == "process"
    assert len(warnings) == 1


def test_non_dict_manifest_strict_raises() -> None:
    with pytest.raises(TypeError):
        validate_config("nope", strict=True)


def test_coercions() -> None:
    """TC-01: Loose values are converted with a warning."""
    cfg, warnings = validate_config({
        "cache_dir": "  public/minified  ",
        "minify": "yes",
        "roots": "., apps/admin",
        "publics": ["public", 3, " "],
        "build_timeout": 30,
    })

    assert cfg["cache_dir"] == "public/minified"
    assert cfg["minify"] is True
    assert cfg["roots"] == [".", "apps/admin"]
    assert cfg["publics"] == ["public"]
    assert cfg["build_timeout"] == 30.0
    assert len(warnings) == 3


@pytest.mark.parametrize("timeout", [0, -5, "soon", True])
def test_invalid_timeout_disables_timeout(timeout) -> None:
    cfg, warnings = validate_config({"build_timeout": timeout})
    assert cfg["build_timeout"] is None
    assert warnings


def test_invalid_isolation_reset() -> None:
    cfg, warnings = validate_config({"isolation": "fiber"})
    assert cfg["isolation"] == "process"
    assert any("isolation" in w for w in warnings)

    with pytest.raises(ValueError):
        validate_config({"isolation": "fiber"}, strict=True)


def test_group_entries_normalized() -> None:
    """TC-02: Group entries get defaults and list coercion."""
    cfg, warnings = validate_config({
        "groups": [
            {"type": "javascript", "files": "js/a, js/b", "minify": 0, "sub_scopes": "index,show"},
            {"type": "css", "files": ["css/a"], "name": "  ", "scope": "Admin"},
        ]
    })

    first, second = cfg["groups"]
    assert first["files"] == ["js/a", "js/b"]
    assert first["minify"] is False
    assert first["sub_scopes"] == ["index", "show"]
    assert first["scope"] is None
    assert second["name"] is None
    assert second["scope"] == "Admin"
    assert second["minify"] is None
    assert warnings


def test_invalid_group_entries_discarded() -> None:
    cfg, warnings = validate_config({
        "groups": [
            "js/a",
            {"files": ["js/a"]},
            {"type": "javascript", "files": []},
            {"type": "javascript", "files": ["js/ok"]},
        ]
    })

    assert [g["files"] for g in cfg["groups"]] == [["js/ok"]]
    assert len(warnings) == 3


def test_invalid_group_entry_strict_raises() -> None:
    with pytest.raises(ValueError):
        validate_config({"groups": [{"type": "javascript"}]}, strict=True)


def test_asset_groups_and_load() -> None:
    cfg, _ = validate_config({
        "asset_groups": {"ui": [{"type": "css", "files": ["css/a"]}, {"oops": True}]},
        "load": "ui",
    })

    assert list(cfg["asset_groups"]) == ["ui"]
    assert [g["files"] for g in cfg["asset_groups"]["ui"]] == [["css/a"]]
    assert cfg["load"] == ["ui"]


def test_asset_groups_wrong_type() -> None:
    cfg, warnings = validate_config({"asset_groups": ["ui"]})
    assert cfg["asset_groups"] == {}
    assert warnings
