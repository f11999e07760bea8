from __future__ import annotations

"""
Unit tests for CLI Argument Parsing.

Verifies:
1. Sub-command selection and shared options.
2. Mapping of CLI flags to manifest overrides.
3. Render scope construction.
"""

import pytest

from assetbundler.domain.asset_models import CurrentScope
from assetbundler.interface.cli.args import args_to_overrides, args_to_scope, build_parser


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    parser = build_parser()
    return parser.parse_args(arg_list)


def test_manifest_defaults_to_assets_json():
    args = parse_args(["build"])
    assert args.command == "build"
    assert args.manifest_path == "assets.json"
    assert args.debug is False


def test_command_is_required():
    with pytest.raises(SystemExit):
        parse_args([])


def test_build_flags_mapping():
    """Verify registry flags are mapped to manifest overrides."""
    args = parse_args(["build", "-c", "site/assets.json", "--no-minify", "--isolation", "thread", "--timeout", "30"])

    assert args.manifest_path == "site/assets.json"
    assert args_to_overrides(args) == {"minify": False, "isolation": "thread", "build_timeout": 30.0}


def test_unset_flags_produce_no_overrides():
    assert args_to_overrides(parse_args(["build"])) == {}
    assert args_to_overrides(parse_args(["clean"])) == {}


def test_invalid_isolation_rejected():
    with pytest.raises(SystemExit):
        parse_args(["build", "--isolation", "fiber"])


def test_render_scope():
    args = parse_args(["render", "--scope", "Admin", "--sub-scope", "index", "--type", "css", "--debug"])

    assert args_to_scope(args) == CurrentScope("Admin", "index")
    assert args.type_tag == "css"
    assert args.debug is True
    assert args.no_build is False


def test_render_without_scope():
    assert args_to_scope(parse_args(["render"])) is None
    assert args_to_scope(parse_args(["render", "--scope", "Admin"])) == CurrentScope("Admin", None)
