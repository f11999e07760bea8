from __future__ import annotations

"""
Unit tests for the minifier adapters.

Verifies comment and whitespace removal for JavaScript and CSS, empty
input handling and determinism.
"""

from assetbundler.core.processing.minifier import minify_css, minify_javascript, passthrough


def test_minify_javascript_strips_comments_and_whitespace() -> None:
    source = "// header\nfunction add ( a, b ) {\n    /* sum */\n    return a + b;\n}\n"

    result = minify_javascript(source)

    assert "header" not in result
    assert "sum" not in result
    assert "\n" not in result
    assert "return a+b" in result


def test_minify_css_strips_comments_and_whitespace() -> None:
    source = "/* theme */\nbody  {\n    color : red ;\n    margin : 0 ;\n}\n"

    result = minify_css(source)

    assert "theme" not in result
    assert result.startswith("body{")
    assert "color:red" in result


def test_empty_input() -> None:
    assert minify_javascript("") == ""
    assert minify_css("") == ""
    assert passthrough("") == ""


def test_minification_is_deterministic() -> None:
    """Identical input always yields identical output (digest stability)."""
    source = "var a = { b : 1 };\n"
    assert minify_javascript(source) == minify_javascript(source)


def test_passthrough_keeps_text() -> None:
    assert passthrough("  keep  me \n") == "  keep  me \n"
