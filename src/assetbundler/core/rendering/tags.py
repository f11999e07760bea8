from __future__ import annotations

"""
HTML Tag Synthesis.

Builds the include tags emitted for asset files. Attribute values are
escaped; attribute order is preserved so the markup is stable across runs.
"""

from html import escape
from typing import Sequence, Tuple


def render_element(tag: str, attributes: Sequence[Tuple[str, str]], *, void: bool = False) -> str:
    """
    Render a single HTML element.

    Args:
        tag: Element name.
        attributes: Ordered (name, value) pairs.
        void: Render a self-closing element without a closing tag.

    Returns:
        str: The element markup.
    """
    attrs = "".join(f' {name}="{escape(value, quote=True)}"' for name, value in attributes)
    if void:
        return f"<{tag}{attrs} />"
    return f"<{tag}{attrs}></{tag}>"


def script_tag(path: str) -> str:
    """Render a <script> tag loading a JavaScript file."""
    return render_element("script", [("src", path), ("type", "text/javascript")])


def stylesheet_tag(path: str) -> str:
    """Render a <link> tag loading a stylesheet."""
    return render_element(
        "link",
        [("rel", "stylesheet"), ("href", path), ("type", "text/css")],
        void=True,
    )
