from __future__ import annotations

"""
Asset Minification Utility.

Thin adapters over the third-party minifiers used by the built-in asset
types. Every adapter is a pure, deterministic module-level function so it
can be shipped to an isolated build process and so identical input always
yields an identical bundle digest.
"""

import logging

import rcssmin
import rjsmin

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def minify_javascript(text: str) -> str:
    """
    Minify JavaScript source with rjsmin.

    Args:
        text: Raw JavaScript content.

    Returns:
        str: Minified JavaScript.
    """
    if not text:
        return ""
    result = rjsmin.jsmin(text)
    _log_reduction(".js", text, result)
    return result


def minify_css(text: str) -> str:
    """
    Minify a stylesheet with rcssmin.

    Args:
        text: Raw CSS content.

    Returns:
        str: Minified CSS.
    """
    if not text:
        return ""
    result = rcssmin.cssmin(text)
    _log_reduction(".css", text, result)
    return result


def passthrough(text: str) -> str:
    """Return the input untouched, for types that only concatenate."""
    return text or ""

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _log_reduction(extension: str, original: str, result: str) -> None:
    """Emit the size reduction achieved for one input."""
    original_len = len(original)
    if original_len > 0:
        reduction = 100 - (len(result) * 100 / original_len)
        logger.debug(f"Minified {extension}: {original_len} -> {len(result)} chars ({reduction:.1f}% reduction)")
