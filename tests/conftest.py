from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A public directory populated with JavaScript and CSS sources.
3. A registry factory building in thread isolation, so test-defined asset
   types do not need to be picklable.
4. Removal of the logging handlers a test installed, since they write to
   that test's captured streams.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from assetbundler.core.assets.registry import AssetRegistry  # noqa: E402
from assetbundler.infra.logging import shutdown_logging  # noqa: E402

# -----------------------------------------------------------------------------
# Logging Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def release_logging_handlers() -> None:
    """Remove handlers bound to pytest's capture streams once a test ends."""
    yield
    shutdown_logging()


# -----------------------------------------------------------------------------
# Source Fixtures
# -----------------------------------------------------------------------------
SOURCES: Dict[str, str] = {
    "js/a.js": "var alpha = 1;\n\n// trailing comment\n",
    "js/b.js": "function beta ( x ) {\n    return x + 1;\n}\n",
    "js/app.js": "/* app */\nvar app = { name : 'demo' };\n",
    "css/a.css": "body {\n    color : red;\n}\n",
    "css/b.css": "/* reset */\np  {  margin : 0 ;  }\n",
}


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """
    Create a public directory holding the SOURCES fixtures.

    Returns:
        Path: The public directory (tmp_path / "public").
    """
    public = tmp_path / "public"
    for rel, content in SOURCES.items():
        target = public / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return public


@pytest.fixture
def cache_dir(public_dir: Path) -> Path:
    """Create the cache directory inside the public directory."""
    cache = public_dir / "minified"
    cache.mkdir()
    return cache


@pytest.fixture
def make_registry(public_dir: Path, cache_dir: Path) -> Callable[..., AssetRegistry]:
    """
    Provide a factory for registries bound to the fixture directories.

    Keyword arguments are forwarded to AssetRegistry; isolation defaults
    to "thread".
    """
    def _factory(**kwargs: Any) -> AssetRegistry:
        kwargs.setdefault("isolation", "thread")
        kwargs.setdefault("search_roots", [str(public_dir)])
        return AssetRegistry(str(cache_dir), **kwargs)

    return _factory
