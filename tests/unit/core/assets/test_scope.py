from __future__ import annotations

"""
Unit tests for request scope resolution.
"""

from assetbundler.core.assets.scope import resolve_scope, static_scope
from assetbundler.domain.asset_models import CurrentScope


def test_no_resolver_means_no_scope() -> None:
    assert resolve_scope(None) is None


def test_resolver_without_request_means_no_scope() -> None:
    assert resolve_scope(lambda: None) is None


def test_static_scope() -> None:
    resolver = static_scope("Admin", "index")
    assert resolve_scope(resolver) == CurrentScope("Admin", "index")
    assert resolve_scope(static_scope("Admin")) == CurrentScope("Admin", None)
