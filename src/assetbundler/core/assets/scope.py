from __future__ import annotations

"""
Request Scope Resolution.

The web layer knows which controller and action are being rendered; the
registry only needs that pair. A resolver is any callable returning the
current scope, or None when no request is in flight.
"""

from typing import Callable, Optional

from assetbundler.domain.asset_models import CurrentScope

ScopeResolver = Callable[[], Optional[CurrentScope]]


def resolve_scope(resolver: Optional[ScopeResolver]) -> Optional[CurrentScope]:
    """
    Ask a resolver for the current scope.

    Args:
        resolver: Callable supplied by the web layer, or None.

    Returns:
        Optional[CurrentScope]: The current scope, None without a resolver
                                or without an active request.
    """
    if resolver is None:
        return None
    return resolver()


def static_scope(scope_id: str, sub_scope_id: Optional[str] = None) -> ScopeResolver:
    """
    Build a resolver that always reports the same scope.

    Handy for rendering the tags of one controller/action offline.
    """
    scope = CurrentScope(str(scope_id), None if sub_scope_id is None else str(sub_scope_id))

    def _resolver() -> Optional[CurrentScope]:
        return scope

    return _resolver
