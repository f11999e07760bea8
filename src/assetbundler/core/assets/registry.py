from __future__ import annotations

"""
Asset Registry.

The registry is the environment an application serves its assets from. It
owns a cache directory, the ordered search paths used to locate sources,
a table of asset types and, per type, a scope -> sub-scope -> file group
mapping. Files are registered at most once per type: serving a file that is
already known silently drops it from the new group, and a group left empty
is discarded.

Typical usage:

    registry = AssetRegistry("public/minified", minify=True, search_roots=["public"])
    registry.serve("javascript", ["js/app"], name="app")
    registry.serve("css", ["css/admin"], scope="Admin", sub_scopes=["index"])
    registry.build("javascript")
    registry.render("javascript", CurrentScope("Admin", "index"))

Named asset groups bundle several serve() calls behind one name so packages
such as a UI toolkit can be pulled in with a single load_asset_group().
"""

import logging
import os
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from assetbundler.core.assets.file_group import FileGroup
from assetbundler.core.assets.scope import ScopeResolver, resolve_scope
from assetbundler.core.assets.types import AssetType, TypeRegistry, normalize_type_tag
from assetbundler.domain.asset_models import BuildReport, CurrentScope, GroupOptions
from assetbundler.domain.constants import (
    ALL_SUB_SCOPE,
    DEFAULT_CACHE_URL,
    GLOBAL_SCOPE,
    ISOLATION_MODES,
    ISOLATION_PROCESS,
)
from assetbundler.domain.errors import BuildError, ConfigError

logger = logging.getLogger(__name__)

AssetGroupInitializer = Callable[..., Any]
ScopeLike = Union[CurrentScope, Tuple[Any, Any], str, type, None]


def coerce_identifier(value: Any) -> str:
    """
    Convert a scope or sub-scope identifier into its string form.

    Classes (e.g. a controller) are identified by their name.
    """
    if isinstance(value, type):
        return value.__name__
    return str(value)


class AssetRegistry:
    """
    Environment serving, building and rendering assets.

    Args:
        cache_dir: Existing directory receiving the minified bundles.
        minify: Registry-wide switch. False disables minification for every
                group; True minifies every group that does not opt out.
        search_roots: Candidate source directories; those that exist become
                      the search paths, in order.
        types: Type table to use; a fresh one with the built-ins by default.
        isolation: Build failure domain, "process", "fork" or "thread".
                   "process" workers re-import the caller's __main__, so
                   scripts that build at import time need an
                   `if __name__ == "__main__":` guard or "fork" mode.
        build_timeout: Seconds a single group build may take; None waits forever.
        cache_url: URL prefix the cache directory is published under.
        scope_resolver: Callable returning the current request scope.

    Raises:
        ConfigError: Missing cache directory, no existing search root, or an
                     unknown isolation mode.
    """

    def __init__(
            self,
            cache_dir: str,
            minify: bool = False,
            search_roots: Optional[Sequence[str]] = None,
            *,
            types: Optional[TypeRegistry] = None,
            isolation: str = ISOLATION_PROCESS,
            build_timeout: Optional[float] = None,
            cache_url: str = DEFAULT_CACHE_URL,
            scope_resolver: Optional[ScopeResolver] = None,
    ) -> None:
        if not cache_dir or not os.path.isdir(cache_dir):
            raise ConfigError(f"The cache directory {cache_dir} doesn't exist")

        if isolation not in ISOLATION_MODES:
            raise ConfigError(f"Unknown isolation mode '{isolation}', expected one of {ISOLATION_MODES}")

        self.search_paths: List[str] = [
            os.path.abspath(root) for root in (search_roots or []) if os.path.isdir(root)
        ]
        if not self.search_paths:
            raise ConfigError("No existing public directories were found")

        self.cache_dir = os.path.abspath(cache_dir)
        self.minify = bool(minify)
        self.types = types if types is not None else TypeRegistry()
        self.isolation = isolation
        self.build_timeout = build_timeout
        self.cache_url = cache_url
        self.scope_resolver = scope_resolver

        self._scopes: Dict[str, Dict[str, Dict[str, List[FileGroup]]]] = {}
        self._known_files: Dict[str, Set[str]] = {}
        self._asset_groups: Dict[str, Tuple[AssetGroupInitializer, Tuple[Any, ...]]] = {}

        logger.debug(
            f"AssetRegistry: cache_dir={self.cache_dir} minify={self.minify} "
            f"search_paths={self.search_paths}"
        )

    # -------------------------------------------------------------------------
    # Types
    # -------------------------------------------------------------------------

    def register_type(self, tag: object, asset_type: Union[AssetType, type]) -> AssetType:
        """
        Register an additional asset type with this registry's type table.

        Raises:
            ConfigError: The tag already exists.
        """
        return self.types.register(tag, asset_type)

    # -------------------------------------------------------------------------
    # Named asset groups
    # -------------------------------------------------------------------------

    def register_asset_group(
            self,
            name: object,
            initializer: Optional[AssetGroupInitializer] = None,
            *args: Any,
    ) -> Any:
        """
        Register a named initializer serving a set of assets.

        The initializer is called with the registry as first argument,
        followed by the arguments captured here and those given to
        load_asset_group(). Without an initializer a decorator is returned:

            @registry.register_asset_group("mootools")
            def mootools(env):
                env.serve("javascript", ["js/mootools/core", "js/mootools/more"])

        Raises:
            ConfigError: The name is already registered.
        """
        if initializer is None:
            def _decorator(func: AssetGroupInitializer) -> AssetGroupInitializer:
                self.register_asset_group(name, func, *args)
                return func
            return _decorator

        key = coerce_identifier(name)
        if key in self._asset_groups:
            raise ConfigError(f'The asset group "{key}" already exists')

        self._asset_groups[key] = (initializer, tuple(args))
        logger.debug(f"AssetRegistry: Registered asset group '{key}'")
        return initializer

    def load_asset_group(self, name: object, *args: Any) -> Any:
        """
        Run a named initializer against this registry.

        Loading the same group twice is harmless: files that are already
        registered are dropped by serve().

        Returns:
            Any: Whatever the initializer returns.

        Raises:
            ConfigError: The name is unknown.
        """
        key = coerce_identifier(name)
        if key not in self._asset_groups:
            raise ConfigError(f'The asset group "{key}" doesn\'t exist')

        initializer, bound_args = self._asset_groups[key]
        logger.debug(f"AssetRegistry: Loading asset group '{key}'")
        return initializer(self, *bound_args, *args)

    # -------------------------------------------------------------------------
    # Serving
    # -------------------------------------------------------------------------

    def serve(
            self,
            type_: object,
            files: Union[str, Sequence[str]],
            *,
            minify: Optional[bool] = None,
            name: Optional[str] = None,
            scope: Any = None,
            sub_scopes: Any = None,
    ) -> Optional[FileGroup]:
        """
        Register a group of files of one type.

        Args:
            type_: Type tag such as "javascript" or "css".
            files: Paths relative to the search paths, extension optional; a
                   bare string is a single file.
            minify: Per-group switch; only honoured when the registry minifies.
            name: Bundle name; derived from the file list when omitted.
            scope: Scope (e.g. controller) to serve the files for; "global"
                   serves them everywhere.
            sub_scopes: Sub-scope or list of sub-scopes (e.g. actions) of the
                        scope; defaults to "all".

        Returns:
            Optional[FileGroup]: The stored group, or None when every file
                                 was already registered for the type.

        Raises:
            ConfigError: Unknown type or invalid group configuration.
        """
        tag = normalize_type_tag(type_)
        asset_type = self.types.get(tag)

        options, scope_id, sub_scope_ids = self._prepare_options(minify, name, scope, sub_scopes)
        group = FileGroup(files, options, asset_type)

        return self._store_group(tag, group, scope_id, sub_scope_ids)

    # -------------------------------------------------------------------------
    # Building & Rendering
    # -------------------------------------------------------------------------

    def build(self, type_: object) -> List[BuildReport]:
        """
        Build every stored group of a type.

        Each group is built once even when referenced by several
        sub-scopes. All groups are attempted; groups that succeed stay
        built when others fail.

        Returns:
            List[BuildReport]: One report per distinct group.

        Raises:
            ConfigError: The type has no stored groups.
            BuildError: The first failure of the sweep; the remaining ones
                        are attached as `failures`.
        """
        tag = normalize_type_tag(type_)
        self._require_groups(tag)

        reports: List[BuildReport] = []
        failures: List[BuildError] = []

        for group in self.groups(tag):
            try:
                reports.append(group.build())
            except BuildError as e:
                logger.error(f"AssetRegistry: Build failed for {tag} group {group.name}: {e}")
                failures.append(e)

        written = sum(1 for r in reports if r.written)
        logger.info(
            f"AssetRegistry: Built {tag}: {len(reports)} ok ({written} written), "
            f"{len(failures)} failed"
        )

        if failures:
            first = failures[0]
            first.failures = failures[1:]
            raise first

        return reports

    def render(self, type_: object, current_scope: ScopeLike = None) -> str:
        """
        Render the include tags of a type for the current scope.

        Global groups always come first. Then, when the scope has groups,
        those of its sub-scope are rendered, falling back to the scope's
        "all" bucket when the sub-scope is absent or unknown.

        Args:
            type_: Type tag to render.
            current_scope: Scope being rendered, as a CurrentScope, a
                           (scope_id, sub_scope_id) pair or a bare scope id;
                           consults the registry's scope resolver when omitted.

        Returns:
            str: Concatenated tags, possibly empty.

        Raises:
            ConfigError: The type has no stored groups or the scope pair is malformed.
        """
        tag = normalize_type_tag(type_)
        self._require_groups(tag)

        scope = self._as_scope(current_scope)
        if scope is None:
            scope = resolve_scope(self.scope_resolver)

        type_scopes = self._scopes[tag]
        buckets = [type_scopes.get(GLOBAL_SCOPE, {}).get(ALL_SUB_SCOPE, [])]

        if scope is not None:
            scope_id = coerce_identifier(scope.scope_id)
            scope_map = type_scopes.get(scope_id)
            if scope_map:
                sub_scope_id = ALL_SUB_SCOPE
                if scope.sub_scope_id is not None and coerce_identifier(scope.sub_scope_id) in scope_map:
                    sub_scope_id = coerce_identifier(scope.sub_scope_id)
                buckets.append(scope_map.get(sub_scope_id, []))

        html: List[str] = []
        rendered: Set[int] = set()
        for bucket in buckets:
            for group in bucket:
                if id(group) in rendered:
                    continue
                rendered.add(id(group))
                html.append(group.render())

        return "".join(html)

    def reset(self) -> None:
        """Forget every served file; types and asset groups are kept."""
        self._scopes.clear()
        self._known_files.clear()
        logger.debug("AssetRegistry: Reset all scopes and known files")

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def groups(self, type_: object) -> Iterator[FileGroup]:
        """Yield each distinct stored group of a type in registration order."""
        tag = normalize_type_tag(type_)
        seen: Set[int] = set()
        for sub_scopes in self._scopes.get(tag, {}).values():
            for bucket in sub_scopes.values():
                for group in bucket:
                    if id(group) not in seen:
                        seen.add(id(group))
                        yield group

    def bucket(
            self,
            type_: object,
            scope_id: Any = GLOBAL_SCOPE,
            sub_scope_id: Any = ALL_SUB_SCOPE,
    ) -> List[FileGroup]:
        """Return a copy of the groups stored under one scope/sub-scope."""
        tag = normalize_type_tag(type_)
        scope_map = self._scopes.get(tag, {}).get(coerce_identifier(scope_id), {})
        return list(scope_map.get(coerce_identifier(sub_scope_id), []))

    def known_files(self, type_: object) -> Set[str]:
        """Return a copy of the normalized paths registered for a type."""
        return set(self._known_files.get(normalize_type_tag(type_), set()))

    def types_in_use(self) -> List[str]:
        """Return the type tags that currently have stored groups."""
        return [tag for tag in self._scopes if self._has_groups(tag)]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _prepare_options(
            self,
            minify: Optional[bool],
            name: Optional[str],
            scope: Any,
            sub_scopes: Any,
    ) -> Tuple[GroupOptions, str, List[str]]:
        """Resolve the effective group options and scope identifiers."""
        if self.minify:
            effective_minify = True if minify is None else bool(minify)
        else:
            effective_minify = False

        scope_id = coerce_identifier(scope) if scope is not None else GLOBAL_SCOPE

        if sub_scopes is None:
            raw_subs: List[Any] = [ALL_SUB_SCOPE]
        elif isinstance(sub_scopes, (str, type)) or not hasattr(sub_scopes, "__iter__"):
            raw_subs = [sub_scopes]
        else:
            raw_subs = list(sub_scopes) or [ALL_SUB_SCOPE]

        sub_scope_ids: List[str] = []
        for sub in raw_subs:
            sub_id = coerce_identifier(sub)
            if sub_id not in sub_scope_ids:
                sub_scope_ids.append(sub_id)

        options = GroupOptions(
            minify=effective_minify,
            name=name,
            search_paths=list(self.search_paths),
            cache_dir=self.cache_dir,
            cache_url=self.cache_url,
            isolation=self.isolation,
            build_timeout=self.build_timeout,
        )
        return options, scope_id, sub_scope_ids

    def _store_group(
            self,
            tag: str,
            group: FileGroup,
            scope_id: str,
            sub_scope_ids: List[str],
    ) -> Optional[FileGroup]:
        """Drop already known files and file the group under its sub-scopes."""
        known = self._known_files.get(tag, set())
        dropped = [f for f in group.files if f in known]
        group.files = [f for f in group.files if f not in known]

        if dropped:
            logger.debug(f"AssetRegistry: Ignoring already served {tag} files {dropped}")

        if not group.files:
            logger.debug(f"AssetRegistry: Discarding empty {tag} group for {scope_id}")
            return None

        type_scopes = self._scopes.setdefault(tag, {GLOBAL_SCOPE: {ALL_SUB_SCOPE: []}})
        scope_map = type_scopes.setdefault(scope_id, {ALL_SUB_SCOPE: []})

        for sub_scope_id in sub_scope_ids:
            scope_map.setdefault(sub_scope_id, []).append(group)

        self._known_files.setdefault(tag, set()).update(group.files)

        logger.debug(
            f"AssetRegistry: Served {len(group.files)} {tag} file(s) under "
            f"{scope_id}/{','.join(sub_scope_ids)}"
        )
        return group

    def _has_groups(self, tag: str) -> bool:
        """Return True when at least one group is stored for the type."""
        return any(
            bucket
            for sub_scopes in self._scopes.get(tag, {}).values()
            for bucket in sub_scopes.values()
        )

    def _require_groups(self, tag: str) -> None:
        """Raise when nothing has been served for the type."""
        if not self._has_groups(tag):
            raise ConfigError(f'The type "{tag}" doesn\'t exist')

    @staticmethod
    def _as_scope(value: ScopeLike) -> Optional[CurrentScope]:
        """Accept a CurrentScope, a (scope_id, sub_scope_id) pair or a bare scope id."""
        if value is None or isinstance(value, CurrentScope):
            return value
        if isinstance(value, (str, type)):
            return CurrentScope(value)
        if isinstance(value, (tuple, list)):
            if len(value) != 2:
                raise ConfigError(
                    f"A scope pair needs a scope and a sub-scope, got {len(value)} value(s)"
                )
            scope_id, sub_scope_id = value
            return CurrentScope(scope_id, sub_scope_id)
        return CurrentScope(value)
