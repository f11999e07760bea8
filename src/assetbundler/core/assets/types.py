from __future__ import annotations

"""
Asset Type Capabilities and Type Registry.

An asset type supplies what differs between JavaScript, CSS and any other
text asset: its extension pair, its minifier and its HTML tag. File groups
receive the capability object at construction instead of subclassing.

The TypeRegistry maps type tags (e.g. "javascript") to capabilities. Each
AssetRegistry owns one, pre-populated with the built-in types, and a tag
can only be registered once.
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from assetbundler.core.processing.minifier import minify_css, minify_javascript
from assetbundler.core.rendering.tags import script_tag, stylesheet_tag
from assetbundler.domain.asset_models import AssetExtension
from assetbundler.domain.constants import CSS_TYPE, JAVASCRIPT_TYPE, MINIFIED_MARKER
from assetbundler.domain.errors import ConfigError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CAPABILITY INTERFACE
# -----------------------------------------------------------------------------

class AssetType:
    """
    Capability describing one kind of text asset.

    Concrete types set `extension` and implement `minify` and `html_tag`.
    Instances are shipped to the isolated build process, so concrete types
    must be defined at module level and hold picklable state only.
    """

    extension: Optional[AssetExtension] = None

    def minify(self, text: str) -> str:
        """
        Minify the content of a single source file.

        Raises:
            NotImplementedError: The type does not define a minifier.
        """
        raise NotImplementedError(
            f"{type(self).__name__} must implement minify()"
        )

    def html_tag(self, path: str) -> str:
        """
        Render the include tag for a single public path.

        Raises:
            NotImplementedError: The type does not define a tag renderer.
        """
        raise NotImplementedError(
            f"{type(self).__name__} must implement html_tag()"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(extension={self.extension!r})"


class Javascript(AssetType):
    """JavaScript files, minified with rjsmin and loaded with <script>."""

    extension = AssetExtension(".js", ".min.js")

    def minify(self, text: str) -> str:
        return minify_javascript(text)

    def html_tag(self, path: str) -> str:
        return script_tag(path)


class CSS(AssetType):
    """Stylesheets, minified with rcssmin and loaded with <link>."""

    extension = AssetExtension(".css", ".min.css")

    def minify(self, text: str) -> str:
        return minify_css(text)

    def html_tag(self, path: str) -> str:
        return stylesheet_tag(path)


class FunctionAssetType(AssetType):
    """
    Asset type assembled from plain callables.

    Convenient for registering extra types without writing a class. The
    callables must be module-level functions when builds run in a separate
    process; lambdas and closures only work with thread isolation.

    Args:
        source_ext: Source file extension, with or without the leading dot.
        minifier: Function turning raw text into minified text.
        tag_renderer: Function turning a public path into an HTML tag.
        minified_ext: Bundle extension; defaults to ".min" + source_ext.
    """

    def __init__(
            self,
            source_ext: str,
            minifier: Callable[[str], str],
            tag_renderer: Callable[[str], str],
            minified_ext: Optional[str] = None,
    ) -> None:
        ext = source_ext if source_ext.startswith(".") else "." + source_ext
        self.extension = AssetExtension(ext, minified_ext or MINIFIED_MARKER + ext)
        self._minifier = minifier
        self._tag_renderer = tag_renderer

    def minify(self, text: str) -> str:
        return self._minifier(text)

    def html_tag(self, path: str) -> str:
        return self._tag_renderer(path)

# -----------------------------------------------------------------------------
# TYPE REGISTRY
# -----------------------------------------------------------------------------

def normalize_type_tag(tag: object) -> str:
    """
    Convert a type tag into its canonical form.

    ":javascript", "JavaScript" and "javascript" all map to "javascript".

    Raises:
        ConfigError: The tag is empty.
    """
    normalized = str(tag if tag is not None else "").strip().lstrip(":").lower()
    if not normalized:
        raise ConfigError("Asset type tags must not be empty")
    return normalized


class TypeRegistry:
    """
    Write-once table of asset types keyed by tag.

    Args:
        include_builtins: Pre-register "javascript" and "css".
    """

    def __init__(self, include_builtins: bool = True) -> None:
        self._types: Dict[str, AssetType] = {}
        if include_builtins:
            self.register(JAVASCRIPT_TYPE, Javascript())
            self.register(CSS_TYPE, CSS())

    def register(self, tag: object, asset_type: Union[AssetType, type]) -> AssetType:
        """
        Register an asset type under a new tag.

        Args:
            tag: Type tag such as "less".
            asset_type: AssetType instance, or an AssetType subclass to instantiate.

        Returns:
            AssetType: The registered capability.

        Raises:
            ConfigError: The tag is already registered.
        """
        name = normalize_type_tag(tag)
        if name in self._types:
            raise ConfigError(f'The type "{name}" already exists')

        if isinstance(asset_type, type):
            asset_type = asset_type()

        self._types[name] = asset_type
        logger.debug(f"TypeRegistry: Registered '{name}' -> {asset_type!r}")
        return asset_type

    def get(self, tag: object) -> AssetType:
        """
        Look up the capability registered for a tag.

        Raises:
            ConfigError: The tag is unknown.
        """
        name = normalize_type_tag(tag)
        try:
            return self._types[name]
        except KeyError:
            raise ConfigError(f'The type "{name}" doesn\'t exist') from None

    def tags(self) -> List[str]:
        """Return the registered tags in registration order."""
        return list(self._types)

    def __contains__(self, tag: object) -> bool:
        try:
            return normalize_type_tag(tag) in self._types
        except ConfigError:
            return False

    def __len__(self) -> int:
        return len(self._types)
