from __future__ import annotations

"""
File Group Model.

A file group is one set of same-type source files plus their build options.
It normalizes the file paths it is given, derives the bundle name, runs the
isolated minify-and-cache build and renders the include tags matching its
build state: one tag per source file, or a single tag for the bundle once
a minifying group has been built.
"""

import dataclasses
import hashlib
import logging
import os
import posixpath
import re
from typing import Iterable, List, Optional

from assetbundler.core.assets.types import AssetType
from assetbundler.core.build.isolation import run_isolated
from assetbundler.core.build.worker import BuildJob, build_bundle_task
from assetbundler.core.services.cache import CacheDirectory
from assetbundler.domain.asset_models import AssetExtension, BuildReport, GroupOptions
from assetbundler.domain.constants import MINIFIED_MARKER
from assetbundler.domain.errors import BuildError, ConfigError

logger = logging.getLogger(__name__)

_REPEATED_SLASHES = re.compile(r"/{2,}")

# -----------------------------------------------------------------------------
# PATH HELPERS
# -----------------------------------------------------------------------------

def collapse_slashes(path: str) -> str:
    """Replace every run of slashes with a single one."""
    return _REPEATED_SLASHES.sub("/", path)


def normalize_asset_path(path: str, source_ext: str) -> str:
    """
    Normalize a file path relative to the public directories.

    Appends the source extension when the path's extension differs, roots
    the path with "/" and collapses repeated slashes. Idempotent.

    Args:
        path: Raw path such as "js/app" or "/css/reset.css".
        source_ext: Extension of the asset type, e.g. ".js".

    Returns:
        str: The normalized path, e.g. "/js/app.js".
    """
    file = str(path)
    if _extension_of(file) != source_ext:
        file += source_ext
    if not file.startswith("/"):
        file = "/" + file
    return collapse_slashes(file)


def _extension_of(path: str) -> str:
    """Last dotted suffix of the base name; dot-files count as an extension."""
    base = posixpath.basename(path)
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""

# -----------------------------------------------------------------------------
# FILE GROUP
# -----------------------------------------------------------------------------

class FileGroup:
    """
    Set of same-type files managed as one buildable and renderable unit.

    Args:
        files: Source paths relative to the search paths, with or without extension.
        options: Group configuration; copied, never shared with the caller.
        asset_type: Capability supplying the extension, minifier and tag.

    Raises:
        ConfigError: No files or search paths, missing cache directory, or
                     an asset type without an extension pair.
    """

    def __init__(
            self,
            files: Iterable[str],
            options: Optional[GroupOptions] = None,
            asset_type: Optional[AssetType] = None,
    ) -> None:
        if isinstance(files, str):
            files = [files]
        self.files: List[str] = list(files)
        self.options: GroupOptions = dataclasses.replace(options or GroupOptions())
        self.asset_type = asset_type
        self.built = False

        if not self.files:
            raise ConfigError("A file group needs at least one file")

        if not self.options.search_paths:
            raise ConfigError("No public directories were specified")

        if not os.path.isdir(self.options.cache_dir or ""):
            raise ConfigError(f"The directory {self.options.cache_dir} does not exist")

        if asset_type is None or asset_type.extension is None:
            raise ConfigError("You need to specify an extension")

        self.options.search_paths = list(self.options.search_paths)
        self._prepare_files()

        if self.options.minify and not self.options.name:
            self.options.name = hashlib.sha1("".join(self.files).encode("utf-8")).hexdigest()

        if self.options.name:
            self.options.name = self._with_minified_suffix(self.options.name)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def extension(self) -> AssetExtension:
        """Extension pair of the group's asset type."""
        return self.asset_type.extension

    @property
    def name(self) -> Optional[str]:
        """Bundle name, including the minified extension."""
        return self.options.name

    @property
    def cache_path(self) -> str:
        """Absolute path of the bundle, or "" when the group has no name."""
        if not self.options.name:
            return ""
        return CacheDirectory(self.options.cache_dir).target_path(self.options.name)

    @property
    def public_path(self) -> str:
        """Path the bundle is served under."""
        return collapse_slashes(f"{self.options.cache_url}/{self.options.name}")

    # -------------------------------------------------------------------------
    # Build & Render
    # -------------------------------------------------------------------------

    def build(self) -> BuildReport:
        """
        Minify the group's files into its cached bundle.

        Does nothing for groups that do not minify. Otherwise runs the
        build unit in the configured failure domain and blocks until it
        finishes; the bundle is only rewritten when its digest changed.

        Returns:
            BuildReport: Outcome of the build.

        Raises:
            BuildError: The unit failed or the bundle is missing afterwards.
        """
        if not self.options.minify:
            return BuildReport(skipped=True)

        cache_path = self.cache_path
        job = BuildJob(
            files=tuple(self.files),
            search_paths=tuple(self.options.search_paths),
            cache_path=cache_path,
            asset_type=self.asset_type,
        )

        logger.info(f"Building {cache_path} from {len(self.files)} file(s)")
        result = run_isolated(
            build_bundle_task,
            job,
            mode=self.options.isolation,
            timeout=self.options.build_timeout,
            label=cache_path,
        )

        if not result.get("ok"):
            raise BuildError(
                f"The cache file {cache_path} could not be created: {result.get('error', 'unknown error')}",
                cache_path,
            )

        if not os.path.isfile(cache_path):
            raise BuildError(f"The cache file {cache_path} could not be created", cache_path)

        self.built = True
        return BuildReport(
            cache_path=cache_path,
            written=bool(result.get("written")),
            resolved_files=int(result.get("resolved_files", 0)),
            digest=str(result.get("digest", "")),
        )

    def render(self) -> str:
        """
        Render the HTML tags for the group.

        Returns:
            str: A single bundle tag once a minifying group is built,
                 otherwise one tag per file in order.
        """
        if self.options.minify and self.built:
            paths = [self.public_path]
        else:
            paths = self.files

        return "".join(self.asset_type.html_tag(path) for path in paths)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _prepare_files(self) -> None:
        """Normalize every file path in place, preserving order and duplicates."""
        source_ext = self.extension.source_ext
        self.files = [normalize_asset_path(file, source_ext) for file in self.files]

    def _with_minified_suffix(self, name: str) -> str:
        """Append the minified extension unless the name already carries it."""
        ext = self.extension
        if name.endswith(ext.minified_ext):
            return name
        if name.endswith(MINIFIED_MARKER):
            return name + ext.source_ext
        return name + ext.minified_ext

    def __repr__(self) -> str:
        return (
            f"FileGroup(files={self.files!r}, minify={self.options.minify}, "
            f"name={self.options.name!r}, built={self.built})"
        )
