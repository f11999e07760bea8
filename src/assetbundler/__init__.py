from __future__ import annotations

from assetbundler.core.assets.file_group import FileGroup
from assetbundler.core.assets.registry import AssetRegistry
from assetbundler.core.assets.scope import static_scope
from assetbundler.core.assets.types import CSS, AssetType, FunctionAssetType, Javascript, TypeRegistry
from assetbundler.core.pipeline.engine import run_build
from assetbundler.domain.asset_models import BuildReport, CurrentScope, GroupOptions
from assetbundler.domain.errors import AssetError, BuildError, ConfigError

__version__ = "1.0.0"

__all__ = [
    "AssetError",
    "AssetRegistry",
    "AssetType",
    "BuildError",
    "BuildReport",
    "CSS",
    "ConfigError",
    "CurrentScope",
    "FileGroup",
    "FunctionAssetType",
    "GroupOptions",
    "Javascript",
    "TypeRegistry",
    "run_build",
    "static_scope",
]
