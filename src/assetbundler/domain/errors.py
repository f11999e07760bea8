from __future__ import annotations

"""
Asset Domain Exceptions.

Defines the error taxonomy raised by the registry and the build pipeline.
Configuration problems are reported eagerly at the call that introduces
them, build problems once the isolated build unit has finished.
"""

from typing import List, Optional


class AssetError(Exception):
    """Base class for every error raised by assetbundler."""


class ConfigError(AssetError):
    """
    Invalid or missing configuration.

    Raised for missing directories, unknown or duplicate type tags,
    duplicate asset group names and empty required lists.
    """


class BuildError(AssetError):
    """
    The isolated build unit failed or did not produce its artifact.

    Attributes:
        cache_path: Artifact the failing build was expected to write.
        failures: Remaining failures of the same build sweep, if any.
    """

    def __init__(
            self,
            message: str,
            cache_path: str = "",
            failures: Optional[List["BuildError"]] = None
    ) -> None:
        super().__init__(message)
        self.cache_path = cache_path
        self.failures: List[BuildError] = list(failures or [])
