from __future__ import annotations

"""
Cache Directory Service.

Owns the on-disk location of minified bundles. Provides the digest used to
decide whether a bundle changed, the artifact path for a bundle name and a
purge operation used by the clean command. The digest comparison only
avoids rewriting identical content; it is not an integrity check.
"""

import hashlib
import logging
import os
from typing import List, Optional

from assetbundler.domain.constants import MINIFIED_MARKER

logger = logging.getLogger(__name__)


class CacheDirectory:
    """
    Filesystem view over the directory holding minified bundles.

    Args:
        path: Cache directory. Existence is checked by the callers that
              require it (registry and file group construction).
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)

    def exists(self) -> bool:
        """Return True when the cache directory exists."""
        return os.path.isdir(self.path)

    def target_path(self, name: str) -> str:
        """
        Resolve the artifact path for a bundle name.

        Args:
            name: Bundle name including its minified extension.

        Returns:
            str: Absolute path directly under the cache directory.
        """
        return os.path.join(self.path, name.lstrip("/"))

    def list_artifacts(self) -> List[str]:
        """
        List the minified bundles currently stored.

        Returns:
            List[str]: Sorted absolute paths of files carrying the ".min" marker.
        """
        if not self.exists():
            return []
        found: List[str] = []
        for entry in os.scandir(self.path):
            if entry.is_file() and MINIFIED_MARKER + "." in entry.name:
                found.append(entry.path)
        return sorted(found)

    def purge_all(self) -> int:
        """
        Delete every minified bundle, leaving other files alone.

        Returns:
            int: Number of removed artifacts.
        """
        removed = 0
        for path in self.list_artifacts():
            try:
                os.remove(path)
                removed += 1
            except OSError as e:
                logger.warning(f"CacheDirectory: Failed to remove {path}: {e}")
        logger.info(f"CacheDirectory: Purged {removed} artifact(s) from {self.path}")
        return removed

    @staticmethod
    def compute_digest(content: str) -> str:
        """
        Compute the SHA-1 hex digest of a text blob.

        Args:
            content: Text to digest (encoded as UTF-8).

        Returns:
            str: 40 character hexadecimal digest.
        """
        return hashlib.sha1(content.encode("utf-8")).hexdigest()

    @classmethod
    def file_digest(cls, path: str) -> Optional[str]:
        """
        Digest an existing artifact.

        Returns:
            Optional[str]: The digest, or None when the file does not exist.
        """
        if not os.path.isfile(path):
            return None
        with open(path, "rb") as f:
            return hashlib.sha1(f.read()).hexdigest()
