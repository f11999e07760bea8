from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Path helpers shared by the manifest loader and the build engine: user path
expansion, discovery of public directories under application roots, and
mapping of a directory inside a public directory to its URL.
"""

import os
from typing import List, Optional, Sequence

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], base_dir: str) -> str:
    """
    Turn a configured path into an absolute filesystem path.

    Expands environment variables ($VAR/%VAR%) and "~". Relative paths are
    resolved against base_dir; an empty input resolves to base_dir itself.

    Args:
        path: Raw path string.
        base_dir: Directory relative paths are anchored to.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        return os.path.abspath(base_dir)
    p = os.path.expandvars(os.path.expanduser(p))
    if not os.path.isabs(p):
        p = os.path.join(base_dir, p)
    return os.path.abspath(p)


def discover_public_dirs(roots: Sequence[str], publics: Sequence[str]) -> List[str]:
    """
    List every existing public directory under the application roots.

    Combines each root with each public directory name, in root-major order,
    and keeps the combinations that exist.

    Args:
        roots: Application root directories.
        publics: Public directory names relative to each root.

    Returns:
        List[str]: Existing absolute directories, without duplicates.
    """
    found: List[str] = []
    for root in roots:
        for public in publics:
            candidate = os.path.abspath(os.path.join(root, public))
            if os.path.isdir(candidate) and candidate not in found:
                found.append(candidate)
    return found


def public_url_for(directory: str, public_dirs: Sequence[str], fallback: str = "/") -> str:
    """
    Compute the URL a directory is served under.

    Args:
        directory: Directory to publish (e.g. the cache directory).
        public_dirs: Public directories served at "/".
        fallback: URL returned when directory is outside every public directory.

    Returns:
        str: URL such as "/minified", or the fallback.
    """
    target = os.path.abspath(directory)
    for public in public_dirs:
        base = os.path.abspath(public)
        try:
            common = os.path.commonpath([target, base])
        except ValueError:
            # Different drives on Windows
            continue
        if common == base:
            rel = os.path.relpath(target, base)
            if rel == ".":
                return "/"
            return "/" + rel.replace(os.sep, "/")
    return fallback
