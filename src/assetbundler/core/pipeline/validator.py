from __future__ import annotations

"""
Manifest Validation Service.

Normalizes an untrusted manifest (JSON file or CLI overrides) into strictly
typed values. Unknown or malformed values are replaced by defaults and
reported as warnings; strict mode raises instead.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from assetbundler.domain.config import get_default_config, get_default_group
from assetbundler.domain.constants import ISOLATION_MODES

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a manifest.

    Args:
        config: Raw manifest (usually a dictionary).
        strict: Raise TypeError/ValueError instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized manifest and the
                                          list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid manifest type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in ("base_dir", "cache_dir", "cache_url", "isolation", "log_file"):
        merged[field] = _as_str(merged.get(field), defaults.get(field, ""), field, warnings, strict)

    merged["minify"] = _as_bool(merged.get("minify"), defaults["minify"], "minify", warnings, strict)

    for field in ("roots", "publics", "load"):
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    merged["build_timeout"] = _as_timeout(merged.get("build_timeout"), warnings, strict)

    if merged["isolation"] not in ISOLATION_MODES:
        msg = f"Invalid isolation '{merged['isolation']}', expected one of {ISOLATION_MODES}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using '{defaults['isolation']}'.")
        merged["isolation"] = defaults["isolation"]

    merged["groups"] = _validate_groups(merged.get("groups"), "groups", warnings, strict)
    merged["asset_groups"] = _validate_asset_groups(merged.get("asset_groups"), warnings, strict)

    return merged, warnings


def validate_group(
        entry: Any,
        label: str,
        warnings: List[str],
        strict: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Normalize one served group entry.

    Args:
        entry: Raw entry.
        label: Location of the entry, used in messages.
        warnings: Collector for coercion warnings.
        strict: Raise instead of discarding.

    Returns:
        Optional[Dict[str, Any]]: The normalized entry, None when discarded.
    """
    if not isinstance(entry, dict):
        msg = f"Invalid entry '{label}': expected object, received {type(entry).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Entry discarded.")
        return None

    group = get_default_group()
    group.update(entry)

    group["type"] = _as_str(group.get("type"), "", f"{label}.type", warnings, strict)
    group["files"] = _as_list_str(group.get("files"), [], f"{label}.files", warnings, strict)

    if not group["type"] or not group["files"]:
        msg = f"Invalid entry '{label}': 'type' and 'files' are required."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Entry discarded.")
        return None

    if group["minify"] is not None:
        group["minify"] = _as_bool(group["minify"], True, f"{label}.minify", warnings, strict)

    for field in ("name", "scope"):
        if group[field] is not None:
            group[field] = _as_str(group[field], "", f"{label}.{field}", warnings, strict) or None

    if group["sub_scopes"] is not None:
        group["sub_scopes"] = _as_list_str(group["sub_scopes"], [], f"{label}.sub_scopes", warnings, strict) or None

    return group

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: STRUCTURE
# -----------------------------------------------------------------------------

def _validate_groups(value: Any, label: str, warnings: List[str], strict: bool) -> List[Dict[str, Any]]:
    """Normalize a list of group entries, discarding invalid ones."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"Invalid field '{label}': expected list, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using empty list.")
        return []

    out: List[Dict[str, Any]] = []
    for i, entry in enumerate(value):
        group = validate_group(entry, f"{label}[{i}]", warnings, strict)
        if group is not None:
            out.append(group)
    return out


def _validate_asset_groups(value: Any, warnings: List[str], strict: bool) -> Dict[str, List[Dict[str, Any]]]:
    """Normalize the named asset group table."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"Invalid field 'asset_groups': expected object, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using empty table.")
        return {}

    return {
        str(name): _validate_groups(entries, f"asset_groups.{name}", warnings, strict)
        for name, entries in value.items()
    }

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and strip string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce booleans, 0/1 and yes/no style strings."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure a list of non-empty strings; CSV strings are split."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out if out else list(fallback)

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _as_timeout(value: Any, warnings: List[str], strict: bool) -> Optional[float]:
    """Accept None or a positive number of seconds."""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
        return float(value)

    msg = f"Invalid field 'build_timeout': expected positive number or null, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Waiting without timeout.")
    return None
