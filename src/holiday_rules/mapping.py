"""
Canonical field names and region identifiers.

Definitions reach the loader with keys written as plain strings ("months", "Months ",
":mday") or as `Field` members. Everything is folded into `Field` members here, once,
so the loader and the matcher never look at the raw representation again.
"""

from enum import Enum
from typing import Any, List, Mapping, Tuple


class Field(str, Enum):
    MONTHS = "months"
    METHODS = "methods"
    NAME = "name"
    REGIONS = "regions"
    MDAY = "mday"
    WEEK = "week"
    WDAY = "wday"
    FUNCTION = "function"
    FUNCTION_MODIFIER = "function_modifier"
    ARGUMENTS = "arguments"

    def __str__(self) -> str:
        return self.value


FIELD_CODES = {f.value: f for f in Field}

TOP_LEVEL_FIELDS = (Field.MONTHS, Field.METHODS)


def _norm_token(s: str) -> str:
    return s.strip().lstrip(":").strip().lower()


def canonical_key(key: Any) -> Any:
    """
    Map a recognized field name to its `Field` member.

    Unknown keys (month numbers, method names, opaque body keys) are returned unchanged.
    """
    if isinstance(key, Field):
        return key
    if isinstance(key, Enum):
        key = key.value
    if isinstance(key, str):
        return FIELD_CODES.get(_norm_token(key), key)
    return key


def region_id(value: Any) -> str:
    """
    Canonical region identifier: trimmed, lower-cased, without a leading ':'.

    Parameters
    ----------
    value: str or Enum
        A region as written in a definition or passed to a query.
    """
    if isinstance(value, Enum):
        value = value.value
    return _norm_token(str(value))


def canonicalize(obj: Any) -> Any:
    """
    Recursively canonicalize a raw definition structure.

    Mapping keys become `Field` members where recognized, region entries become region
    ids, lists and tuples are walked, and every other value passes through untouched.
    Malformed shapes are left for the caller to reject.
    """
    if isinstance(obj, Mapping):
        out = {}
        for key, value in obj.items():
            ckey = canonical_key(key)
            if ckey is Field.REGIONS:
                out[ckey] = _canonical_regions(value)
            else:
                out[ckey] = canonicalize(value)
        return out
    if isinstance(obj, (list, tuple)):
        return [canonicalize(v) for v in obj]
    return obj


def _canonical_regions(value: Any) -> Any:
    if isinstance(value, (str, Enum)):
        return [region_id(value)]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [region_id(v) if isinstance(v, (str, Enum)) else v for v in value]
    return value


def key_collisions(obj: Any, path: str = "") -> List[Tuple[str, Field]]:
    """
    Fields written more than once in the same mapping under different spellings.

    `canonicalize` keeps only the last of such keys, so callers check this first.
    Returns (path, field) pairs, e.g. ("months[6][0]", Field.MDAY).
    """
    found: List[Tuple[str, Field]] = []
    if isinstance(obj, Mapping):
        seen = set()
        for key, value in obj.items():
            ckey = canonical_key(key)
            if isinstance(ckey, Field):
                if ckey in seen:
                    found.append((path or "<top>", ckey))
                seen.add(ckey)
            found.extend(key_collisions(value, f"{path}[{key!r}]" if path else str(key)))
    elif isinstance(obj, (list, tuple)):
        for i, value in enumerate(obj):
            found.extend(key_collisions(value, f"{path}[{i}]"))
    return found
