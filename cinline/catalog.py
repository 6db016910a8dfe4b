"""Type and constant catalog shared by the rewriters and the validator."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Dict, Tuple


_RESOURCE_PACKAGE = "cinline._resources"
_TYPE_RESOURCE = "c_scalar_map.txt"
_LIMIT_RESOURCE = "c_limit_map.txt"

# Brace-initialised struct the headers build with `{num, den}`
RATIONAL_STRUCT = "AVRational"
RATIONAL_FIELDS = ("num", "den")

# Unions used for bit reinterpretation, member name -> C# type
PUNNING_UNIONS: Dict[str, Dict[str, str]] = {
    "av_intfloat32": {"i": "uint", "f": "float"},
    "av_intfloat64": {"i": "ulong", "f": "double"},
}

# C# primitives narrower than int; returning an int expression into them
# needs an explicit cast.
NARROW_TARGET_TYPES = ("byte", "sbyte", "short", "ushort")


def _read_resource_text(name: str) -> str:
    try:
        resource = resources.files(_RESOURCE_PACKAGE).joinpath(name)
        with resource.open("r", encoding="utf-8") as handle:
            return handle.read()
    except (FileNotFoundError, ModuleNotFoundError):
        fallback = Path(__file__).resolve().parent / "_resources" / name
        with open(fallback, "r", encoding="utf-8") as handle:
            return handle.read()


def _parse_pairs(name: str) -> Tuple[Tuple[str, str], ...]:
    text = _read_resource_text(name)
    pairs: list[Tuple[str, str]] = []

    for idx, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise ValueError(
                f"Invalid entry in {name} on line {idx}: '{raw_line}'"
            )
        # the last '=' separates key and value; keys never contain one
        lhs, rhs = line.rsplit("=", 1)
        lhs = lhs.strip()
        rhs = rhs.strip()
        if not lhs or not rhs:
            raise ValueError(
                f"Invalid entry in {name} on line {idx}: '{raw_line}'"
            )
        pairs.append((lhs, rhs))

    return tuple(pairs)


@lru_cache(maxsize=1)
def _load_type_pairs() -> Tuple[Tuple[str, str], ...]:
    return _parse_pairs(_TYPE_RESOURCE)


@lru_cache(maxsize=1)
def _load_limit_pairs() -> Tuple[Tuple[str, str], ...]:
    return _parse_pairs(_LIMIT_RESOURCE)


def get_type_pairs() -> Tuple[Tuple[str, str], ...]:
    """Return the ordered C type -> C# type pairs."""

    return _load_type_pairs()


def get_type_map() -> Dict[str, str]:
    return dict(_load_type_pairs())


def map_type(name: str | None) -> str | None:
    """Map a fixed-width C type name to its C# primitive, or None."""

    if not isinstance(name, str):
        return None
    candidate = name.strip()
    if not candidate:
        return None
    return get_type_map().get(candidate)


def target_type(name: str) -> str:
    """Like :func:`map_type` but unknown names pass through unchanged."""

    mapped = map_type(name)
    return mapped if mapped is not None else name.strip()


def get_limit_pairs() -> Tuple[Tuple[str, str], ...]:
    """Return limit spellings ordered so composite forms come first."""

    return _load_limit_pairs()


@lru_cache(maxsize=1)
def _compact_limit_map() -> Dict[str, str]:
    # spacing inside a composite spelling is not significant
    return {"".join(literal.split()): target for literal, target in _load_limit_pairs()}


def map_limit(literal: str | None) -> str | None:
    if not isinstance(literal, str):
        return None
    return _compact_limit_map().get("".join(literal.split()))


def is_narrow_target(name: str) -> bool:
    return name in NARROW_TARGET_TYPES
