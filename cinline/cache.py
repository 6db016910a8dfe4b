"""Content-addressed store of previously approved translations.

A cache entry is reused only when the C body it was derived from hashes to
exactly the same digest as the body being translated now. Entries are never
expired and the snapshot handed to the translator is read-only; capturing a
new baseline is an explicit step owned by the caller
(:func:`build_next_baseline`).
"""

import os
import re
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Sequence

from cinline import logging as cinline_logging
from cinline.data_types import CacheEntry, InlineFunctionUnit
from cinline.stubs import is_stub
from cinline.utils import read_file

logger = cinline_logging.get_logger(__name__)

BODY_HASH_MARKER = "// original body hash:"

_SIGNATURE_RE = re.compile(r"^\s*public\s+static\s+(?P<ret>.+?)\s+(?P<name>\w+)\s*\((?P<params>.*)\)\s*$")
_HASH_RE = re.compile(r"^\s*" + re.escape(BODY_HASH_MARKER) + r"\s*(?P<hash>\S+)\s*$")


class StabilityCache:
    def __init__(self, entries: Mapping[str, CacheEntry] | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def empty(cls) -> "StabilityCache":
        return cls()

    @classmethod
    def from_entries(cls, entries: Iterable[CacheEntry]) -> "StabilityCache":
        mapping: dict[str, CacheEntry] = {}
        for entry in entries:
            if entry.name in mapping:
                logger.warning("Duplicate cache entry for %s; keeping the later one", entry.name)
            mapping[entry.name] = entry
        return cls(mapping)

    @property
    def entries(self) -> Mapping[str, CacheEntry]:
        return self._entries

    def lookup(self, name: str) -> Optional[CacheEntry]:
        return self._entries.get(name)

    def match(self, unit: InlineFunctionUnit) -> Optional[CacheEntry]:
        entry = self.lookup(unit.name)
        if entry is None:
            logger.debug("No cache entry for %s", unit.name)
            return None
        if entry.body_hash != unit.body_hash:
            logger.debug(
                "Cache entry for %s is stale (cached %s, current %s)",
                unit.name, entry.body_hash, unit.body_hash,
            )
            return None
        return entry

    def names(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries


def parse_baseline(text: str) -> list[CacheEntry]:
    """Recover (name, hash, body) triples from a generated C# file."""
    entries: list[CacheEntry] = []
    current_name: Optional[str] = None
    body_lines: list[str] = []

    for line in text.splitlines():
        if current_name is None:
            match = _SIGNATURE_RE.match(line)
            if match:
                current_name = match.group("name")
                body_lines = []
            continue

        hash_match = _HASH_RE.match(line)
        if hash_match:
            body = "\n".join(l for l in body_lines if l.strip())
            if is_stub(body):
                # a stub nobody has replaced is not an approval
                logger.debug("Skipping unimplemented baseline body for %s", current_name)
            else:
                entries.append(CacheEntry(current_name, hash_match.group("hash"), body))
            current_name = None
            continue

        signature_match = _SIGNATURE_RE.match(line)
        if signature_match:
            logger.warning("Function %s in baseline has no body hash; ignoring it", current_name)
            current_name = signature_match.group("name")
            body_lines = []
            continue

        body_lines.append(line.rstrip())

    if current_name is not None:
        logger.warning("Function %s in baseline has no body hash; ignoring it", current_name)

    return entries


def load_baseline(path: str) -> StabilityCache:
    if not os.path.exists(path):
        logger.info("No baseline found at %s; starting with an empty cache", path)
        return StabilityCache.empty()
    cache = StabilityCache.from_entries(parse_baseline(read_file(path)))
    logger.info("Loaded %d cached inline functions from %s", len(cache), path)
    return cache


def build_next_baseline(
    units: Sequence[InlineFunctionUnit],
    results: Sequence,
) -> StabilityCache:
    """Capture usable results of a run as the cache for the next run."""
    if len(units) != len(results):
        raise ValueError(f"Got {len(results)} results for {len(units)} units")
    entries = []
    for unit, result in zip(units, results):
        if result.name != unit.name:
            raise ValueError(f"Result for {result.name} does not belong to unit {unit.name}")
        if not result.is_usable:
            continue
        entries.append(CacheEntry(unit.name, unit.body_hash, result.emitted_body))
    return StabilityCache.from_entries(entries)
