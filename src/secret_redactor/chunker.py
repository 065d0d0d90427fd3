"""JSON chunker — split an oversized JSON value into size-bounded fragments.

Each fragment is itself a complete JSON array or object, so it can be sent
to the detector as a standalone document and merged back afterwards:

    chunks = split(raw, max_bytes=1024 * 1024)
    value = merge(chunks)        # deep-equal to json.loads(raw)

Only the root's direct children are distributed across chunks.  A child
that is larger than ``max_bytes`` on its own is never split further; it
gets a chunk to itself and that chunk exceeds the bound.
"""

from __future__ import annotations
import json
from typing import Any, Iterable

from .errors import UnsupportedChunkContent, UnsupportedRoot
from .types import Chunk

DEFAULT_MAX_BYTES = 1024 * 1024  # 1 MiB


def dumps(value: Any) -> str:
    """Compact serialization used for every chunk body."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def byte_size(text: str) -> int:
    # JSON may legally carry lone surrogate escapes
    return len(text.encode("utf-8", "surrogatepass"))


def split(serialized: str, max_bytes: int = DEFAULT_MAX_BYTES) -> list[Chunk]:
    """Split serialized JSON into chunks of at most ``max_bytes`` bytes.

    Raises UnsupportedRoot for primitives and null, and lets
    json.JSONDecodeError through for text that is not JSON at all.
    """
    parsed = json.loads(serialized)
    if not isinstance(parsed, (list, dict)):
        raise UnsupportedRoot(type(parsed).__name__)

    if byte_size(serialized) <= max_bytes:
        return [Chunk(index=0, total=1, body=serialized)]

    if isinstance(parsed, list):
        bodies = _pack_array(parsed, max_bytes)
    else:
        bodies = _pack_object(parsed, max_bytes)

    return [Chunk(index=i, total=len(bodies), body=b) for i, b in enumerate(bodies)]


def merge(chunks: Iterable[Chunk]) -> list | dict:
    """Recombine chunks (in index order) into the original value."""
    ordered = [json.loads(c.body) for c in sorted(chunks, key=lambda c: c.index)]
    if not ordered:
        raise UnsupportedChunkContent("empty")

    first = ordered[0]
    if isinstance(first, list):
        merged_list: list = []
        for part in ordered:
            merged_list.extend(part)
        return merged_list
    if isinstance(first, dict):
        merged: dict = {}
        for part in ordered:
            merged.update(part)
        return merged
    raise UnsupportedChunkContent(type(first).__name__)


# ── Packing ──────────────────────────────────────────────────────────

def _pack_array(items: list, max_bytes: int) -> list[str]:
    bodies: list[str] = []
    current: list = []
    size = 2  # []

    for item in items:
        item_size = byte_size(dumps(item))
        sep = 1 if current else 0
        if current and size + sep + item_size > max_bytes:
            bodies.append(dumps(current))
            current, size, sep = [], 2, 0
        current.append(item)
        size += sep + item_size

    if current or not bodies:
        bodies.append(dumps(current))
    return bodies


def _pack_object(obj: dict, max_bytes: int) -> list[str]:
    bodies: list[str] = []
    current: dict = {}
    size = 2  # {}

    for key, value in obj.items():
        entry_size = byte_size(dumps(key)) + 1 + byte_size(dumps(value))
        sep = 1 if current else 0
        if current and size + sep + entry_size > max_bytes:
            bodies.append(dumps(current))
            current, size, sep = {}, 2, 0
        current[key] = value
        size += sep + entry_size

    if current or not bodies:
        bodies.append(dumps(current))
    return bodies
