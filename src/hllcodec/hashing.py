"""Hashing and bucket selection for register insertion.

Every value is reduced to a canonical byte string, hashed with a fixed-seed
xxh64, and the 64-bit result is split into a register index (low ``P`` bits)
and a run length ``rho`` taken from the remaining ``64 - P`` bits.
"""

from __future__ import annotations

from typing import Any

import xxhash

# Summaries only merge or decode correctly against summaries built with the
# same seed, so it is a constant rather than a configuration value.
HASH_SEED = 0x13371337

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


def value_to_bytes(value: Any) -> bytes:
    """Canonical byte form of ``value``.

    Bytes-like values are used as-is, strings are UTF-8 encoded and integers
    in the signed 64-bit range become 8 little-endian bytes. Anything else
    is hashed through its ``str()`` form.
    """
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, int) and _INT64_MIN <= value <= _INT64_MAX:
        return int(value).to_bytes(8, "little", signed=True)
    return str(value).encode("utf-8")


def hash64(value: Any) -> int:
    """Hash a value to an unsigned 64-bit integer."""
    return xxhash.xxh64(value_to_bytes(value), seed=HASH_SEED).intdigest()


def rho(w: int, max_width: int) -> int:
    """One plus the number of leading zeros of ``w`` in a ``max_width``-bit window.

    ``bit_length(0)`` is 0, so ``w == 0`` yields ``max_width + 1``.
    """
    return max_width - w.bit_length() + 1


def split_hash(x: int, precision: int) -> tuple[int, int]:
    """Split a 64-bit hash into ``(register_index, rho)``."""
    index = x & ((1 << precision) - 1)
    return index, rho(x >> precision, 64 - precision)
