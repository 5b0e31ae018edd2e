"""Decoder for nozomi index bodies.

A nozomi body is a flat run of 4-byte big-endian signed integers, one
gallery id each, in listing order.
"""

from __future__ import annotations

import struct

from ..domain.errors import FormatError


ID_WIDTH = 4


def decode_ids(payload: bytes) -> list[int]:
    """Decode a nozomi body into gallery ids, keeping file order."""
    count, remainder = divmod(len(payload), ID_WIDTH)
    if remainder:
        raise FormatError(f"Nozomi body length {len(payload)} is not a multiple of {ID_WIDTH}")
    return list(struct.unpack(f">{count}i", payload))


def encode_ids(ids: list[int]) -> bytes:
    """Inverse of :func:`decode_ids`; used to build fixtures and cache bodies."""
    return struct.pack(f">{len(ids)}i", *ids)
