"""
MiniSFC Key Encoding
====================
Order-preserving binary encoding for Hilbert index keys.
Encoded keys compare via memcmp (byte-by-byte) in the same order as
the integer indexes they carry, so a sorted key-value store can scan
contiguous curve ranges directly.

Encoding rules:
  Length   → ceil(total_bits / 8) bytes, fixed per curve
  Layout   → big-endian, zero-padded at the most significant end
  Fixed    → struct ">Q" (8 bytes) truncated to the key length;
             only valid while total_bits <= 62
  Unbounded→ int.to_bytes / int.from_bytes, any length

Both paths must produce identical bytes for identical indexes.
"""

import struct

from sfc.errors import InvalidArgumentError


# Largest total precision the fixed-width path accepts
FIXED_WIDTH_MAX_BITS = 62

_UINT64 = struct.Struct(">Q")


def key_length(total_bits: int) -> int:
    """Bytes needed to hold an index of total_bits bits."""
    if total_bits <= 0:
        raise InvalidArgumentError(f"Total bits must be positive, got {total_bits}")
    return (total_bits + 7) // 8


def _check_index(index: int, total_bits: int) -> None:
    if index < 0 or index >> total_bits:
        raise InvalidArgumentError(
            f"Index {index} does not fit in {total_bits} bits"
        )


def _check_key(data: bytes, total_bits: int) -> None:
    expected = key_length(total_bits)
    if len(data) != expected:
        raise InvalidArgumentError(
            f"Expected a {expected}-byte key for {total_bits} bits, got {len(data)} bytes"
        )


# ─── Fixed-width path ───────────────────────────────────────────────────────

def encode_index_fixed(index: int, total_bits: int) -> bytes:
    """Pack an index through a single unsigned 64-bit word."""
    if total_bits > FIXED_WIDTH_MAX_BITS:
        raise InvalidArgumentError(
            f"Fixed-width keys hold at most {FIXED_WIDTH_MAX_BITS} bits, got {total_bits}"
        )
    _check_index(index, total_bits)
    return _UINT64.pack(index)[8 - key_length(total_bits):]


def decode_index_fixed(data: bytes, total_bits: int) -> int:
    """Reverse encode_index_fixed."""
    if total_bits > FIXED_WIDTH_MAX_BITS:
        raise InvalidArgumentError(
            f"Fixed-width keys hold at most {FIXED_WIDTH_MAX_BITS} bits, got {total_bits}"
        )
    _check_key(data, total_bits)
    index = _UINT64.unpack(bytes(data).rjust(8, b"\x00"))[0]
    _check_index(index, total_bits)
    return index


# ─── Unbounded path ─────────────────────────────────────────────────────────

def encode_index_unbounded(index: int, total_bits: int) -> bytes:
    """Pack an index of any size as big-endian bytes."""
    _check_index(index, total_bits)
    return index.to_bytes(key_length(total_bits), "big")


def decode_index_unbounded(data: bytes, total_bits: int) -> int:
    """Reverse encode_index_unbounded."""
    _check_key(data, total_bits)
    index = int.from_bytes(data, "big")
    _check_index(index, total_bits)
    return index


# ─── Hex rendering ──────────────────────────────────────────────────────────

def hex_string(data: bytes) -> str:
    """Render a key as lowercase hex, two digits per byte."""
    return bytes(data).hex()


def key_from_hex(text: str) -> bytes:
    """Parse a key rendered by hex_string. Accepts an optional 0x prefix."""
    text = text.strip()
    if text.lower().startswith("0x"):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid hex key {text!r}: {e}") from e
