from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence


SIGN_BIT = 0x8000
WORD_MASK = 0xFFFF
SENTINEL = 0xFF


def is_valid_bcd(byte_value: int) -> bool:
    return (byte_value >> 4) <= 9 and (byte_value & 0x0F) <= 9


def bcd_to_decimal(byte_value: int) -> int:
    """
    Convert a packed BCD byte to its decimal value.

    Nibbles above 9 are not rejected; the arithmetic result is returned as-is
    so the caller can surface it. Use ``is_valid_bcd`` to check first.
    """
    return 10 * (byte_value >> 4) + (byte_value & 0x0F)


def combine_word(first: int, second: int, byte_order: str = "little") -> int:
    """
    Combine two bytes read in stream order into a 16-bit word.

    With ``byte_order="little"`` the first byte is the low byte; with
    ``"big"`` the first byte is the high byte.
    """
    if byte_order == "little":
        return (second << 8) | first
    if byte_order == "big":
        return (first << 8) | second
    raise ValueError(f"Unsupported byte order: {byte_order!r}")


def round_scaled(value: Decimal, places: int) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(value.quantize(quantum, rounding=ROUND_HALF_UP))


def scale_places(scale: float) -> int:
    """Natural decimal precision of a scale factor (0.0625 -> 3, 0.1 -> 1)."""
    if scale == 0.0625:
        return 3
    exponent = Decimal(str(scale)).normalize().as_tuple().exponent
    return max(0, -int(exponent))


def decode_signed_word(raw: int, scale: float) -> float:
    """
    Interpret ``raw`` as a two's-complement 16-bit value and apply ``scale``.

    The result is rounded half-up to the natural precision of the scale.
    """
    raw &= WORD_MASK
    factor = Decimal(str(scale))
    if raw & SIGN_BIT:
        value = -(Decimal(WORD_MASK - raw + 1) * factor)
    else:
        value = Decimal(raw) * factor
    return round_scaled(value, scale_places(scale))


def encode_signed_word(value: float, scale: float) -> int:
    """Inverse of ``decode_signed_word``, truncating to the nearest step."""
    steps = int(Decimal(str(value)) / Decimal(str(scale)))
    return steps & WORD_MASK


def is_sentinel_pair(first: int | None, second: int | None) -> bool:
    return first == SENTINEL and second == SENTINEL


def safe_byte_at(data: Sequence[int | None] | bytes, index: int) -> int | None:
    if index < 0:
        return None
    try:
        return data[index]
    except (IndexError, TypeError):
        return None


def bytes_to_int(data: Iterable[int]) -> int:
    value = 0
    for byte in data:
        value = (value << 8) | (byte & 0xFF)
    return value
