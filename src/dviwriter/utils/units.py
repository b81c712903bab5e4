"""Fixed-point conversions used by the DVI and TFM formats.

DVI font sizes are *scaled points*: the real value in points times ``2**16``.
TFM dimensions are *fix_words*: signed 32-bit numbers with 20 fractional bits,
expressed in units of the font's design size.
"""

from __future__ import annotations

from typing import Final

SCALE: Final = 1 << 16
FIX_WORD_UNITY: Final = 1 << 20


def to_scaled(points: float) -> int:
    """Return ``points`` as a scaled integer (``points * 65536``, rounded)."""

    return int(round(points * SCALE))


def from_scaled(value: int) -> float:
    """Return the real value in points of the scaled integer ``value``."""

    return value / SCALE


def fix_word_to_float(raw: int) -> float:
    """Interpret the signed 32-bit ``raw`` as a fix_word."""

    return raw / FIX_WORD_UNITY


def scale_fix_word(raw: int, size: int) -> int:
    """Return the fix_word ``raw`` multiplied by the scaled ``size``.

    The product is truncated toward zero, so a kern and its negation scale to
    values of equal magnitude.
    """

    product = raw * size
    if product >= 0:
        return product >> 20
    return -((-product) >> 20)


__all__ = [
    "SCALE",
    "FIX_WORD_UNITY",
    "to_scaled",
    "from_scaled",
    "fix_word_to_float",
    "scale_fix_word",
]
