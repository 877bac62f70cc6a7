"""Numeric coercion and formatting helpers shared by the stat engine.

Every number that reaches a stat formula goes through ``to_number`` first:
missing, non-numeric, and non-finite values collapse to a fallback instead
of propagating.
"""

import math


Number = int | float


def to_number(value: object, fallback: Number = 0) -> Number:
    """Coerce *value* to a finite int/float, or return *fallback*.

    Ints stay ints, integral numeric strings become ints, everything else
    numeric becomes a float. Booleans count as 0/1.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else fallback
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return fallback
        try:
            return int(text, 10)
        except ValueError:
            pass
        try:
            num = float(text)
        except ValueError:
            return fallback
        return num if math.isfinite(num) else fallback
    return fallback


def clamp(value: Number, low: Number, high: Number) -> Number:
    """Clamp *value* into [low, high]; *high* wins if the bounds cross."""
    return min(high, max(low, value))


def format_number(value: Number) -> str:
    """Render integral floats without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def signed(value: Number) -> str:
    """Format with an explicit sign: ``+3``, ``0`` → ``+0``, ``-2``."""
    text = format_number(value)
    return f"+{text}" if value >= 0 else text


def ability_mod(score: object) -> int:
    """floor((score - 10) / 2)."""
    return math.floor((to_number(score) - 10) / 2)


def proficiency_bonus(level: object) -> int:
    """2 + floor((level - 1) / 4), with level floored at 1."""
    safe_level = max(1, to_number(level, 1))
    return 2 + math.floor((safe_level - 1) / 4)


def format_large_number(value: object) -> str:
    """Power-level display string.

    Magnitudes of 10,000,000 and up use scientific notation with two
    fractional digits and no ``+`` on the exponent (``1.00e7``); smaller
    values use thousands separators (``9,999,999``).
    """
    safe = to_number(value)
    if abs(safe) >= 10_000_000:
        mantissa, exponent = f"{safe:.2e}".split("e")
        return f"{mantissa}e{int(exponent)}"
    if isinstance(safe, float) and not safe.is_integer():
        return f"{safe:,.3f}".rstrip("0").rstrip(".")
    return f"{int(safe):,}"
