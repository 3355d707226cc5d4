"""Millimetre rounding and formatting.

Rounding rule: ties round half away from zero (``100.5 -> 101``,
``100.4 -> 100``).  For the non-negative values every dimension is
range-checked to, this is plain round-half-up.  The float is converted to
``Decimal`` exactly, so representation noise never flips a tie.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Context, Decimal

# Wide enough for the integer part of any finite float (max ~1.8e308).
_ROUNDING_CONTEXT = Context(prec=400)

DISPLAY_DECIMALS = 2


def round_mm(value: float) -> int:
    """Round *value* to the nearest whole millimetre, ties away from zero."""
    exact = Decimal(value)
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP, context=_ROUNDING_CONTEXT))


def format_mm(value: float) -> str:
    """Render a millimetre value for messages and summaries.

    At most two decimals, no trailing zeros, no ``.0`` on whole numbers, so
    subtraction noise such as ``425.20000000000005`` prints as ``425.2``.
    """
    shown = round(float(value), DISPLAY_DECIMALS)
    if shown.is_integer():
        return str(int(shown))
    return f"{shown:.{DISPLAY_DECIMALS}f}".rstrip("0")
