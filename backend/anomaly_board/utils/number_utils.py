"""
Display rounding for percentages and amounts.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, places: int = 2) -> float:
    """
    Round to ``places`` decimals, ties away from zero.

    ``Decimal(value)`` keeps the exact binary value of the float, so only
    true binary ties (6.125) round up; 2.675 is stored just below the tie
    and rounds down.
    """
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
