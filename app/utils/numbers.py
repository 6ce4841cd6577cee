import math
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def round_half_up(value: float, ndigits: int = 0):
    """
    Round halves away from zero for positive values (2.5 -> 3), unlike the
    built-in ``round`` which rounds halves to even. Returns an int when
    ``ndigits`` is 0.
    """
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5)
    if ndigits == 0:
        return int(rounded)
    return rounded / factor


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
