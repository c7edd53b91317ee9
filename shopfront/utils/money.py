# shopfront/utils/money.py

from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP

Money = Decimal

# VND has no minor unit in this store
UNIT = Decimal("1")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))

def round_money(x: Money) -> Money:
    return D(x).quantize(UNIT, rounding=ROUND_HALF_UP)

def floor_money(x: Money) -> Money:
    return D(x).quantize(UNIT, rounding=ROUND_FLOOR)

def format_vnd(x) -> str:
    return f"{int(round_money(x)):,} ₫".replace(",", ".")
