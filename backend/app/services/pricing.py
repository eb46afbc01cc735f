from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    # str() keeps 19.9 as 19.9 instead of the float's binary expansion
    return Decimal(str(value))


def is_on_sale(price: Number, old_price: Optional[Number]) -> bool:
    old = to_decimal(old_price)
    return old is not None and old > to_decimal(price)


def discount_percent(price: Number, old_price: Optional[Number]) -> int:
    """Whole-number discount, rounded half up. 0 when the product is not on sale."""
    if not is_on_sale(price, old_price):
        return 0
    old = to_decimal(old_price)
    pct = (old - to_decimal(price)) / old * 100
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(value: Number) -> str:
    """Plain amount as captured: 50 -> "50", 49.5 -> "49.5"."""
    d = to_decimal(value)
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


def format_money(value: Number) -> str:
    """Fixed two-decimal amount used for totals."""
    d = to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{d:.2f}"
