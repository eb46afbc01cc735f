from decimal import Decimal

import pytest

from app.schemas.product_schema import ProductOut
from app.services.pricing import discount_percent, format_amount, format_money, is_on_sale


def test_sale_math():
    assert is_on_sale(80, 100) is True
    assert discount_percent(80, 100) == 20


@pytest.mark.parametrize(
    "price,old,expected",
    [
        (Decimal("87.5"), 100, 13),  # 12.5 rounds up
        (2, 3, 33),
        (1, 3, 67),
        (100, 100, 0),
        (120, 100, 0),
        (50, None, 0),
    ],
)
def test_discount_percent_rounds_half_up(price, old, expected):
    assert discount_percent(price, old) == expected


def test_not_on_sale_without_higher_old_price():
    assert is_on_sale(80, None) is False
    assert is_on_sale(80, 80) is False
    assert is_on_sale(80, 70) is False


def test_product_view_uses_same_sale_rule():
    p = ProductOut(id="x", price=80, old_price=100)
    assert p.is_on_sale is True
    assert p.discount_percent == 20
    assert ProductOut(id="y", price=80).is_on_sale is False


def test_amount_formatting():
    assert format_amount(Decimal("50.00")) == "50"
    assert format_amount(Decimal("49.50")) == "49.5"
    assert format_amount(19.9) == "19.9"
    assert format_money(120) == "120.00"
    assert format_money(Decimal("99.5")) == "99.50"
