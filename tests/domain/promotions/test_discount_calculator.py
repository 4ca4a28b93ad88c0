"""
🧪 test_discount_calculator.py — розрахунок знижки за типами

Перевіряє:
- Відсоток з округленням до цілої одиниці (ROUND_HALF_UP)
- Фіксовану знижку на замовлення та на одиницю
- Price override зі scoped quantity
- Обмеження [0, subtotal]
"""

from decimal import Decimal

import pytest

from storefront.domain.promotions.calculator import compute_discount
from storefront.domain.promotions.entities import (
    ApplyTo,
    CheckoutSnapshot,
    DiscountType,
    LineItem,
    Promotion,
)


def line(category, price, quantity):
    return LineItem(product_id=f"{category}-{price}", category=category, unit_price=price, quantity=quantity)


def snapshot(*lines):
    return CheckoutSnapshot(items=tuple(lines))


def test_percentage_rounds_to_whole_unit():
    promo = Promotion(code="P15", discount_type=DiscountType.PERCENTAGE, discount_value=15)

    assert compute_discount(promo, snapshot(line("Tee", "999", 1))) == Decimal("150.00")


@pytest.mark.parametrize(
    "subtotal, rate, expected",
    [
        ("1000", "10", "100.00"),
        ("995", "10", "100.00"),    # 99.5 → 100
        ("994", "10", "99.00"),     # 99.4 → 99
        ("333", "33", "110.00"),    # 109.89 → 110
    ],
)
def test_percentage_half_up(subtotal, rate, expected):
    promo = Promotion(code="PCT", discount_type=DiscountType.PERCENTAGE, discount_value=rate)

    assert compute_discount(promo, snapshot(line("Tee", subtotal, 1))) == Decimal(expected)


def test_fixed_order_discount_is_flat():
    promo = Promotion(code="F50", discount_type=DiscountType.FIXED, discount_value=50, apply_to=ApplyTo.ORDER)

    assert compute_discount(promo, snapshot(line("Tee", "500", 2))) == Decimal("50.00")


def test_fixed_item_discount_multiplies_by_total_quantity():
    promo = Promotion(code="F20", discount_type=DiscountType.FIXED, discount_value=20, apply_to=ApplyTo.ITEM)
    snap = snapshot(line("Tee", "500", 2), line("Hoodie", "900", 1))

    assert compute_discount(promo, snap) == Decimal("60.00")


def test_price_override_below_scoped_minimum_is_zero():
    promo = Promotion(
        code="HOOD2",
        discount_type=DiscountType.PRICE_OVERRIDE,
        discount_value=100,
        category="Hoodie",
        min_quantity=2,
    )
    snap = snapshot(line("Hoodie", "1500", 1), line("Tee", "400", 3))

    assert compute_discount(promo, snap) == Decimal("0.00")


def test_price_override_counts_only_category_units():
    promo = Promotion(
        code="HOOD2",
        discount_type=DiscountType.PRICE_OVERRIDE,
        discount_value=100,
        category="Hoodie",
        min_quantity=2,
    )
    snap = snapshot(line("Hoodie", "1500", 3), line("Tee", "400", 3))

    assert compute_discount(promo, snap) == Decimal("300.00")


def test_discount_never_exceeds_subtotal():
    promo = Promotion(code="BIG", discount_type=DiscountType.FIXED, discount_value=5000)

    assert compute_discount(promo, snapshot(line("Tee", "300", 1))) == Decimal("300.00")


def test_discount_on_empty_snapshot_is_zero():
    promo = Promotion(code="F50", discount_type=DiscountType.FIXED, discount_value=50)

    assert compute_discount(promo, CheckoutSnapshot()) == Decimal("0.00")


def test_hundred_percent_equals_subtotal():
    promo = Promotion(code="FREE", discount_type=DiscountType.PERCENTAGE, discount_value=100)
    snap = snapshot(line("Tee", "249.99", 2))

    assert compute_discount(promo, snap) == Decimal("499.98")
