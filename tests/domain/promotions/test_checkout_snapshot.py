"""
🧪 test_checkout_snapshot.py — знімок оформлення та сутності промокодів

Перевіряє:
- Побудову знімка з «купити зараз» і з кошика
- Підсумок, кількість і scoped quantity
- Нормалізацію промокоду (код у верхньому регістрі, Decimal-поля)
"""

from decimal import Decimal

import pytest

from storefront.domain.promotions.entities import (
    CheckoutMode,
    CheckoutSnapshot,
    DiscountType,
    LineItem,
    OrderTotals,
    Promotion,
)
from storefront.domain.promotions.snapshot import (
    BuyNowSource,
    CartSource,
    build_snapshot,
    cart_source_from_rows,
)


def item(product_id="p1", category="T-Shirt", price="500", quantity=1):
    return LineItem(product_id=product_id, category=category, unit_price=price, quantity=quantity)


def test_buy_now_snapshot_holds_single_line():
    snapshot = build_snapshot(BuyNowSource(item(quantity=2)))

    assert snapshot.mode is CheckoutMode.BUY_NOW
    assert len(snapshot.items) == 1
    assert snapshot.subtotal == Decimal("1000")
    assert snapshot.total_quantity == 2


def test_cart_snapshot_sums_all_lines():
    source = CartSource.of([item("a", "Hoodie", "1200", 1), item("b", "Tee", "300", 3)])
    snapshot = build_snapshot(source)

    assert snapshot.mode is CheckoutMode.CART
    assert snapshot.subtotal == Decimal("2100")
    assert snapshot.total_quantity == 4
    assert snapshot.categories == frozenset({"Hoodie", "Tee"})


def test_empty_cart_gives_empty_snapshot():
    snapshot = build_snapshot(CartSource())

    assert snapshot.is_empty
    assert snapshot.subtotal == Decimal("0")
    assert snapshot.total_quantity == 0


def test_unknown_source_is_rejected():
    with pytest.raises(TypeError):
        build_snapshot(["not", "a", "source"])


def test_scoped_quantity_respects_category_filter():
    snapshot = CheckoutSnapshot(items=(item("a", "Hoodie", "1000", 1), item("b", "Tee", "300", 3)))

    assert snapshot.quantity_in("Hoodie") == 1
    assert snapshot.quantity_in("Tee") == 3
    assert snapshot.quantity_in("All") == 4
    assert snapshot.quantity_in(None) == 4


def test_line_item_rejects_invalid_values():
    with pytest.raises(ValueError):
        item(quantity=0)
    with pytest.raises(ValueError):
        item(price="-1")
    with pytest.raises(ValueError):
        item(price="abc")


def test_line_item_price_from_float_is_exact():
    line = item(price=19.99, quantity=3)

    assert line.unit_price == Decimal("19.99")
    assert line.line_total == Decimal("59.97")


def test_with_quantity_returns_new_line():
    line = item(quantity=1)
    doubled = line.with_quantity(2)

    assert line.quantity == 1
    assert doubled.quantity == 2
    assert doubled.product_id == line.product_id


def test_cart_rows_from_storefront_json():
    rows = [
        {"productId": "64f0", "name": "Oversized Tee", "price": 499, "quantity": 2, "category": "T-Shirt"},
        {"id": "64f1", "price": "1299.50", "category": "Hoodie"},
    ]
    snapshot = build_snapshot(cart_source_from_rows(rows))

    assert [line.product_id for line in snapshot.items] == ["64f0", "64f1"]
    assert snapshot.items[0].title == "Oversized Tee"
    assert snapshot.items[1].quantity == 1
    assert snapshot.subtotal == Decimal("2297.50")


def test_promotion_code_is_normalized():
    promo = Promotion(code="  save10 ", discount_type="percentage", discount_value="10", min_price=500)

    assert promo.code == "SAVE10"
    assert promo.discount_type is DiscountType.PERCENTAGE
    assert promo.discount_value == Decimal("10")
    assert promo.min_price == Decimal("500")


def test_promotion_all_category_means_no_filter():
    promo = Promotion(code="ALLIN", discount_type=DiscountType.FIXED, discount_value=50, category="All")

    assert promo.category_filter is None


def test_promotion_rejects_empty_code_and_negative_value():
    with pytest.raises(ValueError):
        Promotion(code=" ", discount_type=DiscountType.FIXED, discount_value=10)
    with pytest.raises(ValueError):
        Promotion(code="NEG", discount_type=DiscountType.FIXED, discount_value=-5)


def test_order_totals_derives_total():
    totals = OrderTotals(
        subtotal=Decimal("1000.00"),
        discount=Decimal("50.00"),
        shipping=Decimal("0.00"),
        tax=Decimal("50.00"),
    )

    assert totals.total == Decimal("1000.00")
