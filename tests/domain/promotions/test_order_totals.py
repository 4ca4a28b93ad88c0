"""
🧪 test_order_totals.py — підсумки замовлення

Перевіряє:
- Наскрізні сценарії: фіксована 50 → 950, відсоток 10 → 900
- Податок від підсумку до знижки, доставку для порожнього кошика
- Ідемпотентність розрахунку
"""

from decimal import Decimal

from storefront.domain.promotions.calculator import compute_discount
from storefront.domain.promotions.entities import (
    AppliedPromotion,
    CheckoutSnapshot,
    DiscountType,
    LineItem,
    Promotion,
    ShippingTaxPolicy,
)
from storefront.domain.promotions.snapshot import BuyNowSource, build_snapshot
from storefront.domain.promotions.totals import compute_totals, estimate_tax

TEE = LineItem(product_id="tee", category="T-Shirt", unit_price="500", quantity=2)


def applied(promo, snap):
    return AppliedPromotion(promotion=promo, computed_discount=compute_discount(promo, snap))


def test_fixed_fifty_off_order():
    snap = build_snapshot(BuyNowSource(TEE))
    promo = Promotion(code="F50", discount_type=DiscountType.FIXED, discount_value=50)

    totals = compute_totals(snap, applied(promo, snap))

    assert totals.subtotal == Decimal("1000.00")
    assert totals.discount == Decimal("50.00")
    assert totals.total == Decimal("950.00")


def test_ten_percent_off_order():
    snap = build_snapshot(BuyNowSource(TEE))
    promo = Promotion(code="P10", discount_type=DiscountType.PERCENTAGE, discount_value=10)

    totals = compute_totals(snap, applied(promo, snap))

    assert totals.discount == Decimal("100.00")
    assert totals.total == Decimal("900.00")


def test_no_promotion_means_no_discount():
    totals = compute_totals(CheckoutSnapshot(items=(TEE,)), None)

    assert totals.discount == Decimal("0.00")
    assert totals.total == Decimal("1000.00")


def test_tax_uses_pre_discount_subtotal():
    policy = ShippingTaxPolicy(shipping_flat=Decimal("0"), tax_rate_percent=Decimal("5"))
    snap = CheckoutSnapshot(items=(LineItem(product_id="x", category="Tee", unit_price="999", quantity=1),))
    promo = Promotion(code="F100", discount_type=DiscountType.FIXED, discount_value=100)

    totals = compute_totals(snap, applied(promo, snap), policy)

    assert totals.tax == Decimal("50.00")           # 49.95 → 50
    assert totals.total == Decimal("949.00")


def test_shipping_is_zero_for_empty_snapshot():
    policy = ShippingTaxPolicy(shipping_flat=Decimal("99"), tax_rate_percent=Decimal("5"))

    empty = compute_totals(CheckoutSnapshot(), None, policy)
    filled = compute_totals(CheckoutSnapshot(items=(TEE,)), None, policy)

    assert empty.shipping == Decimal("0.00")
    assert empty.total == Decimal("0.00")
    assert filled.shipping == Decimal("99.00")
    assert filled.total == Decimal("1149.00")


def test_oversized_discount_is_clamped():
    snap = CheckoutSnapshot(items=(TEE,))
    promo = Promotion(code="X", discount_type=DiscountType.FIXED, discount_value=10)
    forged = AppliedPromotion(promotion=promo, computed_discount=Decimal("5000"))

    totals = compute_totals(snap, forged)

    assert totals.discount == totals.subtotal
    assert totals.total == Decimal("0.00")


def test_totals_are_idempotent():
    snap = CheckoutSnapshot(items=(TEE,))
    promo = Promotion(code="P10", discount_type=DiscountType.PERCENTAGE, discount_value=10)
    current = applied(promo, snap)

    assert compute_totals(snap, current) == compute_totals(snap, current)


def test_estimate_tax_without_rate_is_zero():
    assert estimate_tax(CheckoutSnapshot(items=(TEE,)), ShippingTaxPolicy()) == Decimal("0.00")
