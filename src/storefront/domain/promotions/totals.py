# 🧾 storefront/domain/promotions/totals.py
"""
🧾 Агрегація підсумків замовлення.

total = subtotal − discount + shipping + tax, де discount ∈ [0, subtotal],
а доставка та податок ніколи не відʼємні. Функція чиста: ті самі входи → ті самі Decimal.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування підсумків
from decimal import Decimal                                     # 💵 Точні гроші
from typing import Optional                                     # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from .entities import AppliedPromotion, CheckoutSnapshot, OrderTotals, ShippingTaxPolicy
from .rounding import ZERO, clamp, percent, q0, q2              # ➗ Округлення

logger = logging.getLogger(f"{LOG_NAME}.domain.promotions.totals")

DEFAULT_POLICY = ShippingTaxPolicy()                            # 🚚 Безкоштовна доставка, без податку


def estimate_tax(snapshot: CheckoutSnapshot, policy: ShippingTaxPolicy) -> Decimal:
    """Податок від підсумку до знижки, округлений до цілої одиниці (як на вітрині)."""
    if policy.tax_rate_percent == ZERO or snapshot.is_empty:
        return q2(ZERO)
    return q2(q0(percent(snapshot.subtotal, policy.tax_rate_percent)))


def compute_totals(
    snapshot: CheckoutSnapshot,
    applied: Optional[AppliedPromotion],
    policy: ShippingTaxPolicy = DEFAULT_POLICY,
) -> OrderTotals:
    """
    Рахує `OrderTotals` з (знімок, застосований промокод, політика).

    Нічого не кешує: викликається щоразу, коли змінюється будь-який із входів.
    """
    subtotal = q2(snapshot.subtotal)
    discount = ZERO if applied is None else applied.computed_discount
    discount = clamp(q2(discount), q2(ZERO), subtotal)
    shipping = q2(ZERO) if snapshot.is_empty else q2(policy.shipping_flat)
    tax = estimate_tax(snapshot, policy)

    totals = OrderTotals(subtotal=subtotal, discount=discount, shipping=shipping, tax=tax)
    logger.debug(
        "🧾 Totals | subtotal=%s discount=%s shipping=%s tax=%s total=%s code=%s",
        totals.subtotal,
        totals.discount,
        totals.shipping,
        totals.tax,
        totals.total,
        applied.code if applied else None,
    )
    return totals


__all__ = ["compute_totals", "estimate_tax", "DEFAULT_POLICY"]
