# 🧮 storefront/domain/promotions/calculator.py
"""
🧮 Розрахунок суми знижки для застосовного промокоду.

🔹 percentage      — round(subtotal × value / 100) до цілої одиниці.
🔹 fixed           — value на замовлення або value × загальна кількість (apply_to=item).
🔹 price_override  — value × scoped quantity, якщо поріг кількості досягнуто, інакше 0.
🔹 Фінальний крок для всіх: квантування до 2 знаків і обмеження [0, subtotal].

Типи знижок диспетчеризуються через таблицю, повноту якої перевіряємо при імпорті.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування розрахунку
from decimal import Decimal                                     # 💵 Точні гроші
from typing import Callable, Dict                               # 🧰 Типи таблиці

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from .entities import ApplyTo, CheckoutSnapshot, DiscountType, Promotion
from .rounding import ZERO, clamp, percent, q0, q2              # ➗ Округлення

logger = logging.getLogger(f"{LOG_NAME}.domain.promotions.calculator")

DiscountRule = Callable[[Promotion, CheckoutSnapshot], Decimal]


# ================================
# 📐 ПРАВИЛА ЗА ТИПАМИ
# ================================
def _percentage(promotion: Promotion, snapshot: CheckoutSnapshot) -> Decimal:
    return q0(percent(snapshot.subtotal, promotion.discount_value))


def _fixed(promotion: Promotion, snapshot: CheckoutSnapshot) -> Decimal:
    if promotion.apply_to is ApplyTo.ITEM:
        return promotion.discount_value * snapshot.total_quantity
    return promotion.discount_value


def _price_override(promotion: Promotion, snapshot: CheckoutSnapshot) -> Decimal:
    # discount_value: знижка на одиницю; ціна з запису лише інформаційна
    scoped_qty = snapshot.quantity_in(promotion.category_filter)
    if promotion.min_quantity is not None and scoped_qty < promotion.min_quantity:
        return ZERO
    return promotion.discount_value * scoped_qty


_RULES: Dict[DiscountType, DiscountRule] = {
    DiscountType.PERCENTAGE: _percentage,
    DiscountType.FIXED: _fixed,
    DiscountType.PRICE_OVERRIDE: _price_override,
}

_missing = set(DiscountType) - set(_RULES)
if _missing:                                                    # pragma: no cover
    raise RuntimeError(f"No discount rule for: {sorted(t.value for t in _missing)}")


# ================================
# 🚀 ПУБЛІЧНИЙ API
# ================================
def compute_discount(promotion: Promotion, snapshot: CheckoutSnapshot) -> Decimal:
    """
    Рахує знижку для вже перевіреного (eligible) промокоду.

    Returns:
        Decimal: сума в межах [0, subtotal], 2 знаки після коми.
    """
    rule = _RULES[promotion.discount_type]
    raw = rule(promotion, snapshot)
    subtotal = q2(snapshot.subtotal)
    discount = clamp(q2(raw), ZERO, subtotal)
    logger.debug(
        "🧮 Discount computed | code=%s type=%s raw=%s subtotal=%s → %s",
        promotion.code,
        promotion.discount_type,
        raw,
        subtotal,
        discount,
    )
    return discount


__all__ = ["compute_discount", "DiscountRule"]
