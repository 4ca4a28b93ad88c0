# ✅ storefront/domain/promotions/eligibility.py
"""
✅ Перевірка застосовності промокоду до знімка.

Правила (мають виконуватися всі, перевіряються саме в цьому порядку):
    1. промокод активний;
    2. first-order-only: авторизований покупець з оплаченим замовленням → відмова,
       неавторизований → умовно допускаємо (перевірка при оформленні);
    3. категорія (крім "All") присутня хоча б в одній позиції;
    4. scoped quantity ≥ min_quantity;
    5. subtotal ≥ min_price.

`check_eligibility` піднімає першу класифіковану причину, `evaluate_eligibility` — чистий bool.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування рішень

# 🧩 Внутрішні модулі проєкту
from storefront.errors.custom_errors import (                   # ⚠️ Класифіковані причини
    CategoryMismatchError,
    FirstOrderOnlyViolationError,
    InactivePromotionError,
    MinimumPriceNotMetError,
    MinimumQuantityNotMetError,
    PromotionError,
)
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from .entities import CheckoutSnapshot, EligibilityContext, Promotion

logger = logging.getLogger(f"{LOG_NAME}.domain.promotions.eligibility")


def check_eligibility(
    promotion: Promotion,
    snapshot: CheckoutSnapshot,
    context: EligibilityContext,
) -> None:
    """
    Перевіряє всі правила й піднімає першу причину відмови.

    Raises:
        InactivePromotionError, FirstOrderOnlyViolationError, CategoryMismatchError,
        MinimumQuantityNotMetError, MinimumPriceNotMetError.
    """
    code = promotion.code

    if not promotion.is_active:
        raise InactivePromotionError(code)

    if promotion.first_order_only and context.is_authenticated and context.has_prior_paid_order:
        raise FirstOrderOnlyViolationError(code)

    category = promotion.category_filter
    if category is not None and not snapshot.has_category(category):
        raise CategoryMismatchError(code, category=category)

    if promotion.min_quantity is not None:
        scoped_quantity = snapshot.quantity_in(category)
        if scoped_quantity < promotion.min_quantity:
            raise MinimumQuantityNotMetError(
                code,
                required=promotion.min_quantity,
                actual=scoped_quantity,
                category=category,
            )

    if promotion.min_price is not None:
        subtotal = snapshot.subtotal
        if subtotal < promotion.min_price:
            raise MinimumPriceNotMetError(code, required=promotion.min_price, actual=subtotal)


def evaluate_eligibility(
    promotion: Promotion,
    snapshot: CheckoutSnapshot,
    context: EligibilityContext,
) -> bool:
    """Чиста перевірка: True, якщо промокод застосовний до знімка в цьому контексті."""
    try:
        check_eligibility(promotion, snapshot, context)
    except PromotionError as exc:
        logger.debug("🚫 %s ineligible | reason=%s", promotion.code, exc.code)
        return False
    return True


__all__ = ["check_eligibility", "evaluate_eligibility"]
