# 🎟️ storefront/domain/promotions/__init__.py
"""
🎟️ Пакет `domain.promotions` — чисте ядро рушія промокодів і ціноутворення.

🔹 `entities.py`    — LineItem, CheckoutSnapshot, Promotion, AppliedPromotion, OrderTotals.
🔹 `snapshot.py`    — побудова незмінного знімка з «купити зараз» або кошика.
🔹 `eligibility.py` — правила застосовності промокоду.
🔹 `calculator.py`  — три політики розрахунку знижки.
🔹 `selection.py`   — авто-вибір (first-match) та машина станів.
🔹 `totals.py`      — підсумки замовлення.
🔹 `interfaces.py`  — контракти репозиторію, історії замовлень і авторизації.
"""

from .calculator import compute_discount
from .eligibility import check_eligibility, evaluate_eligibility
from .entities import (
    ALL_CATEGORIES,
    AppliedPromotion,
    ApplyTo,
    CheckoutMode,
    CheckoutSnapshot,
    DiscountType,
    EligibilityContext,
    LineItem,
    OrderTotals,
    Promotion,
    PromotionSource,
    ShippingTaxPolicy,
)
from .interfaces import FirstOrderDecision, IAuthContext, IOrderHistoryProvider, IPromotionRepository
from .rounding import q0, q2
from .selection import AutoSelectionMachine, AutoSelectionState, select_auto_promotion
from .snapshot import BuyNowSource, CartSource, build_snapshot
from .totals import compute_totals

# ================================
# 📤 ПУБЛІЧНИЙ API ПАКЕТА
# ================================
__all__ = [
    # DTO / типи
    "ALL_CATEGORIES",
    "AppliedPromotion",
    "ApplyTo",
    "CheckoutMode",
    "CheckoutSnapshot",
    "DiscountType",
    "EligibilityContext",
    "LineItem",
    "OrderTotals",
    "Promotion",
    "PromotionSource",
    "ShippingTaxPolicy",
    "BuyNowSource",
    "CartSource",
    # Контракти
    "FirstOrderDecision",
    "IAuthContext",
    "IOrderHistoryProvider",
    "IPromotionRepository",
    # Операції
    "build_snapshot",
    "check_eligibility",
    "evaluate_eligibility",
    "compute_discount",
    "select_auto_promotion",
    "compute_totals",
    "AutoSelectionMachine",
    "AutoSelectionState",
    # Утиліти
    "q0",
    "q2",
]
