# 🛒 storefront/infrastructure/checkout/__init__.py
"""
🛒 Оркестрація оформлення: сесія промокодів, каталог із дедуплікацією, метрики.
"""

from .checkout_session import CheckoutSession, FirstOrderValidation
from .promotion_catalog import CatalogStatus, PromotionCatalog

__all__ = [
    "CheckoutSession",
    "FirstOrderValidation",
    "PromotionCatalog",
    "CatalogStatus",
]
