# 🧮 storefront/errors/reason_codes.py
"""
🧮 Перелік причин, з якими промокод може бути відхилений (для UI та метрик).
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ReasonCode(str, Enum):
    INVALID_CODE = "invalid_code"
    INACTIVE_PROMOTION = "inactive_promotion"
    CATEGORY_MISMATCH = "category_mismatch"
    MIN_QUANTITY_NOT_MET = "minimum_quantity_not_met"
    MIN_PRICE_NOT_MET = "minimum_price_not_met"
    FIRST_ORDER_ONLY = "first_order_only"
    HTTP_TIMEOUT = "http_timeout"
    HTTP_CONNECTION = "http_connection"
    HTTP_STATUS = "http_status"
    INTERNAL = "internal"

    def __str__(self) -> str:
        return self.value


__all__ = ["ReasonCode"]
