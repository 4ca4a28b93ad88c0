# 🚨 storefront/errors/__init__.py
"""
🚨 Пакет помилок: ієрархія винятків, стратегії конвертації та тексти для покупця.
"""

from .custom_errors import (
    AppError,
    CategoryMismatchError,
    ErrorCode,
    FirstOrderOnlyViolationError,
    InactivePromotionError,
    InvalidCodeError,
    InvalidPromotionRecordError,
    MinimumPriceNotMetError,
    MinimumQuantityNotMetError,
    NetworkFailureError,
    PromotionError,
    StaleResultError,
    UserVisibleError,
)
from .reason_codes import ReasonCode
from .reason_mapper import build_applied_message, build_error_message, describe_error, map_error_to_reason

__all__ = [
    "AppError",
    "UserVisibleError",
    "ErrorCode",
    "InvalidPromotionRecordError",
    "StaleResultError",
    "PromotionError",
    "InvalidCodeError",
    "InactivePromotionError",
    "CategoryMismatchError",
    "MinimumQuantityNotMetError",
    "MinimumPriceNotMetError",
    "FirstOrderOnlyViolationError",
    "NetworkFailureError",
    "ReasonCode",
    "map_error_to_reason",
    "build_error_message",
    "describe_error",
    "build_applied_message",
]
