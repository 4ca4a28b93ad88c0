# 🚨 storefront/errors/custom_errors.py
"""
🚨 Ієрархія винятків рушія промокодів.

🔹 `AppError` — базовий технічний виняток, `UserVisibleError` — те, що можна показати покупцю.
🔹 `PromotionError` та нащадки — класифіковані причини відмови промокоду з порогами для повідомлень.
🔹 Кожен виняток уміє віддати `to_log_extra()` для структурованих логів.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування створення помилок
from decimal import Decimal                                     # 💵 Пороги сум
from typing import Dict, Optional                               # 📐 Типізація

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера

# ================================
# 🧾 ЛОГЕР
# ================================
logger = logging.getLogger(f"{LOG_NAME}.errors")


# ================================
# 🏷️ КОДИ ПОМИЛОК
# ================================
class ErrorCode:
    """🏷️ Рядкові коди класифікованих умов (ідуть у логи та метрики)."""

    INVALID_CODE = "invalid_code"
    INACTIVE_PROMOTION = "inactive_promotion"
    CATEGORY_MISMATCH = "category_mismatch"
    MIN_QUANTITY_NOT_MET = "minimum_quantity_not_met"
    MIN_PRICE_NOT_MET = "minimum_price_not_met"
    FIRST_ORDER_ONLY = "first_order_only_violation"
    NETWORK = "network_failure"
    INVALID_RECORD = "invalid_promotion_record"
    STALE_RESULT = "stale_result"
    UNKNOWN = "unknown_error"


# ================================
# 🧠 БАЗОВІ ВИНЯТКИ
# ================================
class AppError(Exception):
    """🧠 Базовий виняток застосунку."""

    code: str = ErrorCode.UNKNOWN

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message                                  # 💬 Основний текст
        self.details = details                                  # 🔍 Технічні деталі (для логів)

    def to_log_extra(self) -> Dict[str, object]:
        """📦 Формує словник для `logger.extra`."""
        extra: Dict[str, object] = {"error_code": self.code}
        if self.details:
            extra["details"] = self.details
        return extra


class UserVisibleError(AppError):
    """👀 Помилка, текст якої безпечно показати покупцю."""


class InvalidPromotionRecordError(AppError):
    """🧾 Запис промокоду з репозиторію має некоректну форму."""

    code = ErrorCode.INVALID_RECORD

    def __init__(self, message: str, *, record_code: Optional[str] = None, details: Optional[str] = None) -> None:
        super().__init__(message, details=details)
        self.record_code = record_code

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        if self.record_code:
            extra["promotion_code"] = self.record_code
        return extra


class StaleResultError(AppError):
    """⌛ Асинхронний результат запізнився: знімок або запит уже змінився."""

    code = ErrorCode.STALE_RESULT


# ================================
# 🎟️ ПОМИЛКИ ПРОМОКОДІВ
# ================================
class PromotionError(UserVisibleError):
    """🎟️ Базова причина, з якої промокод не може бути застосований."""

    def __init__(self, message: str, *, promotion_code: Optional[str] = None, details: Optional[str] = None) -> None:
        super().__init__(message, details=details)
        self.promotion_code = promotion_code

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        if self.promotion_code:
            extra["promotion_code"] = self.promotion_code
        return extra


class InvalidCodeError(PromotionError):
    """❓ Код не знайдено в репозиторії."""

    code = ErrorCode.INVALID_CODE

    def __init__(self, promotion_code: str) -> None:
        super().__init__(f"Promotion code {promotion_code!r} does not exist", promotion_code=promotion_code)


class InactivePromotionError(PromotionError):
    """⏸️ Промокод існує, але вимкнений."""

    code = ErrorCode.INACTIVE_PROMOTION

    def __init__(self, promotion_code: str) -> None:
        super().__init__(f"Promotion code {promotion_code!r} is not active", promotion_code=promotion_code)


class CategoryMismatchError(PromotionError):
    """🏷️ У кошику немає жодного товару потрібної категорії."""

    code = ErrorCode.CATEGORY_MISMATCH

    def __init__(self, promotion_code: str, *, category: str) -> None:
        super().__init__(
            f"Promotion code {promotion_code!r} requires a {category} item",
            promotion_code=promotion_code,
        )
        self.category = category

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        extra["category"] = self.category
        return extra


class MinimumQuantityNotMetError(PromotionError):
    """🔢 Кількість одиниць (у категорії або загалом) нижча за поріг."""

    code = ErrorCode.MIN_QUANTITY_NOT_MET

    def __init__(self, promotion_code: str, *, required: int, actual: int, category: Optional[str] = None) -> None:
        scope = f" {category}" if category else ""
        super().__init__(
            f"Promotion code {promotion_code!r} requires at least {required}{scope} items, cart has {actual}",
            promotion_code=promotion_code,
        )
        self.required = required
        self.actual = actual
        self.category = category

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        extra.update({"required": self.required, "actual": self.actual, "category": self.category})
        return extra


class MinimumPriceNotMetError(PromotionError):
    """💵 Підсумок кошика нижчий за мінімальну суму замовлення."""

    code = ErrorCode.MIN_PRICE_NOT_MET

    def __init__(self, promotion_code: str, *, required: Decimal, actual: Decimal) -> None:
        super().__init__(
            f"Promotion code {promotion_code!r} requires a minimum order of {required}, subtotal is {actual}",
            promotion_code=promotion_code,
        )
        self.required = required
        self.actual = actual

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        extra.update({"required": str(self.required), "actual": str(self.actual)})
        return extra


class FirstOrderOnlyViolationError(PromotionError):
    """🥇 Код лише для першого замовлення, а покупець уже має оплачене."""

    code = ErrorCode.FIRST_ORDER_ONLY

    def __init__(self, promotion_code: str, *, reason: Optional[str] = None) -> None:
        super().__init__(
            reason or f"Promotion code {promotion_code!r} is valid on the first order only",
            promotion_code=promotion_code,
        )
        self.reason = reason


class NetworkFailureError(PromotionError):
    """🌐 Виклик репозиторію промокодів не вдався (retryable)."""

    code = ErrorCode.NETWORK

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        is_timeout: bool = False,
        details: Optional[str] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.url = url                                          # 🔗 URL, що викликав помилку
        self.status_code = status_code                          # 🔢 HTTP-код відповіді
        self.is_timeout = is_timeout                            # ⏱️ Таймаут, а не відмова зʼєднання
        logger.debug("🌐 NetworkFailureError created", extra={"url": url, "status_code": status_code})

    def to_log_extra(self) -> Dict[str, object]:
        extra = super().to_log_extra()
        if self.url:
            extra["url"] = self.url
        if self.status_code is not None:
            extra["status_code"] = self.status_code
        return extra


# ================================
# 📤 ПУБЛІЧНИЙ API
# ================================
__all__ = [
    "ErrorCode",
    "AppError",
    "UserVisibleError",
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
]
