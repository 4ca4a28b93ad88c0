# 🧭 storefront/errors/reason_mapper.py
"""
🧭 Мапить винятки → `ReasonCode` + контекст і формує текст для покупця.

🔹 Класифіковані `PromotionError` несуть пороги (кількість, сума, категорія) — вони йдуть у ctx.
🔹 Мережеві збої розрізняються на таймаут / зʼєднання / HTTP-статус.
🔹 Невідоме → `INTERNAL` з безпечним загальним текстом.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування процесу мапінгу
from decimal import Decimal                                     # 💰 Сума знижки
from typing import Any, Dict, Final, Optional, Tuple            # 📐 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from . import static_messages as msg                            # 💬 Тексти
from .custom_errors import (
    CategoryMismatchError,
    FirstOrderOnlyViolationError,
    InactivePromotionError,
    InvalidCodeError,
    MinimumPriceNotMetError,
    MinimumQuantityNotMetError,
    NetworkFailureError,
    PromotionError,
)
from .reason_codes import ReasonCode                            # 🧮 Перелік причин

# ================================
# 🧾 ЛОГЕР
# ================================
logger = logging.getLogger(f"{LOG_NAME}.errors.reason_mapper")


# ================================
# 🧭 ОСНОВНИЙ МАПЕР
# ================================
def map_error_to_reason(exc: Exception) -> Tuple[ReasonCode, Dict[str, Any]]:
    """
    Повертає (reason_code, ctx) — ctx підставляється у текст повідомлення.
    """
    logger.debug("🔎 map_error_to_reason start", extra={"exc_type": type(exc).__name__})

    if isinstance(exc, NetworkFailureError):
        return _map_network(exc)
    if isinstance(exc, PromotionError):
        return _map_promotion(exc)

    logger.warning("❓ Unknown error mapped to INTERNAL", extra={"exc_type": type(exc).__name__})
    return ReasonCode.INTERNAL, {}


def _map_promotion(exc: PromotionError) -> Tuple[ReasonCode, Dict[str, Any]]:
    ctx: Dict[str, Any] = {"code": exc.promotion_code or ""}
    if isinstance(exc, InvalidCodeError):
        return ReasonCode.INVALID_CODE, ctx
    if isinstance(exc, InactivePromotionError):
        return ReasonCode.INACTIVE_PROMOTION, ctx
    if isinstance(exc, CategoryMismatchError):
        ctx["category"] = exc.category
        return ReasonCode.CATEGORY_MISMATCH, ctx
    if isinstance(exc, MinimumQuantityNotMetError):
        ctx.update(
            required=exc.required,
            actual=exc.actual,
            scope=f"{exc.category} " if exc.category else "",
        )
        return ReasonCode.MIN_QUANTITY_NOT_MET, ctx
    if isinstance(exc, MinimumPriceNotMetError):
        ctx.update(required=exc.required, actual=exc.actual)
        return ReasonCode.MIN_PRICE_NOT_MET, ctx
    if isinstance(exc, FirstOrderOnlyViolationError):
        ctx["reason"] = exc.reason
        return ReasonCode.FIRST_ORDER_ONLY, ctx
    logger.debug("ℹ️ Generic PromotionError mapped to INTERNAL")
    return ReasonCode.INTERNAL, ctx


def _map_network(exc: NetworkFailureError) -> Tuple[ReasonCode, Dict[str, Any]]:
    if exc.is_timeout:
        return ReasonCode.HTTP_TIMEOUT, {}
    if exc.status_code:
        return ReasonCode.HTTP_STATUS, {"status_code": exc.status_code}
    return ReasonCode.HTTP_CONNECTION, {}


# ================================
# 📝 ТЕКСТ ДЛЯ ПОКУПЦЯ
# ================================
_TEMPLATES: Final[Dict[ReasonCode, str]] = {
    ReasonCode.INVALID_CODE: msg.PROMO_INVALID_CODE,
    ReasonCode.INACTIVE_PROMOTION: msg.PROMO_INACTIVE,
    ReasonCode.CATEGORY_MISMATCH: msg.PROMO_CATEGORY_MISMATCH,
    ReasonCode.MIN_QUANTITY_NOT_MET: msg.PROMO_MIN_QUANTITY,
    ReasonCode.MIN_PRICE_NOT_MET: msg.PROMO_MIN_PRICE,
    ReasonCode.FIRST_ORDER_ONLY: msg.PROMO_FIRST_ORDER_ONLY,
    ReasonCode.HTTP_TIMEOUT: msg.ERROR_HTTP_TIMEOUT,
    ReasonCode.HTTP_CONNECTION: msg.ERROR_HTTP_CONNECTION,
    ReasonCode.HTTP_STATUS: msg.ERROR_HTTP_STATUS,
    ReasonCode.INTERNAL: msg.ERROR_UNKNOWN,
}

_NEXT_TIPS: Final[Dict[ReasonCode, str]] = {
    ReasonCode.INVALID_CODE: msg.TIP_CHECK_CODE,
    ReasonCode.HTTP_TIMEOUT: msg.TIP_RETRY,
    ReasonCode.HTTP_CONNECTION: msg.TIP_RETRY,
    ReasonCode.HTTP_STATUS: msg.TIP_RETRY,
    ReasonCode.INTERNAL: msg.TIP_RETRY,
}


def build_error_message(code: ReasonCode, *, ctx: Optional[Dict[str, Any]] = None) -> str:
    """Повертає повідомлення для покупця з опціональною порадою."""
    context = ctx or {}
    if code is ReasonCode.FIRST_ORDER_ONLY and context.get("reason"):
        body = str(context["reason"])                           # 🧾 Сервер уже сформулював причину
    else:
        try:
            body = _TEMPLATES.get(code, msg.ERROR_UNKNOWN).format(**context)
        except (KeyError, IndexError):
            logger.warning("⚠️ Missing ctx for %s: %s", code, context)
            body = msg.ERROR_UNKNOWN
    tip = _NEXT_TIPS.get(code)
    if tip:
        return f"{body} {tip}"
    return body


def describe_error(exc: Exception) -> str:
    """Шорткат: виняток → готовий текст."""
    code, ctx = map_error_to_reason(exc)
    return build_error_message(code, ctx=ctx)


def build_applied_message(code: str, discount: Decimal) -> str:
    """Підтвердження для покупця після застосування коду."""
    return msg.PROMO_APPLIED.format(code=code, discount=discount)


__all__ = ["map_error_to_reason", "build_error_message", "describe_error", "build_applied_message"]
