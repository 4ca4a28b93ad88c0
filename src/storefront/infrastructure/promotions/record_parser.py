# 🧾 storefront/infrastructure/promotions/record_parser.py
"""
🧾 Парсер JSON-записів промокодів (форма адмінки вітрини) → `Promotion`.

🔹 Ключі в camelCase: `code`, `isActive`, `discountType`, `discountValue`, `category`,
   `minQuantity`, `minPrice`, `firstOrderOnly`, `applyTo`, `title`, `subtitle`, `price`, `salePrice`.
🔹 `applyTo: "total"` з адмінки — це знижка на замовлення (`ApplyTo.ORDER`).
🔹 Некоректний запис → `InvalidPromotionRecordError`; у каталозі такі записи пропускаються.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування парсингу
from decimal import Decimal, InvalidOperation                   # 🔢 Перевірка цілих полів
from typing import Any, Dict, Iterable, List, Mapping, Optional # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.domain.promotions.entities import ApplyTo, DiscountType, Promotion
from storefront.errors.custom_errors import InvalidPromotionRecordError
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера

logger = logging.getLogger(f"{LOG_NAME}.infrastructure.promotions.parser")

# ================================
# 🗺️ АЛІАСИ ЗНАЧЕНЬ
# ================================
_DISCOUNT_TYPES: Dict[str, DiscountType] = {
    "percentage": DiscountType.PERCENTAGE,
    "percent": DiscountType.PERCENTAGE,
    "fixed": DiscountType.FIXED,
    "flat": DiscountType.FIXED,
    "price_override": DiscountType.PRICE_OVERRIDE,
    "priceoverride": DiscountType.PRICE_OVERRIDE,
    "price-override": DiscountType.PRICE_OVERRIDE,
}

_APPLY_TO: Dict[str, ApplyTo] = {
    "order": ApplyTo.ORDER,
    "total": ApplyTo.ORDER,
    "item": ApplyTo.ITEM,
    "items": ApplyTo.ITEM,
}


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _flag(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _optional_int(value: Any, *, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field_name}: boolean is not a number")
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"{field_name}: {value!r} is not a number") from exc
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"{field_name}: {value!r} is not a whole number")  # 🔢 2.7 не округлюємо мовчки
    return int(number)


def parse_promotion(record: Mapping[str, Any]) -> Promotion:
    """
    Перетворює один JSON-запис на `Promotion`.

    Raises:
        InvalidPromotionRecordError: відсутній код, невідомий тип знижки або нечислові поля.
    """
    if not isinstance(record, Mapping):
        raise InvalidPromotionRecordError(f"Promotion record must be an object, got {type(record).__name__}")

    code = _text(record.get("code"))
    if code is None:
        raise InvalidPromotionRecordError("Promotion record has no code", details=repr(dict(record)))

    raw_type = (_text(record.get("discountType")) or "").lower()
    discount_type = _DISCOUNT_TYPES.get(raw_type)
    if discount_type is None:
        raise InvalidPromotionRecordError(
            f"Unknown discount type {record.get('discountType')!r}",
            record_code=code,
        )

    raw_apply_to = _text(record.get("applyTo"))
    apply_to: Optional[ApplyTo] = None
    if raw_apply_to is not None:
        apply_to = _APPLY_TO.get(raw_apply_to.lower())
        if apply_to is None:
            raise InvalidPromotionRecordError(f"Unknown applyTo {raw_apply_to!r}", record_code=code)

    try:
        return Promotion(
            code=code,
            discount_type=discount_type,
            discount_value=record.get("discountValue", 0),
            is_active=_flag(record.get("isActive"), default=True),
            category=_text(record.get("category")),
            min_quantity=_optional_int(record.get("minQuantity"), field_name="minQuantity"),
            min_price=record.get("minPrice"),
            first_order_only=_flag(record.get("firstOrderOnly"), default=False),
            apply_to=apply_to,
            title=_text(record.get("title")),
            subtitle=_text(record.get("subtitle")),
            display_price=record.get("price"),
            sale_price=record.get("salePrice"),
        )
    except (TypeError, ValueError) as exc:
        raise InvalidPromotionRecordError(
            f"Malformed promotion record {code!r}: {exc}",
            record_code=code,
            details=str(exc),
        ) from exc


def parse_catalog(records: Iterable[Any]) -> List[Promotion]:
    """
    Розбирає каталог, зберігаючи порядок. Зламані записи пропускаються з попередженням.
    """
    promotions: List[Promotion] = []
    for index, record in enumerate(records):
        try:
            promotions.append(parse_promotion(record))
        except InvalidPromotionRecordError as exc:
            logger.warning("⚠️ Skipping promotion record #%s: %s", index, exc.message, extra=exc.to_log_extra())
    logger.debug("📦 Parsed %s promotion(s)", len(promotions))
    return promotions


__all__ = ["parse_promotion", "parse_catalog"]
