# 💬 storefront/errors/static_messages.py
"""
💬 Тексти повідомлень для покупця (вітрина англомовна, тому тексти — англійською).

Плейсхолдери підставляються через `str.format` з контексту `reason_mapper`.
"""

from typing import Final

PROMO_INVALID_CODE: Final[str] = "❌ Invalid coupon code \"{code}\"."
PROMO_INACTIVE: Final[str] = "⏸️ Coupon \"{code}\" is no longer active."
PROMO_CATEGORY_MISMATCH: Final[str] = "🏷️ Coupon \"{code}\" applies to {category} items only."
PROMO_MIN_QUANTITY: Final[str] = "🔢 Add at least {required} {scope}items to use \"{code}\" (you have {actual})."
PROMO_MIN_PRICE: Final[str] = "💵 Coupon \"{code}\" needs a minimum order of ₹{required} (current subtotal ₹{actual})."
PROMO_FIRST_ORDER_ONLY: Final[str] = "🥇 Coupon \"{code}\" is valid on your first order only."
PROMO_APPLIED: Final[str] = "✅ Coupon \"{code}\" applied: you save ₹{discount}."

ERROR_HTTP_TIMEOUT: Final[str] = "⏱️ Coupon service is taking too long to respond."
ERROR_HTTP_CONNECTION: Final[str] = "🌐 Could not reach the coupon service."
ERROR_HTTP_STATUS: Final[str] = "⚠️ Coupon service returned an error ({status_code})."
ERROR_UNKNOWN: Final[str] = "⚠️ Something went wrong while applying the coupon."

TIP_RETRY: Final[str] = "Please try again in a moment."
TIP_CHECK_CODE: Final[str] = "Check the spelling and try again."
