# ➗ storefront/domain/promotions/rounding.py
"""
➗ Утиліти округлення грошей для рушія промокодів.

🔹 `q2` — квантування до копійок (2 знаки).
🔹 `q0` — округлення до цілої одиниці валюти (так округлює вітрина).
🔹 `percent` — відсоток від суми без проміжних float.
🔹 Усі функції використовують ROUND_HALF_UP (half-away-from-zero для додатних сум).
"""

from __future__ import annotations

# 🔠 Системні імпорти
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP   # 💵 Точні гроші
from typing import Any, Optional                               # 🧰 Типи

# ================================
# 🧾 КОНСТАНТИ
# ================================
ZERO = Decimal("0")
CENT = Decimal("0.01")                                          # 🪙 Квант копійок
UNIT = Decimal("1")                                             # 🪙 Квант цілої одиниці
ROUNDING = ROUND_HALF_UP                                        # 🔁 Єдина стратегія округлення


def to_decimal(value: Any, *, field_name: str = "value") -> Decimal:
    """
    Перетворює int/str/float/Decimal у Decimal.

    float проходить через `str()`, щоб 0.1 не перетворився на 0.1000000000000000055…

    Raises:
        ValueError: значення не є числом.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):                                 # 🚫 True/False не є грошима
        raise ValueError(f"{field_name}: boolean is not a number")
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"{field_name}: {value!r} is not a number") from exc


def optional_decimal(value: Any, *, field_name: str = "value") -> Optional[Decimal]:
    """Як `to_decimal`, але None/"" → None."""
    if value is None or value == "":
        return None
    return to_decimal(value, field_name=field_name)


def q2(value: Any) -> Decimal:
    """Квантує суму до 2 знаків (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(CENT, rounding=ROUNDING)


def q0(value: Any) -> Decimal:
    """Округлює суму до цілої одиниці валюти (ROUND_HALF_UP)."""
    return to_decimal(value).quantize(UNIT, rounding=ROUNDING)


def percent(amount: Any, rate_percent: Any) -> Decimal:
    """Повертає `amount × rate / 100` без округлення."""
    return to_decimal(amount) * to_decimal(rate_percent) / Decimal("100")


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Обмежує значення відрізком [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value


__all__ = ["ZERO", "CENT", "to_decimal", "optional_decimal", "q2", "q0", "percent", "clamp"]
