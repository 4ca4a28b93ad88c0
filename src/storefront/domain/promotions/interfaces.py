# 🧩 storefront/domain/promotions/interfaces.py
"""
🧩 Контракти зовнішніх співпрацівників рушія промокодів.

Репозиторій промокодів, історія замовлень і контекст авторизації для рушія — лише читання.
"""

from __future__ import annotations

# 🔠 Системні імпорти
from abc import ABC, abstractmethod                             # 🏛️ Контракти
from dataclasses import dataclass                               # 🧱 DTO
from decimal import Decimal                                     # 💵 Гроші
from typing import Optional, Sequence                           # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from .entities import Promotion


# ================================
# 🏛️ СТРУКТУРИ ДАНИХ (DTO)
# ================================
@dataclass(frozen=True, slots=True)
class FirstOrderDecision:
    """Відповідь сервера на перевірку first-order-only коду."""
    accepted: bool
    reason: Optional[str] = None

    @classmethod
    def accept(cls) -> "FirstOrderDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> "FirstOrderDecision":
        return cls(accepted=False, reason=reason)


# ================================
# 🎟️ РЕПОЗИТОРІЙ ПРОМОКОДІВ
# ================================
class IPromotionRepository(ABC):
    """Джерело записів промокодів. Мережеві збої → `NetworkFailureError`."""

    @abstractmethod
    async def list_active(self) -> Sequence[Promotion]:
        """Каталог активних промокодів у порядку, заданому адміністратором."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Promotion]:
        """Промокод за кодом або None, якщо такого немає."""

    @abstractmethod
    async def validate_first_order_eligibility(self, code: str, subtotal: Decimal) -> FirstOrderDecision:
        """Серверна перевірка first-order-only коду для поточного покупця."""

    async def close(self) -> None:
        """Звільняє ресурси (HTTP-клієнт тощо)."""
        return None


# ================================
# 👤 ПОКУПЕЦЬ
# ================================
class IOrderHistoryProvider(ABC):
    """Історія оплачених замовлень покупця."""

    @abstractmethod
    async def has_prior_paid_order(self, user_id: str) -> bool:
        pass


class IAuthContext(ABC):
    """Стан авторизації поточного покупця."""

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        pass

    @property
    @abstractmethod
    def user_id(self) -> Optional[str]:
        pass


__all__ = [
    "FirstOrderDecision",
    "IPromotionRepository",
    "IOrderHistoryProvider",
    "IAuthContext",
]
