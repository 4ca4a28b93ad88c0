# 📦 storefront/config/setup/container.py
"""
📦 Контейнер залежностей рушія промокодів.

🔹 Створює репозиторій промокодів (HTTP або JSON-файл) за конфігом
🔹 Тримає спільний `PromotionCatalog` і політику доставки/податку
🔹 Видає нові `CheckoutSession` для кожної сторінки оформлення
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                           # 🧾 Базові засоби логування
from decimal import Decimal, InvalidOperation                            # 🪙 Конвертація конфігурацій грошей
from typing import TYPE_CHECKING, Any, Optional                          # 🧮 Допоміжні типи

# 🧩 Внутрішні модулі проєкту
from storefront.domain.promotions.entities import ShippingTaxPolicy      # 🚚 Доставка / податок
from storefront.domain.promotions.interfaces import (                    # 🧩 Контракти
    IAuthContext,
    IOrderHistoryProvider,
    IPromotionRepository,
)
from storefront.infrastructure.checkout.checkout_session import CheckoutSession  # 🛒 Сесія оформлення
from storefront.infrastructure.checkout.promotion_catalog import PromotionCatalog  # 📦 Каталог
from storefront.infrastructure.promotions.file_repository import JsonFilePromotionRepository  # 💽 Офлайн
from storefront.infrastructure.promotions.http_repository import HttpPromotionRepository  # 🌐 REST API
from storefront.shared.utils.logger import LOG_NAME, init_logging_from_config  # 🧾 Конфіг логування

if TYPE_CHECKING:
    from storefront.config.config_service import ConfigService           # 🗂️ Тип під час перевірки

logger = logging.getLogger(f"{LOG_NAME}.container")                      # 🧾 Модульний логер контейнера


# ================================
# 🛠️ ДОПОМІЖНІ ФУНКЦІЇ
# ================================
def _decimal_or_default(value: Any, default: str, *, key: str) -> Decimal:
    """
    Повертає Decimal або запасне значення, якщо конфіг зіпсований.
    """
    if value is None:
        return Decimal(default)
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        logger.warning("%s має невалідне значення %r — використовую %s", key, value, default)
        return Decimal(default)


def bootstrap_logging(config: Optional["ConfigService"] = None) -> logging.Logger:
    """
    Зчитує конфіг логування і запускає кореневий логер.
    """
    from storefront.config.config_service import ConfigService           # 🧭 Локальний імпорт для уникнення циклів

    cfg = config or ConfigService()
    node = cfg.get("logging", {}) or {}                                  # 📄 Вузол логування
    return init_logging_from_config(node)


# ================================
# 🏛️ КОНТЕЙНЕР ЗАЛЕЖНОСТЕЙ
# ================================
class Container:
    """
    Координує створення репозиторію, каталогу та сесій оформлення.

    `repository` можна передати явно (тести, інша інтеграція) — тоді конфіг джерела ігнорується.
    """

    def __init__(self, config: "ConfigService", *, repository: Optional[IPromotionRepository] = None) -> None:
        self.config = config                                              # ⚙️ Джерело конфігурацій DI
        logger.info("🚀 Стартуємо побудову контейнера залежностей")
        self.repository: IPromotionRepository = repository or self._build_repository()
        self.policy = self._build_policy()
        self.catalog = PromotionCatalog(self.repository)                  # 📦 Спільний для всіх сесій
        logger.info("✅ Контейнер ініціалізовано успішно")

    # ================================
    # 🎟️ РЕПОЗИТОРІЙ ТА ПОЛІТИКА
    # ================================
    def _build_repository(self) -> IPromotionRepository:
        source = str(self.config.get("promotions.source", "http") or "http").strip().lower()
        if source == "file":
            path = self.config.get("promotions.catalog_file")
            if not path:
                raise ValueError("Config 'promotions.catalog_file' is required for source=file.")
            logger.info("💽 Промокоди з файлу %s", path)
            return JsonFilePromotionRepository(path)
        if source != "http":
            raise ValueError(f"Unknown promotions.source {source!r} (expected 'http' or 'file').")
        logger.info("🌐 Промокоди з API %s", self.config.get("promotions.api_url"))
        return HttpPromotionRepository.from_config(self.config)

    def _build_policy(self) -> ShippingTaxPolicy:
        shipping = _decimal_or_default(self.config.get("checkout.shipping_flat"), "0", key="checkout.shipping_flat")
        tax_rate = _decimal_or_default(
            self.config.get("checkout.tax_rate_percent"), "0", key="checkout.tax_rate_percent"
        )
        policy = ShippingTaxPolicy(shipping_flat=shipping, tax_rate_percent=tax_rate)
        logger.debug("🚚 Політика: shipping=%s tax=%s%%", policy.shipping_flat, policy.tax_rate_percent)
        return policy

    # ================================
    # 🛒 СЕСІЇ
    # ================================
    def create_session(
        self,
        auth: IAuthContext,
        history: Optional[IOrderHistoryProvider] = None,
        *,
        pending_code: Optional[str] = None,
    ) -> CheckoutSession:
        """Нова сесія оформлення поверх спільного каталогу."""
        return CheckoutSession(
            self.repository,
            auth,
            history,
            self.policy,
            pending_code=pending_code,
            catalog=self.catalog,
        )

    async def close(self) -> None:
        """Закриває ресурси репозиторію (HTTP-клієнт)."""
        await self.repository.close()
        logger.info("🔌 Контейнер закрито")


__all__ = ["Container", "bootstrap_logging"]
