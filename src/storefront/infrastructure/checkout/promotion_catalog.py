# 📦 storefront/infrastructure/checkout/promotion_catalog.py
"""
📦 PromotionCatalog — кеш каталогу промокодів із захистом від дубльованих запитів.

🔹 Не більше одного `list_active()` у польоті: паралельні виклики чекають ту саму задачу.
🔹 Не більше одного `get_by_code()` у польоті на кожен нормалізований код.
🔹 Збій каталогу фіксується (`FAILED` + `last_error`), повертається порожній кортеж,
   а наступний виклик пробує знову.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import asyncio                                                      # 🔁 Спільні задачі
import logging                                                      # 🧾 Логи каталогу
import time                                                         # ⏱️ Латентність
from enum import Enum, unique                                       # 🏷️ Статуси
from typing import Dict, Optional, Tuple                            # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.domain.promotions.entities import Promotion
from storefront.domain.promotions.interfaces import IPromotionRepository
from storefront.errors.custom_errors import AppError, NetworkFailureError
from storefront.errors.static_messages import ERROR_UNKNOWN
from storefront.errors.strategies import DEFAULT_STRATEGIES, convert_error
from storefront.shared.utils.logger import LOG_NAME                 # 🏷️ Базове імʼя логера
from .metrics import PROMO_CATALOG_FAILURES, PROMO_CATALOG_FETCHES, PROMO_CATALOG_LATENCY

logger = logging.getLogger(f"{LOG_NAME}.infrastructure.checkout.catalog")


@unique
class CatalogStatus(str, Enum):
    """Стан завантаження каталогу."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


class PromotionCatalog:
    """🗂️ Тримає останній завантажений каталог і дедуплікує запити до репозиторію."""

    def __init__(self, repository: IPromotionRepository) -> None:
        self._repository = repository
        self._promotions: Tuple[Promotion, ...] = ()                    # 📚 Останній успішний каталог
        self._status = CatalogStatus.IDLE
        self._last_error: Optional[AppError] = None
        self._catalog_task: Optional["asyncio.Task[Tuple[Promotion, ...]]"] = None
        self._lookups: Dict[str, "asyncio.Task[Optional[Promotion]]"] = {}

    # ================================
    # 🔎 СТАН
    # ================================
    @property
    def status(self) -> CatalogStatus:
        return self._status

    @property
    def last_error(self) -> Optional[AppError]:
        return self._last_error

    @property
    def promotions(self) -> Tuple[Promotion, ...]:
        return self._promotions

    def find_loaded(self, code: str) -> Optional[Promotion]:
        """Пошук у вже завантаженому каталозі без мережі."""
        normalized = (code or "").strip().upper()
        for promotion in self._promotions:
            if promotion.code == normalized:
                return promotion
        return None

    # ================================
    # 📥 КАТАЛОГ
    # ================================
    async def ensure_loaded(self) -> Tuple[Promotion, ...]:
        """Повертає каталог, завантажуючи його лише якщо ще не завантажено."""
        if self._status is CatalogStatus.READY:
            return self._promotions
        return await self._shared_catalog_load()

    async def refresh(self) -> Tuple[Promotion, ...]:
        """Примусове перезавантаження (так само дедупліковане)."""
        return await self._shared_catalog_load()

    async def _shared_catalog_load(self) -> Tuple[Promotion, ...]:
        if self._catalog_task is None:
            self._status = CatalogStatus.LOADING
            self._catalog_task = asyncio.ensure_future(self._load_catalog())
        else:
            logger.debug("⏳ Catalog fetch already in flight, joining it")
        # 🛡️ Скасування одного з очікувачів не скасовує спільну задачу
        return await asyncio.shield(self._catalog_task)

    async def _load_catalog(self) -> Tuple[Promotion, ...]:
        PROMO_CATALOG_FETCHES.inc()
        started = time.perf_counter()
        try:
            promotions = tuple(await self._repository.list_active())
        except AppError as exc:
            PROMO_CATALOG_FAILURES.inc()
            self._status = CatalogStatus.FAILED
            self._last_error = exc
            logger.warning("⚠️ Promotion catalog unavailable: %s", exc.message, extra=exc.to_log_extra())
            return ()
        except Exception as exc:
            error = convert_error(exc, DEFAULT_STRATEGIES) or NetworkFailureError(ERROR_UNKNOWN, details=repr(exc))
            PROMO_CATALOG_FAILURES.inc()
            self._status = CatalogStatus.FAILED
            self._last_error = error
            logger.exception("🔥 Unexpected failure while loading promotion catalog")
            return ()
        finally:
            PROMO_CATALOG_LATENCY.observe(time.perf_counter() - started)
            self._catalog_task = None                                   # 🔓 Наступний виклик може повторити

        self._promotions = promotions
        self._status = CatalogStatus.READY
        self._last_error = None
        logger.info("📦 Promotion catalog loaded: %s promotion(s)", len(promotions))
        return promotions

    # ================================
    # 🔍 ПОШУК ЗА КОДОМ
    # ================================
    async def get_by_code(self, code: str) -> Optional[Promotion]:
        """
        Повертає промокод за кодом або None.

        Raises:
            NetworkFailureError: репозиторій недоступний.
        """
        normalized = (code or "").strip().upper()
        if not normalized:
            return None
        task = self._lookups.get(normalized)
        if task is None:
            task = asyncio.ensure_future(self._repository.get_by_code(normalized))
            self._lookups[normalized] = task
            task.add_done_callback(lambda _t, key=normalized: self._lookups.pop(key, None))
        else:
            logger.debug("⏳ Lookup for %s already in flight, joining it", normalized)
        return await asyncio.shield(task)


__all__ = ["PromotionCatalog", "CatalogStatus"]
