# 💽 storefront/infrastructure/promotions/file_repository.py
"""
💽 JsonFilePromotionRepository — офлайн-каталог промокодів з JSON-файлу.

Формат файлу: масив записів адмінки або обʼєкт `{"coupons": [...]}`.
Файл перечитується на кожен `list_active`, щоб правки підхоплювались без рестарту.
First-order перевірку цей адаптер не робить: завжди приймає.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import aiofiles                                                     # 💽 Асинхронне читання файлу

# 🔠 Системні імпорти
import json                                                         # 📄 Парсинг каталогу
import logging                                                      # 🧾 Логи адаптера
from decimal import Decimal                                         # 💵 Сигнатура контракту
from pathlib import Path                                            # 📁 Шлях до файлу
from typing import Any, List, Optional, Sequence, Union             # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.domain.promotions.entities import Promotion
from storefront.domain.promotions.interfaces import FirstOrderDecision, IPromotionRepository
from storefront.errors.custom_errors import NetworkFailureError
from storefront.shared.utils.logger import LOG_NAME                 # 🏷️ Базове імʼя логера
from .record_parser import parse_catalog

logger = logging.getLogger(f"{LOG_NAME}.infrastructure.promotions.file")


class JsonFilePromotionRepository(IPromotionRepository):
    """🎟️ Репозиторій поверх локального JSON-файлу."""

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    async def list_active(self) -> Sequence[Promotion]:
        promotions = await self._load()
        active = tuple(p for p in promotions if p.is_active)
        logger.debug("📖 %s active of %s promotion(s) in %s", len(active), len(promotions), self._path)
        return active

    async def get_by_code(self, code: str) -> Optional[Promotion]:
        normalized = (code or "").strip().upper()
        for promotion in await self._load():
            if promotion.code == normalized:
                return promotion                                    # ✅ Включно з неактивними
        return None

    async def validate_first_order_eligibility(self, code: str, subtotal: Decimal) -> FirstOrderDecision:
        logger.debug("🥇 Offline catalog accepts first-order code %s", code)
        return FirstOrderDecision.accept()

    async def _load(self) -> List[Promotion]:
        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as f:
                content = await f.read()
        except UnicodeDecodeError as exc:
            logger.error("❌ Каталог %s не у кодуванні UTF-8: %s", self._path, exc)
            raise NetworkFailureError(
                "Promotion catalog file is not valid UTF-8",
                url=str(self._path),
                details=str(exc),
            ) from exc
        except OSError as exc:
            logger.error("❌ Не вдалося прочитати каталог %s: %s", self._path, exc)
            raise NetworkFailureError(
                "Promotion catalog file is unavailable",
                url=str(self._path),
                details=str(exc),
            ) from exc

        try:
            payload: Any = json.loads(content) if content.strip() else []
        except json.JSONDecodeError as exc:
            logger.error("❌ Каталог %s містить невалідний JSON: %s", self._path, exc)
            raise NetworkFailureError(
                "Promotion catalog file is malformed",
                url=str(self._path),
                details=str(exc),
            ) from exc

        records = payload.get("coupons", []) if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            logger.warning("⚠️ Каталог %s має неочікувану форму: %s", self._path, type(records).__name__)
            return []
        return parse_catalog(records)


__all__ = ["JsonFilePromotionRepository"]
