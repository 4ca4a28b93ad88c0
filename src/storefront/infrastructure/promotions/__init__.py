# 🎟️ storefront/infrastructure/promotions/__init__.py
"""
🎟️ Адаптери репозиторію промокодів: HTTP, JSON-файл і парсер записів.
"""

from .file_repository import JsonFilePromotionRepository
from .http_repository import HttpPromotionRepository
from .record_parser import parse_catalog, parse_promotion

__all__ = [
    "HttpPromotionRepository",
    "JsonFilePromotionRepository",
    "parse_catalog",
    "parse_promotion",
]
