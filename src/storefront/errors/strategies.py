# 📜 storefront/errors/strategies.py
"""
📜 Стратегії конвертації сторонніх винятків у доменні `AppError`.

🔹 Адаптери репозиторіїв проганяють виняток через стратегії й піднімають уже доменну помилку.
🔹 Нові джерела збоїв додаються новою стратегією, без змін в адаптерах.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import httpx                                                    # 🌐 HTTP-клієнт (винятки)

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування стратегій
from typing import Iterable, Optional, Protocol                 # 📐 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from . import static_messages as msg                            # 💬 Тексти
from .custom_errors import AppError, NetworkFailureError        # ⚠️ Доменні помилки

# ================================
# 🧾 ЛОГЕР
# ================================
logger = logging.getLogger(f"{LOG_NAME}.errors.strategies")


# ================================
# 🧠 КОНТРАКТ СТРАТЕГІЙ
# ================================
class IErrorHandlingStrategy(Protocol):
    """🧠 Контракт, що визначає єдиний метод `handle`."""

    def handle(self, error: Exception) -> Optional[AppError]:
        """Вертає `AppError`, якщо виняток розпізнано, або None."""


def _request_url(error: Exception) -> str:
    try:
        return str(error.request.url)                           # type: ignore[attr-defined]
    except (AttributeError, RuntimeError):                      # ⚠️ httpx піднімає RuntimeError без request
        return "N/A"


# ================================
# 🌐 HTTPX-СТРАТЕГІЯ
# ================================
class HttpxErrorStrategy(IErrorHandlingStrategy):
    """🌐 Перетворює httpx-помилки на `NetworkFailureError`."""

    def handle(self, error: Exception) -> Optional[AppError]:
        if isinstance(error, httpx.TimeoutException):           # ⏱️ Таймаути запиту
            url = _request_url(error)
            logger.debug("⏱️ httpx timeout", extra={"url": url})
            return NetworkFailureError(msg.ERROR_HTTP_TIMEOUT, url=url, is_timeout=True, details=str(error))

        if isinstance(error, httpx.HTTPStatusError):            # 🔢 Неочікуваний статус
            url = _request_url(error)
            status = error.response.status_code
            logger.debug("🔢 httpx status error", extra={"url": url, "status": status})
            return NetworkFailureError(
                msg.ERROR_HTTP_STATUS.format(status_code=status),
                url=url,
                status_code=status,
                details=str(error),
            )

        if isinstance(error, httpx.TransportError):             # 🌐 Не вдалося підʼєднатися / обрив
            url = _request_url(error)
            logger.debug("🌐 httpx transport error", extra={"url": url})
            return NetworkFailureError(msg.ERROR_HTTP_CONNECTION, url=url, details=str(error))

        return None


class PayloadErrorStrategy(IErrorHandlingStrategy):
    """🧾 Невалідний JSON у відповіді — теж мережевий збій для рушія."""

    def handle(self, error: Exception) -> Optional[AppError]:
        if isinstance(error, ValueError):                       # json.JSONDecodeError є нащадком ValueError
            logger.debug("🧾 Malformed payload: %s", error)
            return NetworkFailureError(msg.ERROR_UNKNOWN, details=f"malformed payload: {error}")
        return None


def convert_error(error: Exception, strategies: Iterable[IErrorHandlingStrategy]) -> Optional[AppError]:
    """🔄 Пропускає виняток через стратегії й повертає перший розпізнаний `AppError`."""
    if isinstance(error, AppError):
        return error
    for strategy in strategies:
        converted = strategy.handle(error)
        if converted is not None:
            return converted
    return None


DEFAULT_STRATEGIES = (HttpxErrorStrategy(), PayloadErrorStrategy())


__all__ = [
    "IErrorHandlingStrategy",
    "HttpxErrorStrategy",
    "PayloadErrorStrategy",
    "convert_error",
    "DEFAULT_STRATEGIES",
]
