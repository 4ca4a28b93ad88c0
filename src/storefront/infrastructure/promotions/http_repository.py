# 🌐 storefront/infrastructure/promotions/http_repository.py
"""
🌐 HttpPromotionRepository — HTTP-адаптер репозиторію промокодів.

🎯 Призначення:
    • `GET  coupons/active`                — каталог активних промокодів (порядок адмінки);
    • `GET  coupons/{code}`                — один промокод, 404 → None;
    • `POST coupons/validate-first-order`  — серверна перевірка first-order-only коду.

⚙️ Нотатки:
    • кілька спроб з фіксованою паузою лише для мережевих збоїв і 5xx;
    • усі httpx-винятки конвертуються `HttpxErrorStrategy` у `NetworkFailureError`;
    • Bearer-токен береться з `PROMOTIONS_API_TOKEN` (через ConfigService).
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
import httpx                                                        # 🌐 HTTP-клієнт

# 🔠 Системні імпорти
import asyncio                                                      # 💤 Пауза між спробами
import logging                                                      # 🧾 Логи адаптера
from decimal import Decimal                                         # 💵 Підсумок у запиті
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, cast
from urllib.parse import quote                                      # 🔗 Безпечний код у шляху

# 🧩 Внутрішні модулі проєкту
from storefront.domain.promotions.entities import Promotion
from storefront.domain.promotions.interfaces import FirstOrderDecision, IPromotionRepository
from storefront.errors.custom_errors import AppError, InvalidPromotionRecordError, NetworkFailureError
from storefront.errors.strategies import DEFAULT_STRATEGIES, convert_error
from storefront.shared.utils.logger import LOG_NAME                 # 🏷️ Базове імʼя логера
from .record_parser import parse_catalog, parse_promotion

if TYPE_CHECKING:
    from storefront.config.config_service import ConfigService      # 🗂️ Тип під час перевірки

logger = logging.getLogger(f"{LOG_NAME}.infrastructure.promotions.http")

_REJECT_STATUSES = frozenset({400, 403, 409, 422})                  # 🥇 Сервер відмовив у first-order коді


class HttpPromotionRepository(IPromotionRepository):
    """
    🎟️ Читає промокоди з REST API вітрини.

    `client` можна передати ззовні (тести з `httpx.MockTransport`); тоді адаптер його не закриває.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: float = 5.0,
        retry_attempts: int = 2,
        retry_delay_sec: float = 1.0,
        api_token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not base_url or not isinstance(base_url, str):
            raise ValueError("base_url is required and must be str.")
        self._base_url = base_url.rstrip("/") + "/"                     # 🌐 Базовий URL API
        self._timeout = float(timeout_sec)                              # ⏱️ Таймаут HTTP
        self._retries = max(1, int(retry_attempts))                     # 🔁 Кількість спроб
        self._retry_delay = max(0.0, float(retry_delay_sec))            # 💤 Пауза між спробами
        self._api_token = api_token                                     # 🔐 Bearer-токен
        self._client = client                                           # 🌐 HTTP-клієнт
        self._owns_client = client is None                              # 🧹 Чи закриваємо клієнт самі
        self._init_lock = asyncio.Lock()                                # 🔐 Послідовне створення клієнта
        logger.debug(
            "⚙️ HttpPromotionRepository config: url=%s timeout=%s retries=%s delay=%s",
            self._base_url,
            self._timeout,
            self._retries,
            self._retry_delay,
        )

    @classmethod
    def from_config(cls, config: "ConfigService") -> "HttpPromotionRepository":
        """Будує адаптер із ключів `promotions.*`."""
        api_url = config.get("promotions.api_url")
        if not api_url or not isinstance(api_url, str):
            raise ValueError("Config 'promotions.api_url' is required and must be str.")
        return cls(
            api_url,
            timeout_sec=cast(float, config.get("promotions.timeout_sec", 5) or 5),
            retry_attempts=cast(int, config.get("promotions.retry_attempts", 2) or 2),
            retry_delay_sec=cast(float, config.get("promotions.retry_delay_sec", 1) or 0),
            api_token=config.get("promotions.api_token"),
        )

    # ================================
    # 🔓 ПУБЛІЧНИЙ ІНТЕРФЕЙС
    # ================================
    async def list_active(self) -> Sequence[Promotion]:
        payload = await self._request_json("GET", "coupons/active")
        records = payload.get("coupons", []) if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise NetworkFailureError(
                "Unexpected catalog payload",
                url=self._url("coupons/active"),
                details=f"expected a list, got {type(records).__name__}",
            )
        promotions = parse_catalog(records)
        logger.info("✅ Promotion catalog fetched: %s record(s)", len(promotions))
        return tuple(promotions)

    async def get_by_code(self, code: str) -> Optional[Promotion]:
        normalized = (code or "").strip().upper()
        if not normalized:
            return None
        path = f"coupons/{quote(normalized, safe='')}"
        payload = await self._request_json("GET", path, not_found_ok=True)
        if payload is None:
            logger.info("🔍 Promotion %s not found", normalized)
            return None
        record = payload.get("coupon", payload) if isinstance(payload, dict) else payload
        try:
            return parse_promotion(record)
        except InvalidPromotionRecordError as exc:
            logger.warning("⚠️ Malformed record for %s: %s", normalized, exc.message, extra=exc.to_log_extra())
            return None

    async def validate_first_order_eligibility(self, code: str, subtotal: Decimal) -> FirstOrderDecision:
        body = {"code": (code or "").strip().upper(), "subtotal": str(subtotal)}
        payload = await self._request_json(
            "POST",
            "coupons/validate-first-order",
            json_body=body,
            reject_statuses=_REJECT_STATUSES,
        )
        data: Dict[str, Any] = payload if isinstance(payload, dict) else {}
        reason = data.get("message") or data.get("reason")
        if data.get("valid", data.get("accepted", False)):
            logger.debug("🥇 First-order code %s accepted", body["code"])
            return FirstOrderDecision.accept()
        logger.info("🥇 First-order code %s rejected: %s", body["code"], reason)
        return FirstOrderDecision.reject(str(reason or "This coupon is valid on your first order only."))

    async def close(self) -> None:
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.info("🔌 HTTP-клієнт репозиторію промокодів закрито.")

    # ================================
    # 🔒 ВНУТРІШНЯ ЛОГІКА
    # ================================
    def _url(self, path: str) -> str:
        return self._base_url + path

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._init_lock:
            if self._client is None or self._client.is_closed:
                self._client = httpx.AsyncClient(timeout=self._timeout)
                self._owns_client = True
        return self._client

    async def _request_json(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        not_found_ok: bool = False,
        reject_statuses: frozenset = frozenset(),
    ) -> Any:
        """
        Багатоспробний запит із поверненням JSON.

        Особливості:
            • 404 при `not_found_ok` → None;
            • статуси з `reject_statuses` повертають тіло відповіді як є (бізнес-відмова);
            • мережеві збої та 5xx повторюються, решта статусів — одразу помилка.
        """
        client = await self._get_client()
        url = self._url(path)
        last_error: Optional[Exception] = None

        for attempt in range(self._retries):
            try:
                response = await client.request(method, url, json=json_body, headers=self._headers())
                if not_found_ok and response.status_code == 404:
                    return None
                if response.status_code in reject_statuses:
                    return _safe_json(response)
                response.raise_for_status()                             # ❗ Не-2xx → HTTPStatusError
                return response.json()
            except httpx.HTTPStatusError as exc:
                last_error = exc
                if exc.response.status_code < 500:
                    break                                               # 🚫 4xx не повторюємо
                logger.error("❌ Спроба %s/%s: %s %s → %s", attempt + 1, self._retries, method, url, exc.response.status_code)
            except httpx.RequestError as exc:
                last_error = exc
                logger.error("❌ Спроба %s/%s: %s %s — %s", attempt + 1, self._retries, method, url, exc)
            except ValueError as exc:                                   # 🧾 Невалідний JSON
                last_error = exc
                break
            if attempt < self._retries - 1:
                await asyncio.sleep(self._retry_delay)                  # ⏳ Фіксована пауза

        raise self._to_app_error(last_error, url)

    @staticmethod
    def _to_app_error(error: Optional[Exception], url: str) -> AppError:
        if error is None:                                               # pragma: no cover
            return NetworkFailureError("Promotion service request failed", url=url)
        converted = convert_error(error, DEFAULT_STRATEGIES)
        if isinstance(converted, NetworkFailureError) and converted.url in (None, "N/A"):
            converted.url = url
        return converted or NetworkFailureError("Promotion service request failed", url=url, details=str(error))


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"valid": False, "message": response.text or None}


__all__ = ["HttpPromotionRepository"]
