# 📈 storefront/infrastructure/checkout/metrics.py
"""
📈 Prometheus-метрики рушія промокодів.

🔹 `PROMO_CATALOG_FETCHES` / `PROMO_CATALOG_FAILURES` — завантаження каталогу.
🔹 `PROMO_AUTO_APPLIED` — авто-вибір застосував код (за джерелом: auto / carry_over).
🔹 `PROMO_MANUAL_APPLIED` / `PROMO_MANUAL_REJECTED` — ручні коди (відмови за причиною).
🔹 `PROMO_STALE_DISCARDED` — асинхронні результати, відкинуті через зміну знімка.
"""

from __future__ import annotations

# 🌐 Зовнішні бібліотеки
from prometheus_client import Counter, Histogram                      # 📊 Prometheus-метрики

# ================================
# 📦 КАТАЛОГ
# ================================
PROMO_CATALOG_FETCHES = Counter(
    "promotions_catalog_fetches_total",                              # 🏷️ Імʼя метрики
    "Promotion catalog fetch attempts",                              # 📝 Опис у Prometheus
)

PROMO_CATALOG_FAILURES = Counter(
    "promotions_catalog_failures_total",
    "Promotion catalog fetches that failed",
)

PROMO_CATALOG_LATENCY = Histogram(
    "promotions_catalog_fetch_seconds",
    "Time to fetch the promotion catalog",
)

# ================================
# 🎟️ ЗАСТОСУВАННЯ
# ================================
PROMO_AUTO_APPLIED = Counter(
    "promotions_auto_applied_total",
    "Promotions applied without user action",
    ["source"],                                                      # 🏷️ auto / carry_over
)

PROMO_MANUAL_APPLIED = Counter(
    "promotions_manual_applied_total",
    "Promotion codes applied by the customer",
)

PROMO_MANUAL_REJECTED = Counter(
    "promotions_manual_rejected_total",
    "Promotion codes rejected on manual entry",
    ["reason"],                                                      # 🏷️ ErrorCode
)

PROMO_STALE_DISCARDED = Counter(
    "promotions_stale_results_discarded_total",
    "Async promotion results dropped because the snapshot changed",
    ["operation"],                                                   # 🏷️ auto / manual / first_order
)


__all__ = [
    "PROMO_CATALOG_FETCHES",
    "PROMO_CATALOG_FAILURES",
    "PROMO_CATALOG_LATENCY",
    "PROMO_AUTO_APPLIED",
    "PROMO_MANUAL_APPLIED",
    "PROMO_MANUAL_REJECTED",
    "PROMO_STALE_DISCARDED",
]
