# 🛍️ storefront/__init__.py
"""
🛍️ storefront — рушій промокодів і ціноутворення для оформлення замовлення.

🔹 `domain.promotions`        — знімок, застосовність, знижки, авто-вибір, підсумки.
🔹 `infrastructure.promotions` — HTTP / JSON-файл репозиторії промокодів.
🔹 `infrastructure.checkout`   — сесія оформлення та каталог.
🔹 `config`                    — ConfigService і DI-контейнер.
"""

__version__ = "0.1.0"
