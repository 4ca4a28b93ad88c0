# 🏗️ storefront/infrastructure/__init__.py
"""🏗️ Адаптери репозиторіїв і оркестрація сесії оформлення."""
