# 🧰 storefront/shared/__init__.py
"""🧰 Спільні утиліти (логування)."""
