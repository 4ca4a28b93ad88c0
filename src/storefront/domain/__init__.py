# 🏭 storefront/domain/__init__.py
"""🏭 Чиста доменна логіка без I/O."""
