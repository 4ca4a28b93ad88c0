# 🧩 storefront/config/setup/__init__.py
"""🧩 Складання залежностей рушія промокодів."""

from .container import Container, bootstrap_logging

__all__ = ["Container", "bootstrap_logging"]
