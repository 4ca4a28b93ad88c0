# 📸 storefront/domain/promotions/snapshot.py
"""
📸 Побудова `CheckoutSnapshot` — заморожування позицій для розрахунку.

🔹 Джерело — або один товар «купити зараз», або весь кошик.
🔹 Знімок ніколи не мутується: зміна кількості/складу → новий знімок.
🔹 Порожнє джерело дає порожній знімок з нульовим підсумком (це не помилка).
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування побудови
from dataclasses import dataclass                               # 🧱 DTO джерел
from typing import Any, Iterable, Mapping, Tuple, Union         # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from .entities import CheckoutMode, CheckoutSnapshot, LineItem  # 🧱 Доменні сутності

logger = logging.getLogger(f"{LOG_NAME}.domain.promotions.snapshot")


# ================================
# 📥 ДЖЕРЕЛА ПОЗИЦІЙ
# ================================
@dataclass(frozen=True, slots=True)
class BuyNowSource:
    """Один обраний товар з кількістю."""
    item: LineItem


@dataclass(frozen=True, slots=True)
class CartSource:
    """Увесь вміст персистентного кошика."""
    items: Tuple[LineItem, ...] = ()

    @classmethod
    def of(cls, items: Iterable[LineItem]) -> "CartSource":
        return cls(items=tuple(items))


CheckoutSource = Union[BuyNowSource, CartSource]


# ================================
# 🛠️ ПОБУДОВА
# ================================
def build_snapshot(source: CheckoutSource) -> CheckoutSnapshot:
    """
    Заморожує позиції джерела у `CheckoutSnapshot`.

    Args:
        source: `BuyNowSource` або `CartSource`.

    Returns:
        CheckoutSnapshot: незмінний знімок (порожній для порожнього кошика).
    """
    if isinstance(source, BuyNowSource):
        snapshot = CheckoutSnapshot(items=(source.item,), mode=CheckoutMode.BUY_NOW)
    elif isinstance(source, CartSource):
        snapshot = CheckoutSnapshot(items=tuple(source.items), mode=CheckoutMode.CART)
    else:
        raise TypeError(f"Unsupported checkout source: {type(source).__name__}")

    logger.debug(
        "📸 Snapshot built | mode=%s lines=%s qty=%s subtotal=%s",
        snapshot.mode,
        len(snapshot.items),
        snapshot.total_quantity,
        snapshot.subtotal,
    )
    return snapshot


def line_item_from_mapping(row: Mapping[str, Any]) -> LineItem:
    """
    Будує `LineItem` із JSON-рядка кошика.

    Розуміє ключі вітрини (`productId`/`id`, `category`, `price`, `quantity`, `name`)
    та snake_case-варіанти.
    """
    product_id = row.get("productId", row.get("product_id", row.get("id")))
    unit_price = row.get("price", row.get("unit_price", row.get("unitPrice")))
    if product_id is None or unit_price is None:
        raise ValueError(f"Cart row is missing product id or price: {dict(row)!r}")
    return LineItem(
        product_id=str(product_id),
        category=str(row.get("category") or ""),
        unit_price=unit_price,
        quantity=int(row.get("quantity", 1)),
        title=row.get("name") or row.get("title"),
    )


def cart_source_from_rows(rows: Iterable[Mapping[str, Any]]) -> CartSource:
    """Перетворює сирі рядки кошика у `CartSource`."""
    return CartSource.of(line_item_from_mapping(row) for row in rows)


__all__ = [
    "BuyNowSource",
    "CartSource",
    "CheckoutSource",
    "build_snapshot",
    "line_item_from_mapping",
    "cart_source_from_rows",
]
