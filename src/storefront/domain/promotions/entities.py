# 🧱 storefront/domain/promotions/entities.py
"""
🧱 Доменні сутності рушія промокодів.

🔹 `LineItem` / `CheckoutSnapshot` — заморожений набір позицій однієї спроби оформлення.
🔹 `Promotion` — запис промокоду (лише читаємо), `DiscountType` / `ApplyTo` — закриті перерахування.
🔹 `AppliedPromotion`, `OrderTotals`, `EligibilityContext`, `ShippingTaxPolicy` — значення, що рахуються з них.

Усі гроші — `Decimal`, усі DTO — `frozen` + `slots`.
"""

from __future__ import annotations

# 🔠 Системні імпорти
from dataclasses import dataclass, field                        # 🧱 Immutable DTO
from decimal import Decimal                                     # 💵 Точні гроші
from enum import Enum, unique                                   # 🏷️ Закриті перерахування
from typing import FrozenSet, Optional, Tuple                   # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from .rounding import ZERO, to_decimal, optional_decimal        # ➗ Конвертація сум

# ================================
# 🧾 КОНСТАНТИ
# ================================
ALL_CATEGORIES = "All"                                          # 🌐 Категорія «без фільтра»


# ================================
# 🏷️ ПЕРЕРАХУВАННЯ
# ================================
@unique
class DiscountType(str, Enum):
    """Тип розрахунку знижки."""
    PERCENTAGE = "percentage"                                   # 📉 Відсоток від підсумку
    FIXED = "fixed"                                             # 💵 Фіксована сума (на замовлення або на одиницю)
    PRICE_OVERRIDE = "price_override"                           # 🏷️ Знижка на кожну одиницю категорії

    def __str__(self) -> str:
        return self.value


@unique
class ApplyTo(str, Enum):
    """Область застосування фіксованої знижки."""
    ORDER = "order"
    ITEM = "item"

    def __str__(self) -> str:
        return self.value


@unique
class CheckoutMode(str, Enum):
    """Звідки взято позиції: «купити зараз» або весь кошик."""
    BUY_NOW = "buy_now"
    CART = "cart"

    def __str__(self) -> str:
        return self.value


@unique
class PromotionSource(str, Enum):
    """Хто застосував промокод."""
    MANUAL = "manual"                                           # 👤 Покупець ввів код
    AUTO = "auto"                                               # 🤖 Авто-вибір за каталогом
    CARRY_OVER = "carry_over"                                   # 🔗 Код, переданий з попередньої сторінки

    def __str__(self) -> str:
        return self.value


# ================================
# 🛒 ПОЗИЦІЇ ТА ЗНІМОК
# ================================
@dataclass(frozen=True, slots=True)
class LineItem:
    """Одна позиція оформлення: товар × кількість."""

    product_id: str
    category: str
    unit_price: Decimal
    quantity: int
    title: Optional[str] = None

    def __post_init__(self) -> None:
        price = to_decimal(self.unit_price, field_name="unit_price")
        if price < ZERO:
            raise ValueError(f"unit_price must be >= 0, got {price}")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError(f"quantity must be an int, got {self.quantity!r}")
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {self.quantity}")
        object.__setattr__(self, "unit_price", price)           # 🔁 Нормалізуємо до Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "LineItem":
        """Нова позиція з іншою кількістю (сама позиція незмінна)."""
        return LineItem(
            product_id=self.product_id,
            category=self.category,
            unit_price=self.unit_price,
            quantity=quantity,
            title=self.title,
        )


@dataclass(frozen=True, slots=True)
class CheckoutSnapshot:
    """
    Заморожений впорядкований набір позицій однієї спроби оформлення.

    Порядок важливий лише для відображення; для ціноутворення — ні.
    """

    items: Tuple[LineItem, ...] = ()
    mode: CheckoutMode = CheckoutMode.CART

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), ZERO)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def categories(self) -> FrozenSet[str]:
        return frozenset(item.category for item in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def has_category(self, category: str) -> bool:
        return any(item.category == category for item in self.items)

    def items_in(self, category: Optional[str]) -> Tuple[LineItem, ...]:
        """Позиції, що проходять фільтр категорії (None/"All" → усі)."""
        if not category or category == ALL_CATEGORIES:
            return self.items
        return tuple(item for item in self.items if item.category == category)

    def quantity_in(self, category: Optional[str]) -> int:
        """Scoped quantity: сума кількостей у категорії або по всіх позиціях."""
        return sum(item.quantity for item in self.items_in(category))


# ================================
# 🎟️ ПРОМОКОД
# ================================
@dataclass(frozen=True, slots=True)
class Promotion:
    """
    Запис промокоду з репозиторію.

    `display_price` / `sale_price` / `title` / `subtitle` — лише для вітрини,
    у розрахунку знижки не беруть участі.
    """

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    is_active: bool = True
    category: Optional[str] = None
    min_quantity: Optional[int] = None
    min_price: Optional[Decimal] = None
    first_order_only: bool = False
    apply_to: Optional[ApplyTo] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    display_price: Optional[Decimal] = None
    sale_price: Optional[Decimal] = None

    def __post_init__(self) -> None:
        code = (self.code or "").strip().upper()
        if not code:
            raise ValueError("promotion code must not be empty")
        value = to_decimal(self.discount_value, field_name="discount_value")
        if value < ZERO:
            raise ValueError(f"discount_value must be >= 0, got {value}")
        if self.min_quantity is not None and self.min_quantity < 0:
            raise ValueError(f"min_quantity must be >= 0, got {self.min_quantity}")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "discount_type", DiscountType(self.discount_type))
        object.__setattr__(self, "discount_value", value)
        object.__setattr__(self, "min_price", optional_decimal(self.min_price, field_name="min_price"))
        object.__setattr__(self, "display_price", optional_decimal(self.display_price, field_name="price"))
        object.__setattr__(self, "sale_price", optional_decimal(self.sale_price, field_name="sale_price"))
        if self.apply_to is not None:
            object.__setattr__(self, "apply_to", ApplyTo(self.apply_to))

    @property
    def category_filter(self) -> Optional[str]:
        """Категорія-фільтр або None, якщо фільтра немає ("All" / порожньо)."""
        if not self.category or self.category == ALL_CATEGORIES:
            return None
        return self.category


# ================================
# 🧾 РЕЗУЛЬТАТИ
# ================================
@dataclass(frozen=True, slots=True)
class EligibilityContext:
    """Що відомо про покупця в момент перевірки."""
    is_authenticated: bool = False
    has_prior_paid_order: bool = False


@dataclass(frozen=True, slots=True)
class AppliedPromotion:
    """Активний промокод разом зі знижкою, порахованою для конкретного знімка."""
    promotion: Promotion
    computed_discount: Decimal
    source: PromotionSource = PromotionSource.MANUAL
    snapshot_revision: int = 0

    @property
    def code(self) -> str:
        return self.promotion.code


@dataclass(frozen=True, slots=True)
class ShippingTaxPolicy:
    """Правила доставки та податку (вітрина: безкоштовна доставка)."""
    shipping_flat: Decimal = ZERO
    tax_rate_percent: Decimal = ZERO

    def __post_init__(self) -> None:
        shipping = to_decimal(self.shipping_flat, field_name="shipping_flat")
        rate = to_decimal(self.tax_rate_percent, field_name="tax_rate_percent")
        if shipping < ZERO or rate < ZERO:
            raise ValueError("shipping and tax rate must be non-negative")
        object.__setattr__(self, "shipping_flat", shipping)
        object.__setattr__(self, "tax_rate_percent", rate)


@dataclass(frozen=True, slots=True)
class OrderTotals:
    """Підсумки замовлення: total = subtotal − discount + shipping + tax."""
    subtotal: Decimal
    discount: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total", self.subtotal - self.discount + self.shipping + self.tax)


__all__ = [
    "ALL_CATEGORIES",
    "DiscountType",
    "ApplyTo",
    "CheckoutMode",
    "PromotionSource",
    "LineItem",
    "CheckoutSnapshot",
    "Promotion",
    "EligibilityContext",
    "AppliedPromotion",
    "ShippingTaxPolicy",
    "OrderTotals",
]
