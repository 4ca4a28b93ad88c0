"""
🧪 test_checkout_session.py — оркестрація промокодів у сесії оформлення

Перевіряє:
- Авто-вибір (перенесений код, first-match за каталогом, збій каталогу)
- Ручне застосування, зняття коду і ручний замок
- Перерахунок при зміні знімка та скидання при зміні режиму
- Свіжість асинхронних результатів (ревізія знімка, токен вибору)
- Відкладену first-order перевірку
"""

import asyncio
from decimal import Decimal

import pytest

from storefront.domain.promotions.entities import (
    DiscountType,
    LineItem,
    Promotion,
    PromotionSource,
    ShippingTaxPolicy,
)
from storefront.domain.promotions.interfaces import (
    FirstOrderDecision,
    IAuthContext,
    IOrderHistoryProvider,
    IPromotionRepository,
)
from storefront.domain.promotions.selection import AutoSelectionState
from storefront.domain.promotions.snapshot import BuyNowSource, CartSource
from storefront.errors.custom_errors import (
    CategoryMismatchError,
    FirstOrderOnlyViolationError,
    InvalidCodeError,
    MinimumQuantityNotMetError,
    NetworkFailureError,
    StaleResultError,
)
from storefront.infrastructure.checkout.checkout_session import CheckoutSession, FirstOrderValidation
from storefront.infrastructure.checkout.promotion_catalog import CatalogStatus
from storefront.infrastructure.promotions.file_repository import JsonFilePromotionRepository

S = AutoSelectionState

HOODIE2 = Promotion(
    code="HOODIE2",
    discount_type=DiscountType.PRICE_OVERRIDE,
    discount_value=100,
    category="Hoodie",
    min_quantity=2,
)
TEE50 = Promotion(code="TEE50", discount_type=DiscountType.FIXED, discount_value=50, category="T-Shirt")
SAVE10 = Promotion(code="SAVE10", discount_type=DiscountType.PERCENTAGE, discount_value=10)
WELCOME = Promotion(code="WELCOME", discount_type=DiscountType.PERCENTAGE, discount_value=20, first_order_only=True)
HIDDEN = Promotion(code="VIP", discount_type=DiscountType.FIXED, discount_value=200)   # не в каталозі


# ================================
# 🧪 ФЕЙКИ
# ================================
class FakeAuth(IAuthContext):
    def __init__(self, user_id=None):
        self._user_id = user_id

    @property
    def is_authenticated(self):
        return self._user_id is not None

    @property
    def user_id(self):
        return self._user_id


class FakeHistory(IOrderHistoryProvider):
    def __init__(self, has_paid=False):
        self.has_paid = has_paid

    async def has_prior_paid_order(self, user_id):
        return self.has_paid


class InMemoryRepository(IPromotionRepository):
    def __init__(self, catalog=(HOODIE2, TEE50, SAVE10), extra=(HIDDEN, WELCOME), decision=None):
        self.catalog = tuple(catalog)
        self.all = {p.code: p for p in (*catalog, *extra)}
        self.decision = decision or FirstOrderDecision.accept()
        self.catalog_gate = None
        self.lookup_gate = None
        self.validate_gate = None
        self.catalog_error = None
        self.list_calls = 0

    async def list_active(self):
        self.list_calls += 1
        if self.catalog_gate is not None:
            await self.catalog_gate.wait()
        if self.catalog_error is not None:
            raise self.catalog_error
        return self.catalog

    async def get_by_code(self, code):
        if self.lookup_gate is not None:
            await self.lookup_gate.wait()
        return self.all.get(code)

    async def validate_first_order_eligibility(self, code, subtotal):
        if self.validate_gate is not None:
            await self.validate_gate.wait()
        return self.decision


def line(category, price, quantity, product_id=None):
    return LineItem(product_id=product_id or category.lower(), category=category, unit_price=price, quantity=quantity)


def cart(*lines):
    return CartSource.of(lines)


def make_session(repo=None, *, user_id=None, has_paid=False, **kwargs):
    return CheckoutSession(repo or InMemoryRepository(), FakeAuth(user_id), FakeHistory(has_paid), **kwargs)


# ================================
# 🤖 АВТО-ВИБІР
# ================================
@pytest.mark.asyncio
async def test_auto_selection_applies_first_eligible():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))

    applied = await session.run_auto_selection()

    assert applied is not None
    assert applied.code == "TEE50"
    assert applied.source is PromotionSource.AUTO
    assert session.auto_state is S.APPLIED
    assert session.totals.total == Decimal("950.00")


@pytest.mark.asyncio
async def test_auto_selection_runs_once_per_snapshot():
    repo = InMemoryRepository(catalog=(HOODIE2,))
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 1)))

    assert await session.run_auto_selection() is None
    assert session.auto_state is S.UNAPPLIED

    assert await session.run_auto_selection() is None
    assert session.auto_state is S.UNAPPLIED
    assert repo.list_calls == 1


@pytest.mark.asyncio
async def test_carry_over_code_is_applied_and_consumed():
    session = make_session(pending_code="vip")
    session.set_source(cart(line("T-Shirt", "500", 2)))

    applied = await session.run_auto_selection()

    assert applied.code == "VIP"
    assert applied.source is PromotionSource.CARRY_OVER
    assert session.pending_code is None
    assert session.totals.discount == Decimal("200.00")


@pytest.mark.asyncio
async def test_ineligible_carry_over_falls_back_to_catalog():
    session = make_session(pending_code="HOODIE2")
    session.set_source(cart(line("T-Shirt", "500", 2)))

    applied = await session.run_auto_selection()

    assert applied.code == "TEE50"
    assert applied.source is PromotionSource.AUTO
    assert session.pending_code is None


@pytest.mark.asyncio
async def test_catalog_failure_leaves_no_discount():
    repo = InMemoryRepository()
    repo.catalog_error = NetworkFailureError("catalog down")
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 2)))

    assert await session.run_auto_selection() is None
    assert session.auto_state is S.UNAPPLIED
    assert session.totals.total == Decimal("1000.00")


@pytest.mark.asyncio
async def test_empty_snapshot_settles_unapplied():
    session = make_session()

    assert await session.run_auto_selection() is None
    assert session.auto_state is S.UNAPPLIED


@pytest.mark.asyncio
async def test_unexpected_catalog_failure_settles_unapplied():
    repo = InMemoryRepository()
    repo.catalog_error = RuntimeError("driver exploded")
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 2)))

    assert await session.run_auto_selection() is None
    assert session.auto_state is S.UNAPPLIED
    assert session.catalog.status is CatalogStatus.FAILED

    repo.catalog_error = None
    session.set_source(cart(line("T-Shirt", "500", 3)))

    assert (await session.run_auto_selection()).code == "TEE50"


@pytest.mark.asyncio
async def test_unreadable_catalog_file_does_not_break_checkout(tmp_path):
    path = tmp_path / "coupons.json"
    path.write_bytes(b"\xff\xfe")
    session = make_session(JsonFilePromotionRepository(path))
    session.set_source(cart(line("T-Shirt", "500", 2)))

    assert await session.run_auto_selection() is None
    assert session.auto_state.is_terminal
    assert session.catalog.status is CatalogStatus.FAILED
    assert await session.run_auto_selection() is None
    assert session.totals.total == Decimal("1000.00")


@pytest.mark.asyncio
async def test_carry_over_code_survives_snapshot_change_during_lookup():
    repo = InMemoryRepository()
    repo.lookup_gate = asyncio.Event()
    session = make_session(repo, pending_code="vip")
    session.set_source(cart(line("T-Shirt", "500", 2)))

    auto = asyncio.ensure_future(session.run_auto_selection())
    while session.auto_state is not S.CARRY_OVER_APPLY:
        await asyncio.sleep(0)
    session.set_source(cart(line("T-Shirt", "500", 3)))
    repo.lookup_gate.set()

    assert await auto is None
    assert session.pending_code == "VIP"

    applied = await session.run_auto_selection()

    assert applied.code == "VIP"
    assert applied.source is PromotionSource.CARRY_OVER
    assert session.pending_code is None


@pytest.mark.asyncio
async def test_manual_code_replaces_carry_over_code():
    session = make_session(pending_code="vip")
    session.set_source(cart(line("T-Shirt", "500", 2)))

    await session.apply_promotion_manually("SAVE10")
    session.set_source(BuyNowSource(line("T-Shirt", "500", 1)))

    assert session.pending_code is None
    assert (await session.run_auto_selection()).code == "TEE50"


# ================================
# 📸 ЗМІНА ЗНІМКА
# ================================
@pytest.mark.asyncio
async def test_quantity_change_recomputes_without_reselection():
    repo = InMemoryRepository()
    session = make_session(repo)
    session.set_source(cart(line("Hoodie", "1500", 2), line("T-Shirt", "400", 1)))
    applied = await session.run_auto_selection()
    assert applied.code == "HOODIE2"
    assert session.totals.discount == Decimal("200.00")

    session.set_source(cart(line("Hoodie", "1500", 4), line("T-Shirt", "400", 1)))

    assert session.applied_promotion.code == "HOODIE2"
    assert session.applied_promotion.source is PromotionSource.AUTO
    assert session.applied_promotion.snapshot_revision == session.snapshot_revision
    assert session.totals.discount == Decimal("400.00")
    assert session.totals.total == Decimal("6000.00")
    assert session.auto_state is S.APPLIED
    assert repo.list_calls == 1


@pytest.mark.asyncio
async def test_auto_promotion_dropped_when_ineligible_and_reselected():
    session = make_session()
    session.set_source(cart(line("Hoodie", "1500", 2)))
    await session.run_auto_selection()
    assert session.applied_promotion.code == "HOODIE2"

    session.set_source(cart(line("Hoodie", "1500", 1)))
    assert session.applied_promotion is None
    assert session.auto_state is S.IDLE

    applied = await session.run_auto_selection()
    assert applied.code == "SAVE10"


@pytest.mark.asyncio
async def test_mode_switch_discards_everything():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.apply_promotion_manually("SAVE10")
    assert session.is_manual_locked

    session.set_source(BuyNowSource(line("T-Shirt", "500", 1)))

    assert session.applied_promotion is None
    assert not session.is_manual_locked
    assert session.auto_state is S.IDLE


@pytest.mark.asyncio
async def test_clear_cart_resets_totals():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.run_auto_selection()

    session.clear_cart()

    assert session.applied_promotion is None
    assert session.totals.total == Decimal("0.00")
    assert session.auto_state is S.IDLE


def test_revision_increases_with_every_snapshot():
    session = make_session()
    revisions = [session.snapshot_revision]
    for qty in (1, 2, 3):
        session.set_source(cart(line("T-Shirt", "500", qty)))
        revisions.append(session.snapshot_revision)

    assert revisions == sorted(set(revisions))


# ================================
# 👤 РУЧНЕ КЕРУВАННЯ
# ================================
@pytest.mark.asyncio
async def test_manual_code_applies_and_locks_auto():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))

    applied = await session.apply_promotion_manually(" save10 ")

    assert applied.code == "SAVE10"
    assert applied.source is PromotionSource.MANUAL
    assert session.totals.total == Decimal("900.00")

    assert (await session.run_auto_selection()).code == "SAVE10"


@pytest.mark.asyncio
async def test_applied_message_follows_current_promotion():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))
    assert session.applied_message is None

    await session.apply_promotion_manually("SAVE10")

    assert session.applied_message == "✅ Coupon \"SAVE10\" applied: you save ₹100.00."

    session.remove_promotion()
    assert session.applied_message is None


@pytest.mark.asyncio
async def test_unknown_manual_code_raises_invalid_code():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))

    with pytest.raises(InvalidCodeError):
        await session.apply_promotion_manually("NOPE")
    with pytest.raises(InvalidCodeError):
        await session.apply_promotion_manually("   ")


@pytest.mark.asyncio
async def test_rejected_manual_code_keeps_current_promotion():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.apply_promotion_manually("SAVE10")

    with pytest.raises(CategoryMismatchError):
        await session.apply_promotion_manually("HOODIE2")

    assert session.applied_promotion.code == "SAVE10"


@pytest.mark.asyncio
async def test_manual_rejection_carries_thresholds():
    session = make_session()
    session.set_source(cart(line("Hoodie", "1500", 1)))

    with pytest.raises(MinimumQuantityNotMetError) as exc_info:
        await session.apply_promotion_manually("HOODIE2")

    assert exc_info.value.required == 2
    assert exc_info.value.actual == 1


@pytest.mark.asyncio
async def test_manual_removal_keeps_auto_disabled():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.run_auto_selection()

    session.remove_promotion()

    assert session.applied_promotion is None
    assert await session.run_auto_selection() is None
    assert session.auto_state is S.UNAPPLIED


@pytest.mark.asyncio
async def test_manual_promotion_dropped_on_snapshot_change_keeps_lock():
    session = make_session()
    session.set_source(cart(line("Hoodie", "1500", 2)))
    await session.apply_promotion_manually("HOODIE2")

    session.set_source(cart(line("Hoodie", "1500", 1)))

    assert session.applied_promotion is None
    assert session.is_manual_locked
    assert await session.run_auto_selection() is None


@pytest.mark.asyncio
async def test_manual_application_during_pending_auto_wins():
    repo = InMemoryRepository()
    repo.catalog_gate = asyncio.Event()
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 2)))

    auto = asyncio.ensure_future(session.run_auto_selection())
    await asyncio.sleep(0)
    assert session.auto_state is S.CATALOG_LOADING

    manual = await session.apply_promotion_manually("VIP")
    repo.catalog_gate.set()
    result = await auto

    assert manual.code == "VIP"
    assert result.code == "VIP"
    assert session.applied_promotion.source is PromotionSource.MANUAL
    assert session.auto_state is S.APPLIED


@pytest.mark.asyncio
async def test_manual_result_discarded_when_snapshot_changes():
    repo = InMemoryRepository()
    repo.lookup_gate = asyncio.Event()
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 2)))

    pending = asyncio.ensure_future(session.apply_promotion_manually("SAVE10"))
    await asyncio.sleep(0)
    session.set_source(cart(line("T-Shirt", "500", 3)))
    repo.lookup_gate.set()

    with pytest.raises(StaleResultError):
        await pending
    assert session.applied_promotion is None


@pytest.mark.asyncio
async def test_stale_auto_selection_is_abandoned_on_snapshot_change():
    repo = InMemoryRepository()
    repo.catalog_gate = asyncio.Event()
    session = make_session(repo)
    session.set_source(cart(line("Hoodie", "1500", 2)))

    auto = asyncio.ensure_future(session.run_auto_selection())
    await asyncio.sleep(0)
    session.set_source(cart(line("T-Shirt", "500", 2)))
    repo.catalog_gate.set()

    assert await auto is None
    assert session.applied_promotion is None
    assert session.auto_state is S.IDLE

    assert (await session.run_auto_selection()).code == "TEE50"


# ================================
# 🥇 FIRST-ORDER
# ================================
@pytest.mark.asyncio
async def test_first_order_code_rejected_for_returning_customer():
    session = make_session(user_id="u1", has_paid=True)
    session.set_source(cart(line("T-Shirt", "500", 2)))

    with pytest.raises(FirstOrderOnlyViolationError):
        await session.apply_promotion_manually("WELCOME")


@pytest.mark.asyncio
async def test_first_order_code_is_validated_at_placement():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.apply_promotion_manually("WELCOME")

    assert await session.validate_for_order_placement() is FirstOrderValidation.ACCEPTED
    assert session.applied_promotion.code == "WELCOME"


@pytest.mark.asyncio
async def test_placement_rejection_removes_code():
    repo = InMemoryRepository(decision=FirstOrderDecision.reject("Already ordered"))
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.apply_promotion_manually("WELCOME")

    assert await session.validate_for_order_placement() is FirstOrderValidation.REJECTED
    assert session.applied_promotion is None
    assert session.last_rejection.reason == "Already ordered"
    assert session.totals.discount == Decimal("0.00")


@pytest.mark.asyncio
async def test_placement_validation_not_required_for_regular_codes():
    session = make_session()
    session.set_source(cart(line("T-Shirt", "500", 2)))

    assert await session.validate_for_order_placement() is FirstOrderValidation.NOT_REQUIRED
    await session.apply_promotion_manually("SAVE10")
    assert await session.validate_for_order_placement() is FirstOrderValidation.NOT_REQUIRED


@pytest.mark.asyncio
async def test_stale_placement_validation_is_discarded():
    repo = InMemoryRepository(decision=FirstOrderDecision.reject("Already ordered"))
    repo.validate_gate = asyncio.Event()
    session = make_session(repo)
    session.set_source(cart(line("T-Shirt", "500", 2)))
    await session.apply_promotion_manually("WELCOME")

    pending = asyncio.ensure_future(session.validate_for_order_placement())
    await asyncio.sleep(0)
    session.set_source(cart(line("T-Shirt", "500", 3)))
    repo.validate_gate.set()

    assert await pending is FirstOrderValidation.STALE
    assert session.applied_promotion.code == "WELCOME"


def test_policy_flows_into_totals():
    policy = ShippingTaxPolicy(shipping_flat=Decimal("49"), tax_rate_percent=Decimal("5"))
    session = make_session(policy=policy)
    session.set_source(cart(line("T-Shirt", "500", 2)))

    totals = session.totals

    assert totals.shipping == Decimal("49.00")
    assert totals.tax == Decimal("50.00")
    assert totals.total == Decimal("1099.00")
