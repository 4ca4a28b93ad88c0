# 🛒 storefront/infrastructure/checkout/checkout_session.py
"""
🛒 CheckoutSession — оркестрація промокодів для однієї сторінки оформлення.

🎯 Призначення:
    • тримає поточний знімок, його ревізію та застосований промокод;
    • запускає авто-вибір (перенесений код → перший застосовний у каталозі);
    • застосовує/знімає код вручну, перераховує підсумки;
    • робить відкладену first-order перевірку перед оформленням замовлення.

⚙️ Нотатки:
    • результат будь-якого await застосовується, лише якщо ревізія знімка не змінилася;
    • ручне застосування ставить ручний замок і піднімає токен вибору ДО першого await,
      тож авто-вибір, що чекає, відступає;
    • зміна режиму (купити зараз ↔ кошик) або порожній кошик скидає все до IDLE.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                      # 🧾 Логи сесії
from enum import Enum, unique                                       # 🏷️ Результати перевірки
from typing import Optional                                         # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.domain.promotions.calculator import compute_discount
from storefront.domain.promotions.eligibility import check_eligibility, evaluate_eligibility
from storefront.domain.promotions.entities import (
    AppliedPromotion,
    CheckoutSnapshot,
    EligibilityContext,
    OrderTotals,
    Promotion,
    PromotionSource,
    ShippingTaxPolicy,
)
from storefront.domain.promotions.interfaces import IAuthContext, IOrderHistoryProvider, IPromotionRepository
from storefront.domain.promotions.selection import AutoSelectionMachine, AutoSelectionState, select_auto_promotion
from storefront.domain.promotions.snapshot import CartSource, CheckoutSource, build_snapshot
from storefront.domain.promotions.totals import DEFAULT_POLICY, compute_totals
from storefront.errors.custom_errors import (
    AppError,
    FirstOrderOnlyViolationError,
    InvalidCodeError,
    PromotionError,
    StaleResultError,
)
from storefront.errors.reason_mapper import build_applied_message
from storefront.shared.utils.logger import LOG_NAME                 # 🏷️ Базове імʼя логера
from .metrics import PROMO_AUTO_APPLIED, PROMO_MANUAL_APPLIED, PROMO_MANUAL_REJECTED, PROMO_STALE_DISCARDED
from .promotion_catalog import PromotionCatalog

logger = logging.getLogger(f"{LOG_NAME}.infrastructure.checkout.session")

_S = AutoSelectionState


@unique
class FirstOrderValidation(str, Enum):
    """Результат відкладеної first-order перевірки."""
    NOT_REQUIRED = "not_required"                                   # 🟢 Код не first-order-only або коду немає
    ACCEPTED = "accepted"                                           # ✅ Сервер підтвердив
    REJECTED = "rejected"                                           # 🚫 Сервер відмовив, код знято
    STALE = "stale"                                                 # ⌛ Знімок змінився під час перевірки

    def __str__(self) -> str:
        return self.value


class CheckoutSession:
    """
    🧭 Стан промокоду для однієї спроби оформлення.

    Args:
        repository: джерело промокодів.
        auth: стан авторизації покупця.
        history: історія оплачених замовлень (None → вважаємо, що замовлень не було).
        policy: доставка/податок.
        pending_code: код, перенесений з попередньої сторінки; використовується один раз.
        catalog: спільний `PromotionCatalog` (за замовчуванням створюється свій).
    """

    def __init__(
        self,
        repository: IPromotionRepository,
        auth: IAuthContext,
        history: Optional[IOrderHistoryProvider] = None,
        policy: ShippingTaxPolicy = DEFAULT_POLICY,
        *,
        pending_code: Optional[str] = None,
        catalog: Optional[PromotionCatalog] = None,
    ) -> None:
        self._repository = repository
        self._auth = auth
        self._history = history
        self._policy = policy
        self._catalog = catalog or PromotionCatalog(repository)
        self._pending_code = (pending_code or "").strip().upper() or None

        self._snapshot = CheckoutSnapshot()                         # 📸 Порожній кошик до першого set_source
        self._revision = 0                                          # 🔢 Ідентичність знімка
        self._applied: Optional[AppliedPromotion] = None
        self._manual_lock = False                                   # 🔒 Покупець сам керує кодом
        self._selection_token = 0                                   # 🎫 Інвалідовує авто-вибір у польоті
        self._machine = AutoSelectionMachine(revision=0)
        self._context = EligibilityContext(is_authenticated=bool(auth.is_authenticated))
        self._last_rejection: Optional[PromotionError] = None

    # ================================
    # 🔎 СТАН
    # ================================
    @property
    def snapshot(self) -> CheckoutSnapshot:
        return self._snapshot

    @property
    def snapshot_revision(self) -> int:
        return self._revision

    @property
    def applied_promotion(self) -> Optional[AppliedPromotion]:
        return self._applied

    @property
    def auto_state(self) -> AutoSelectionState:
        return self._machine.state

    @property
    def is_manual_locked(self) -> bool:
        return self._manual_lock

    @property
    def pending_code(self) -> Optional[str]:
        return self._pending_code

    @property
    def last_rejection(self) -> Optional[PromotionError]:
        """Остання відмова відкладеної first-order перевірки (для показу покупцю)."""
        return self._last_rejection

    @property
    def catalog(self) -> PromotionCatalog:
        return self._catalog

    @property
    def totals(self) -> OrderTotals:
        return compute_totals(self._snapshot, self._applied, self._policy)

    @property
    def applied_message(self) -> Optional[str]:
        """Текст підтвердження для застосованого коду (None, якщо коду немає)."""
        if self._applied is None:
            return None
        return build_applied_message(self._applied.code, self._applied.computed_discount)

    # ================================
    # 📸 ЗНІМОК
    # ================================
    def set_source(self, source: CheckoutSource) -> CheckoutSnapshot:
        """
        Перебудовує знімок з нового джерела.

        Той самий режим: застосований код перераховується або знімається, якщо більше не підходить.
        Інший режим або порожній кошик: усе скидається до IDLE, ручний замок знімається.
        """
        previous = self._snapshot
        snapshot = build_snapshot(source)
        self._snapshot = snapshot
        self._revision += 1
        self._last_rejection = None

        if snapshot.mode is not previous.mode or snapshot.is_empty:
            self._discard_selection()
        else:
            self._rederive_selection()
        return snapshot

    def clear_cart(self) -> CheckoutSnapshot:
        """Очищення кошика = перехід на порожнє джерело."""
        return self.set_source(CartSource())

    def _discard_selection(self) -> None:
        if self._applied is not None:
            logger.info("🧹 Promotion %s discarded (mode switch / empty cart)", self._applied.code)
        self._applied = None
        self._manual_lock = False
        self._selection_token += 1
        self._machine.reset(self._revision)

    def _rederive_selection(self) -> None:
        applied = self._applied
        if applied is None:
            if not self._manual_lock:
                self._selection_token += 1
                self._machine.reset(self._revision)                 # 🔁 Новий знімок → авто-вибір знову можливий
            return

        promotion = applied.promotion
        if evaluate_eligibility(promotion, self._snapshot, self._context):
            self._applied = AppliedPromotion(
                promotion=promotion,
                computed_discount=compute_discount(promotion, self._snapshot),
                source=applied.source,
                snapshot_revision=self._revision,
            )
            if self._machine.state.is_running:
                self._selection_token += 1
            self._machine.settle(self._revision, _S.APPLIED)
            logger.debug("♻️ %s recomputed for rev=%s → %s", promotion.code, self._revision, self._applied.computed_discount)
            return

        logger.info("🚫 %s no longer eligible for rev=%s, removed", promotion.code, self._revision)
        self._applied = None
        self._selection_token += 1
        if applied.source is PromotionSource.MANUAL:
            self._machine.settle(self._revision, _S.UNAPPLIED)      # 🔒 Ручний замок лишається
        else:
            self._machine.reset(self._revision)

    # ================================
    # 🤖 АВТО-ВИБІР
    # ================================
    async def run_auto_selection(self) -> Optional[AppliedPromotion]:
        """
        Проганяє машину авто-вибору для поточного знімка. Не піднімає винятків: збій завершується в UNAPPLIED.

        Returns:
            Optional[AppliedPromotion]: що застосовано після прогону (або вже було застосовано).
        """
        if self._manual_lock:
            logger.debug("🔒 Auto-selection skipped: manual lock")
            return self._applied
        if self._machine.state is not _S.IDLE:
            logger.debug("⏭️ Auto-selection skipped: state=%s", self._machine.state)
            return self._applied

        revision = self._revision
        token = self._selection_token
        if self._snapshot.is_empty:
            self._machine.settle(revision, _S.UNAPPLIED)
            return None

        self._machine.advance(_S.CATALOG_LOADING)
        try:
            return await self._drive_auto_selection(revision, token)
        except Exception:
            logger.exception("🔥 Auto-selection failed for rev=%s", revision)
            if self._is_stale(token, revision, "auto"):
                return self._applied
            self._applied = None
            self._machine.settle(revision, _S.UNAPPLIED)
            return None

    async def _drive_auto_selection(self, revision: int, token: int) -> Optional[AppliedPromotion]:
        catalog = await self._catalog.ensure_loaded()
        if self._is_stale(token, revision, "auto"):
            return self._applied

        context = await self._resolve_context()
        if self._is_stale(token, revision, "auto"):
            return self._applied

        if self._pending_code:
            self._machine.advance(_S.CARRY_OVER_APPLY)
            code = self._pending_code
            promotion = await self._resolve_carry_over(code, context)
            if self._is_stale(token, revision, "auto"):
                return self._applied                                # 🔗 Код лишається для свіжого знімка
            self._pending_code = None                               # 🔗 Використовується один раз
            if promotion is not None:
                return self._commit_auto(promotion, PromotionSource.CARRY_OVER, revision)
            self._machine.advance(_S.QUANTITY_MATCH_APPLY)
        elif catalog:
            self._machine.advance(_S.QUANTITY_MATCH_APPLY)
        else:
            self._settle_none_applicable()
            return None

        promotion = select_auto_promotion(self._snapshot, catalog, context)
        if promotion is None:
            self._settle_none_applicable()
            return None
        return self._commit_auto(promotion, PromotionSource.AUTO, revision)

    async def _resolve_carry_over(self, code: str, context: EligibilityContext) -> Optional[Promotion]:
        promotion = self._catalog.find_loaded(code)
        if promotion is None:
            try:
                promotion = await self._catalog.get_by_code(code)
            except PromotionError as exc:
                logger.info("🔗 Carry-over %s lookup failed: %s", code, exc.message, extra=exc.to_log_extra())
                return None
        if promotion is None:
            logger.info("🔗 Carry-over code %s not found", code)
            return None
        try:
            check_eligibility(promotion, self._snapshot, context)
        except PromotionError as exc:
            logger.info("🔗 Carry-over %s not eligible: %s", code, exc.code)
            return None
        return promotion

    def _commit_auto(self, promotion: Promotion, source: PromotionSource, revision: int) -> AppliedPromotion:
        self._applied = AppliedPromotion(
            promotion=promotion,
            computed_discount=compute_discount(promotion, self._snapshot),
            source=source,
            snapshot_revision=revision,
        )
        self._machine.advance(_S.APPLIED)
        PROMO_AUTO_APPLIED.labels(source=source.value).inc()
        logger.info("🎯 %s auto-applied (%s) → discount %s", promotion.code, source, self._applied.computed_discount)
        return self._applied

    def _settle_none_applicable(self) -> None:
        self._machine.advance(_S.NONE_APPLICABLE)
        self._machine.advance(_S.UNAPPLIED)
        logger.debug("🕳️ No promotion applicable for rev=%s", self._revision)

    # ================================
    # 👤 РУЧНЕ КЕРУВАННЯ
    # ================================
    async def apply_promotion_manually(self, code: str) -> AppliedPromotion:
        """
        Застосовує код, введений покупцем.

        Raises:
            InvalidCodeError, InactivePromotionError, CategoryMismatchError, MinimumQuantityNotMetError,
            MinimumPriceNotMetError, FirstOrderOnlyViolationError, NetworkFailureError: відмова;
                поточний застосований код лишається без змін.
            StaleResultError: знімок змінився або новіший запит випередив цей.
        """
        normalized = (code or "").strip().upper()
        self._manual_lock = True                                    # 🔒 Авто-вибір більше не втручається
        self._pending_code = None                                   # 🔗 Ручний вибір має пріоритет над переносом
        self._selection_token += 1
        token = self._selection_token
        revision = self._revision
        if self._machine.state.is_running:
            self._machine.reset(revision)

        try:
            if not normalized:
                raise InvalidCodeError(code or "")
            promotion = await self._catalog.get_by_code(normalized)
            if promotion is None:
                raise InvalidCodeError(normalized)
            context = await self._resolve_context()
            if self._is_stale(token, revision, "manual"):
                raise StaleResultError(f"Snapshot changed while applying {normalized}")
            check_eligibility(promotion, self._snapshot, context)
        except PromotionError as exc:
            PROMO_MANUAL_REJECTED.labels(reason=exc.code).inc()
            logger.info("🚫 Manual code %s rejected: %s", normalized, exc.code, extra=exc.to_log_extra())
            raise

        self._applied = AppliedPromotion(
            promotion=promotion,
            computed_discount=compute_discount(promotion, self._snapshot),
            source=PromotionSource.MANUAL,
            snapshot_revision=revision,
        )
        self._last_rejection = None
        self._machine.settle(revision, _S.APPLIED)
        PROMO_MANUAL_APPLIED.inc()
        logger.info("✅ %s applied manually → discount %s", promotion.code, self._applied.computed_discount)
        return self._applied

    def remove_promotion(self) -> None:
        """Ручне зняття коду; авто-вибір лишається вимкненим."""
        if self._applied is not None:
            logger.info("🗑️ %s removed by customer", self._applied.code)
        self._applied = None
        self._manual_lock = True
        self._selection_token += 1
        self._machine.settle(self._revision, _S.UNAPPLIED)

    # ================================
    # 🥇 ВІДКЛАДЕНА FIRST-ORDER ПЕРЕВІРКА
    # ================================
    async def validate_for_order_placement(self) -> FirstOrderValidation:
        """
        Серверна перевірка first-order-only коду перед оформленням.

        Raises:
            NetworkFailureError: сервіс недоступний (повторити пізніше).
        """
        applied = self._applied
        if applied is None or not applied.promotion.first_order_only:
            return FirstOrderValidation.NOT_REQUIRED

        revision = self._revision
        decision = await self._repository.validate_first_order_eligibility(applied.code, self._snapshot.subtotal)
        if revision != self._revision or self._applied is not applied:
            PROMO_STALE_DISCARDED.labels(operation="first_order").inc()
            logger.info("⌛ First-order validation for %s discarded: snapshot changed", applied.code)
            return FirstOrderValidation.STALE

        if decision.accepted:
            logger.info("🥇 First-order code %s confirmed", applied.code)
            return FirstOrderValidation.ACCEPTED

        self._last_rejection = FirstOrderOnlyViolationError(applied.code, reason=decision.reason)
        self._applied = None
        self._manual_lock = True                                    # 🔒 Щоб авто-вибір не повернув той самий код
        self._selection_token += 1
        self._machine.settle(revision, _S.UNAPPLIED)
        logger.info("🚫 First-order code %s rejected at placement: %s", applied.code, decision.reason)
        return FirstOrderValidation.REJECTED

    # ================================
    # 🔒 ВНУТРІШНЯ ЛОГІКА
    # ================================
    def _is_stale(self, token: int, revision: int, operation: str) -> bool:
        if token == self._selection_token and revision == self._revision:
            return False
        PROMO_STALE_DISCARDED.labels(operation=operation).inc()
        logger.debug(
            "⌛ Stale %s result discarded | token %s→%s rev %s→%s",
            operation,
            token,
            self._selection_token,
            revision,
            self._revision,
        )
        return True

    async def _resolve_context(self) -> EligibilityContext:
        """Збирає `EligibilityContext` з авторизації та історії замовлень."""
        if not self._auth.is_authenticated:
            context = EligibilityContext()
        else:
            user_id = self._auth.user_id
            has_prior = False
            if self._history is not None and user_id:
                try:
                    has_prior = await self._history.has_prior_paid_order(user_id)
                except AppError as exc:
                    # 🥇 Перевірка повториться на сервері при оформленні
                    logger.warning("⚠️ Order history unavailable: %s", exc.message, extra=exc.to_log_extra())
            context = EligibilityContext(is_authenticated=True, has_prior_paid_order=bool(has_prior))
        self._context = context
        return context


__all__ = ["CheckoutSession", "FirstOrderValidation"]
