# 🤖 storefront/domain/promotions/selection.py
"""
🤖 Політика авто-вибору промокоду.

🔹 `select_auto_promotion` — перший застосовний промокод у порядку каталогу
   (first-match, а не найбільша знижка). First-order-only для гостя пропускаємо.
🔹 `AutoSelectionState` — стани машини авто-вибору, що живе в сесії оформлення.
🔹 `AutoSelectionMachine` — перевіряє переходи за таблицею; нелегальний перехід → виняток.
"""

from __future__ import annotations

# 🔠 Системні імпорти
import logging                                                  # 🧾 Логування рішень
from enum import Enum, unique                                   # 🏷️ Стани
from types import MappingProxyType                              # 🧊 Незмінна таблиця переходів
from typing import FrozenSet, Iterable, Mapping, Optional       # 🧰 Типи

# 🧩 Внутрішні модулі проєкту
from storefront.shared.utils.logger import LOG_NAME             # 🏷️ Базове імʼя логера
from .eligibility import evaluate_eligibility                   # ✅ Перевірка застосовності
from .entities import CheckoutSnapshot, EligibilityContext, Promotion

logger = logging.getLogger(f"{LOG_NAME}.domain.promotions.selection")


# ================================
# 🎯 ЧИСТИЙ ВИБІР
# ================================
def select_auto_promotion(
    snapshot: CheckoutSnapshot,
    candidates: Iterable[Promotion],
    context: EligibilityContext,
) -> Optional[Promotion]:
    """
    Повертає перший застосовний промокод у порядку каталогу або None.

    First-order-only промокоди гостю не пропонуємо: їх неможливо підтвердити до входу.
    """
    for promotion in candidates:
        if promotion.first_order_only and not context.is_authenticated:
            logger.debug("⏭️ %s skipped | first-order-only for guest", promotion.code)
            continue
        if evaluate_eligibility(promotion, snapshot, context):
            logger.info("🎯 Auto-selection picked %s", promotion.code)
            return promotion
    logger.debug("🕳️ Auto-selection found no eligible promotion")
    return None


# ================================
# 🔁 МАШИНА СТАНІВ
# ================================
@unique
class AutoSelectionState(str, Enum):
    """Стани авто-вибору в межах одного знімка."""
    IDLE = "idle"
    CATALOG_LOADING = "catalog_loading"
    CARRY_OVER_APPLY = "carry_over_apply"
    QUANTITY_MATCH_APPLY = "quantity_match_apply"
    NONE_APPLICABLE = "none_applicable"
    APPLIED = "applied"
    UNAPPLIED = "unapplied"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (AutoSelectionState.APPLIED, AutoSelectionState.UNAPPLIED)

    @property
    def is_running(self) -> bool:
        return not self.is_terminal and self is not AutoSelectionState.IDLE


_S = AutoSelectionState

TRANSITIONS: Mapping[AutoSelectionState, FrozenSet[AutoSelectionState]] = MappingProxyType(
    {
        _S.IDLE: frozenset({_S.CATALOG_LOADING, _S.APPLIED, _S.UNAPPLIED}),
        _S.CATALOG_LOADING: frozenset({_S.CARRY_OVER_APPLY, _S.QUANTITY_MATCH_APPLY, _S.NONE_APPLICABLE, _S.IDLE}),
        _S.CARRY_OVER_APPLY: frozenset({_S.APPLIED, _S.QUANTITY_MATCH_APPLY, _S.IDLE}),
        _S.QUANTITY_MATCH_APPLY: frozenset({_S.APPLIED, _S.NONE_APPLICABLE, _S.IDLE}),
        _S.NONE_APPLICABLE: frozenset({_S.UNAPPLIED}),
        _S.APPLIED: frozenset({_S.IDLE}),
        _S.UNAPPLIED: frozenset({_S.IDLE}),
    }
)


class IllegalTransitionError(RuntimeError):
    """Спроба переходу, якого немає в таблиці."""


class AutoSelectionMachine:
    """
    Тримає поточний стан авто-вибору та номер ревізії знімка, до якого він належить.

    `reset(revision)` повертає машину в IDLE для нового знімка; переходи з APPLIED/UNAPPLIED
    в інші стани можливі лише через reset.
    """

    def __init__(self, revision: int = 0) -> None:
        self._state = AutoSelectionState.IDLE
        self._revision = revision

    @property
    def state(self) -> AutoSelectionState:
        return self._state

    @property
    def revision(self) -> int:
        return self._revision

    def advance(self, target: AutoSelectionState) -> None:
        allowed = TRANSITIONS[self._state]
        if target not in allowed:
            raise IllegalTransitionError(f"{self._state} → {target} is not allowed")
        logger.debug("🔁 Auto-selection %s → %s (rev=%s)", self._state, target, self._revision)
        self._state = target

    def reset(self, revision: int) -> None:
        """Новий знімок → IDLE."""
        logger.debug("♻️ Auto-selection reset | %s → idle (rev %s → %s)", self._state, self._revision, revision)
        self._state = AutoSelectionState.IDLE
        self._revision = revision

    def settle(self, revision: int, state: AutoSelectionState) -> None:
        """Фіксує термінальний стан для знімка без проходження циклу (ручний вибір, перенос)."""
        if not state.is_terminal:
            raise IllegalTransitionError(f"settle() expects a terminal state, got {state}")
        self._revision = revision
        self._state = state


__all__ = [
    "select_auto_promotion",
    "AutoSelectionState",
    "AutoSelectionMachine",
    "IllegalTransitionError",
    "TRANSITIONS",
]
