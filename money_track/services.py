"""Validated create/update/delete operations on the record store."""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from .models import (
    BUDGET_PERIODS,
    CATEGORY_PALETTE,
    CURRENCIES,
    DATE_FORMATS,
    RECORD_TYPES,
    Budget,
    Category,
    Goal,
    Settings,
    Transaction,
    local_now,
)
from .notifications import Notifier
from .store import RecordStore
from .validators import (
    parse_amount,
    parse_optional_amount,
    parse_record_id,
    parse_signed_amount,
    validate_date,
    validate_enum,
    validate_optional_str,
    validate_required_str,
)
from .views import View

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
Refresh = Callable[..., None]

CONFIRM_DELETE_TRANSACTION = "Are you sure you want to delete this transaction?"
CONFIRM_DELETE_BUDGET = "Are you sure you want to delete this budget?"
CONFIRM_DELETE_GOAL = "Are you sure you want to delete this goal?"
CONFIRM_DELETE_CATEGORY = (
    "Are you sure you want to delete this category? This will affect all related transactions."
)
CONFIRM_CLEAR_ALL = "Are you sure you want to clear all data? This action cannot be undone."


def _no_refresh(*views: View) -> None:
    return None


class MutationService:
    """Single writer for the record store.

    Every operation validates its raw input before touching the store, so a
    :class:`~money_track.exceptions.ValidationError` always leaves state
    unchanged. Successful operations persist the full snapshot, refresh the
    affected views and post a success notification.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        refresh: Optional[Refresh] = None,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._store = store
        self._refresh = refresh or _no_refresh
        self._notifier = notifier or Notifier()
        self._clock = clock or local_now
        self._rng = rng or random.Random()

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    # Transactions ---------------------------------------------------------
    def add_transaction(
        self,
        type: object,
        amount: object,
        description: object,
        category_id: object,
        date: object,
    ) -> Transaction:
        transaction = Transaction(
            id=0,
            type=validate_enum(type, "type", RECORD_TYPES),
            amount=parse_amount(amount, "amount"),
            description=validate_required_str(description, "description", 200),
            category_id=parse_record_id(category_id, "category_id"),
            date=validate_date(date, "date"),
            created_at=self._clock(),
        )
        if self._store.category_for(transaction.category_id) is None:
            logger.warning("Transaction references unknown category %s", transaction.category_id)
        transaction = replace(transaction, id=self._store.next_id())
        self._store.transactions.append(transaction)
        self._commit("Transaction added successfully!", View.DASHBOARD, View.TRANSACTIONS)
        return transaction

    def delete_transaction(self, transaction_id: int, confirm: Confirm) -> bool:
        if not confirm(CONFIRM_DELETE_TRANSACTION):
            return False
        self._store.transactions = [
            txn for txn in self._store.transactions if txn.id != transaction_id
        ]
        self._commit("Transaction deleted successfully!", View.DASHBOARD, View.TRANSACTIONS)
        return True

    # Budgets --------------------------------------------------------------
    def add_or_update_budget(self, category_id: object, amount: object, period: object) -> Budget:
        """Create a budget, or overwrite the amount of the one already set for this pair."""
        category = parse_record_id(category_id, "category_id")
        value = parse_amount(amount, "amount")
        cadence = validate_enum(period, "period", BUDGET_PERIODS)

        budgets = self._store.budgets
        for position, existing in enumerate(budgets):
            if existing.category_id == category and existing.period == cadence:
                updated = replace(existing, amount=value)
                budgets[position] = updated
                self._commit("Budget updated successfully!", View.BUDGET, View.DASHBOARD)
                return updated

        budget = Budget(
            id=self._store.next_id(),
            category_id=category,
            amount=value,
            period=cadence,
            created_at=self._clock(),
        )
        budgets.append(budget)
        self._commit("Budget created successfully!", View.BUDGET, View.DASHBOARD)
        return budget

    def delete_budget(self, budget_id: int, confirm: Confirm) -> bool:
        if not confirm(CONFIRM_DELETE_BUDGET):
            return False
        self._store.budgets = [budget for budget in self._store.budgets if budget.id != budget_id]
        self._commit("Budget deleted successfully!", View.BUDGET, View.DASHBOARD)
        return True

    # Goals ----------------------------------------------------------------
    def add_goal(
        self,
        title: object,
        target_amount: object,
        target_date: object,
        current_amount: object = 0,
        description: object = "",
    ) -> Goal:
        goal = Goal(
            id=0,
            title=validate_required_str(title, "title", 100),
            target_amount=parse_amount(target_amount, "target_amount"),
            current_amount=parse_optional_amount(current_amount, "current_amount"),
            target_date=validate_date(target_date, "target_date"),
            created_at=self._clock(),
            description=validate_optional_str(description, "description", 500),
        )
        goal = replace(goal, id=self._store.next_id())
        self._store.goals.append(goal)
        self._commit("Goal created successfully!", View.GOALS)
        return goal

    def update_goal_progress(self, goal_id: int, delta: object) -> Optional[Goal]:
        """Add ``delta`` to a goal, capping the result at its target amount."""
        change = parse_signed_amount(delta, "amount")
        goals = self._store.goals
        for position, goal in enumerate(goals):
            if goal.id != goal_id:
                continue
            current = min(goal.current_amount + change, goal.target_amount)
            updated = replace(goal, current_amount=max(current, Decimal("0.00")))
            goals[position] = updated
            self._commit(None, View.GOALS)
            return updated
        logger.debug("Goal %s not found; progress update ignored", goal_id)
        return None

    def delete_goal(self, goal_id: int, confirm: Confirm) -> bool:
        if not confirm(CONFIRM_DELETE_GOAL):
            return False
        self._store.goals = [goal for goal in self._store.goals if goal.id != goal_id]
        self._commit("Goal deleted successfully!", View.GOALS)
        return True

    # Categories -----------------------------------------------------------
    def add_category(self, name: object, type: object) -> Category:
        category = Category(
            id=0,
            name=validate_required_str(name, "name", 50),
            type=validate_enum(type, "type", RECORD_TYPES),
            color=self._rng.choice(CATEGORY_PALETTE),
        )
        category = replace(category, id=self._store.next_id())
        self._store.categories.append(category)
        self._commit("Category added successfully!", View.SETTINGS)
        return category

    def delete_category(self, category_id: int, confirm: Confirm) -> bool:
        """Remove a category together with every transaction and budget that uses it."""
        if not confirm(CONFIRM_DELETE_CATEGORY):
            return False
        store = self._store
        store.categories = [item for item in store.categories if item.id != category_id]
        store.transactions = [txn for txn in store.transactions if txn.category_id != category_id]
        store.budgets = [budget for budget in store.budgets if budget.category_id != category_id]
        self._commit(
            "Category deleted successfully!",
            View.SETTINGS,
            View.DASHBOARD,
            View.TRANSACTIONS,
            View.BUDGET,
        )
        return True

    # Settings -------------------------------------------------------------
    def update_settings(
        self,
        *,
        currency: object = None,
        date_format: object = None,
        theme: object = None,
    ) -> Settings:
        settings = self._store.settings
        if currency is not None:
            settings = replace(
                settings, currency=validate_enum(currency, "currency", CURRENCIES, normalize=str.upper)
            )
        if date_format is not None:
            settings = replace(
                settings,
                date_format=validate_enum(
                    date_format, "date_format", DATE_FORMATS, normalize=str.upper
                ),
            )
        if theme is not None:
            settings = replace(settings, theme=validate_required_str(theme, "theme", 20))
        self._store.settings = settings
        self._commit(None, View.SETTINGS, View.DASHBOARD)
        return settings

    def clear_all_data(self, confirm: Confirm) -> bool:
        if not confirm(CONFIRM_CLEAR_ALL):
            return False
        self._store.reset()
        self._commit("All data cleared successfully!", *list(View))
        return True

    # Internal helpers -----------------------------------------------------
    def _commit(self, message: Optional[str], *views: View) -> None:
        # The store flushes the whole snapshot; storage handles atomic writes.
        self._store.save()
        self._refresh(*views)
        if message:
            self._notifier.success(message)


def always_confirm(prompt: str) -> bool:
    return True
