"""Render the application sections as JSON-ready payloads.

Each :class:`View` member has exactly one render function. Mutations ask a
:class:`ViewRefresher` to re-render the sections they affect, and front-ends
subscribe to receive the fresh payloads.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from . import derivations
from .formatting import format_currency, format_date, format_percentage
from .models import Settings, Transaction, local_now
from .store import RecordStore
from .validators import parse_month_count

logger = logging.getLogger(__name__)


class View(str, enum.Enum):
    DASHBOARD = "dashboard"
    TRANSACTIONS = "transactions"
    BUDGET = "budget"
    GOALS = "goals"
    ANALYTICS = "analytics"
    SETTINGS = "settings"


Payload = Dict[str, Any]
Listener = Callable[[View, Payload], None]


def _money(amount: Decimal, settings: Settings) -> Dict[str, str]:
    return {"amount": f"{amount:.2f}", "display": format_currency(amount, settings.currency)}


def _row(row: derivations.TransactionRow, settings: Settings) -> Payload:
    txn: Transaction = row.transaction
    sign = "+" if txn.type == "income" else "-"
    return {
        **txn.to_dict(),
        "category": row.category_name,
        "color": row.category_color,
        "displayDate": format_date(txn.date, settings.date_format),
        "displayAmount": sign + format_currency(txn.amount, settings.currency),
    }


def _series(values: List[Decimal]) -> List[str]:
    return [f"{value:.2f}" for value in values]


def render_dashboard(store: RecordStore, now: datetime) -> Payload:
    settings = store.settings
    summary = derivations.monthly_summary(store.transactions, now)
    overview = derivations.budget_overview(store.budgets, store.transactions, now)
    recent = derivations.transaction_rows(
        derivations.recent_transactions(store.transactions), store.categories
    )
    trend = derivations.trend_series(store.transactions, now)
    breakdown = derivations.category_breakdown(store.transactions, store.categories)
    return {
        "summary": {
            "income": _money(summary.income, settings),
            "expense": _money(summary.expense, settings),
            "balance": _money(summary.balance, settings),
            "savingsRate": format_percentage(summary.savings_rate),
        },
        "budgetOverview": {
            "totalBudget": _money(overview.total_budget, settings),
            "monthlySpent": _money(overview.monthly_spent, settings),
            "remaining": _money(overview.remaining, settings),
        },
        "recentTransactions": [_row(row, settings) for row in recent],
        "monthlyChart": {
            "labels": trend.labels,
            "income": _series(trend.income),
            "expenses": _series(trend.expenses),
        },
        "categoryChart": {
            "labels": breakdown.labels,
            "data": _series(breakdown.data),
            "colors": breakdown.colors,
        },
    }


def render_transactions(
    store: RecordStore,
    now: datetime,
    *,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    type: Optional[str] = None,
) -> Payload:
    filtered = derivations.filter_transactions(
        store.transactions,
        store.categories,
        search=search,
        category_id=category_id,
        type=type,
    )
    rows = derivations.transaction_rows(filtered, store.categories)
    return {"items": [_row(row, store.settings) for row in rows], "total": len(store.transactions)}


def render_budget(store: RecordStore, now: datetime) -> Payload:
    settings = store.settings
    items = []
    for progress in derivations.budget_progress(
        store.budgets, store.transactions, store.categories, now
    ):
        budget = progress.budget
        items.append(
            {
                **budget.to_dict(),
                "category": progress.category_name,
                "budgetDisplay": format_currency(budget.amount, settings.currency),
                "spent": _money(progress.spent, settings),
                "percentage": format_percentage(progress.percentage),
                "barWidth": f"{progress.bar_width:.1f}",
            }
        )
    return {"items": items}


def render_goals(store: RecordStore, now: datetime) -> Payload:
    settings = store.settings
    items = []
    for goal in store.goals:
        progress = derivations.goal_progress(goal, now)
        items.append(
            {
                **goal.to_dict(),
                "progress": format_percentage(progress.percentage, places=0),
                "daysLeft": progress.days_left,
                "remaining": _money(progress.remaining, settings),
                "targetDateDisplay": format_date(goal.target_date, settings.date_format),
                "isCompleted": progress.is_completed,
            }
        )
    return {"items": items}


def render_analytics(store: RecordStore, now: datetime, *, months: object = 6) -> Payload:
    trend = derivations.trend_series(store.transactions, now, months=parse_month_count(months))
    breakdown = derivations.category_breakdown(store.transactions, store.categories)
    return {
        "trend": {
            "labels": trend.labels,
            "income": _series(trend.income),
            "expenses": _series(trend.expenses),
        },
        "categories": {
            "labels": breakdown.labels,
            "data": _series(breakdown.data),
            "colors": breakdown.colors,
        },
    }


def render_settings(store: RecordStore, now: datetime) -> Payload:
    return {
        "settings": store.settings.to_dict(),
        "categories": [category.to_dict() for category in store.categories],
    }


def render(view: View, store: RecordStore, now: Optional[datetime] = None, **filters: Any) -> Payload:
    """Render ``view``; filters only apply to the transactions and analytics views."""
    now = now or local_now()
    if view is View.DASHBOARD:
        return render_dashboard(store, now)
    elif view is View.TRANSACTIONS:
        return render_transactions(store, now, **filters)
    elif view is View.BUDGET:
        return render_budget(store, now)
    elif view is View.GOALS:
        return render_goals(store, now)
    elif view is View.ANALYTICS:
        return render_analytics(store, now, **filters)
    elif view is View.SETTINGS:
        return render_settings(store, now)
    raise ValueError(f"Unhandled view: {view!r}")


class ViewRefresher:
    """Re-renders sections after a mutation and hands them to subscribers."""

    def __init__(self, store: RecordStore, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._store = store
        self._clock = clock or local_now
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def __call__(self, *views: View) -> None:
        if not self._listeners:
            return
        now = self._clock()
        for view in views:
            payload = render(view, self._store, now)
            logger.debug("Refreshed %s view", view.value)
            for listener in self._listeners:
                listener(view, payload)
