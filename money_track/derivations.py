"""Read-only aggregates computed from the record collections.

Every function here is pure: it takes the collections and a reference
``now`` and returns display-ready values without touching its inputs.
Empty collections produce zero-valued results rather than errors, and a
transaction whose category no longer exists still counts toward sums but
is labelled ``"Unknown"`` wherever a name is shown.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .models import Budget, Category, Goal, Transaction

UNKNOWN_CATEGORY = "Unknown"
UNKNOWN_COLOR = "#6b7280"

ZERO = Decimal("0")
HUNDRED = Decimal("100")

Moment = Union[date, datetime]


@dataclass(frozen=True)
class MonthlySummary:
    income: Decimal
    expense: Decimal
    balance: Decimal
    savings_rate: Decimal


@dataclass(frozen=True)
class BudgetOverview:
    total_budget: Decimal
    monthly_spent: Decimal
    remaining: Decimal


@dataclass(frozen=True)
class BudgetProgress:
    budget: Budget
    category_name: str
    spent: Decimal
    percentage: Decimal

    @property
    def bar_width(self) -> Decimal:
        """Percentage clamped to 100 for progress-bar rendering."""
        return min(self.percentage, HUNDRED)


@dataclass(frozen=True)
class GoalProgress:
    goal: Goal
    percentage: Decimal
    days_left: int
    remaining: Decimal

    @property
    def is_completed(self) -> bool:
        return self.goal.is_completed


@dataclass(frozen=True)
class TransactionRow:
    transaction: Transaction
    category_name: str
    category_color: str


@dataclass(frozen=True)
class TrendSeries:
    labels: List[str] = field(default_factory=list)
    income: List[Decimal] = field(default_factory=list)
    expenses: List[Decimal] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryBreakdown:
    labels: List[str] = field(default_factory=list)
    data: List[Decimal] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)


# Calendar helpers ---------------------------------------------------------
def _as_date(moment: Moment) -> date:
    return moment.date() if isinstance(moment, datetime) else moment


def _same_month(value: date, reference: date) -> bool:
    return value.year == reference.year and value.month == reference.month


def _month_start(year: int, month: int) -> date:
    return date(year, month, 1)


def _month_end(year: int, month: int) -> date:
    if month == 12:
        return date(year + 1, 1, 1) - date.resolution
    return date(year, month + 1, 1) - date.resolution


def _shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, start=ZERO)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return ZERO
    return part / whole * HUNDRED


def _category_index(categories: Iterable[Category]) -> Dict[int, Category]:
    index: Dict[int, Category] = {}
    for category in categories:
        # First match wins, mirroring a linear lookup by id.
        index.setdefault(category.id, category)
    return index


def _by_date_desc(transactions: Iterable[Transaction]) -> List[Transaction]:
    # sorted() is stable with reverse=True, so same-day entries keep insertion order.
    return sorted(transactions, key=lambda txn: txn.date, reverse=True)


# Dashboard ----------------------------------------------------------------
def monthly_summary(transactions: Iterable[Transaction], now: Moment) -> MonthlySummary:
    """Income, expense, balance and savings rate for the calendar month of ``now``."""
    today = _as_date(now)
    monthly = [txn for txn in transactions if _same_month(txn.date, today)]
    income = _total(txn.amount for txn in monthly if txn.type == "income")
    expense = _total(txn.amount for txn in monthly if txn.type == "expense")
    balance = income - expense
    if income > 0:
        savings_rate = _percentage(balance, income).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    else:
        savings_rate = ZERO
    return MonthlySummary(income=income, expense=expense, balance=balance, savings_rate=savings_rate)


def budget_overview(
    budgets: Iterable[Budget], transactions: Iterable[Transaction], now: Moment
) -> BudgetOverview:
    """Total of every budget (any period) against this month's expenses."""
    today = _as_date(now)
    total_budget = _total(budget.amount for budget in budgets)
    monthly_spent = _total(
        txn.amount
        for txn in transactions
        if txn.type == "expense" and _same_month(txn.date, today)
    )
    return BudgetOverview(
        total_budget=total_budget,
        monthly_spent=monthly_spent,
        remaining=total_budget - monthly_spent,
    )


def recent_transactions(transactions: Iterable[Transaction], limit: int = 5) -> List[Transaction]:
    return _by_date_desc(transactions)[:limit]


def transaction_rows(
    transactions: Iterable[Transaction], categories: Iterable[Category]
) -> List[TransactionRow]:
    """Pair transactions with the category name and colour used for display."""
    index = _category_index(categories)
    rows = []
    for txn in transactions:
        category = index.get(txn.category_id)
        rows.append(
            TransactionRow(
                transaction=txn,
                category_name=category.name if category else UNKNOWN_CATEGORY,
                category_color=category.color if category else UNKNOWN_COLOR,
            )
        )
    return rows


# Transactions table -------------------------------------------------------
def filter_transactions(
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    *,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    type: Optional[str] = None,
) -> List[Transaction]:
    """Apply search, category and type filters in that order, newest first.

    ``search`` is a case-insensitive substring matched against the
    description or the category name. Empty filters are skipped.
    """
    index = _category_index(categories)
    filtered: Sequence[Transaction] = list(transactions)

    term = (search or "").lower()
    if term:

        def matches(txn: Transaction) -> bool:
            if term in txn.description.lower():
                return True
            category = index.get(txn.category_id)
            return category is not None and term in category.name.lower()

        filtered = [txn for txn in filtered if matches(txn)]

    if category_id:
        filtered = [txn for txn in filtered if txn.category_id == category_id]

    if type:
        filtered = [txn for txn in filtered if txn.type == type]

    return _by_date_desc(filtered)


# Budgets ------------------------------------------------------------------
def category_spent(transactions: Iterable[Transaction], category_id: int, now: Moment) -> Decimal:
    """Expenses recorded against ``category_id`` during the month of ``now``."""
    today = _as_date(now)
    return _total(
        txn.amount
        for txn in transactions
        if txn.category_id == category_id
        and txn.type == "expense"
        and _same_month(txn.date, today)
    )


def budget_progress(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    categories: Iterable[Category],
    now: Moment,
) -> List[BudgetProgress]:
    index = _category_index(categories)
    transactions = list(transactions)
    progress = []
    for budget in budgets:
        category = index.get(budget.category_id)
        spent = category_spent(transactions, budget.category_id, now)
        progress.append(
            BudgetProgress(
                budget=budget,
                category_name=category.name if category else UNKNOWN_CATEGORY,
                spent=spent,
                percentage=_percentage(spent, budget.amount),
            )
        )
    return progress


# Goals --------------------------------------------------------------------
def days_until(target: date, now: Moment) -> int:
    """Whole days left until midnight of ``target``, rounded up, never negative."""
    if isinstance(now, datetime):
        deadline = datetime.combine(target, time.min, tzinfo=now.tzinfo)
        seconds = (deadline - now).total_seconds()
    else:
        seconds = (target - now).total_seconds()
    return max(0, math.ceil(seconds / 86400))


def goal_progress(goal: Goal, now: Moment) -> GoalProgress:
    return GoalProgress(
        goal=goal,
        percentage=_percentage(goal.current_amount, goal.target_amount),
        days_left=days_until(goal.target_date, now),
        remaining=goal.target_amount - goal.current_amount,
    )


# Analytics ----------------------------------------------------------------
def trend_series(transactions: Iterable[Transaction], now: Moment, months: int = 6) -> TrendSeries:
    """Income and expense totals for the last ``months`` calendar months, oldest first.

    Months without activity are reported as zero so the series always has
    exactly ``months`` entries.
    """
    today = _as_date(now)
    transactions = list(transactions)
    labels: List[str] = []
    income: List[Decimal] = []
    expenses: List[Decimal] = []
    for offset in range(months - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -offset)
        start, end = _month_start(year, month), _month_end(year, month)
        in_month = [txn for txn in transactions if start <= txn.date <= end]
        labels.append(start.strftime("%b %Y"))
        income.append(_total(txn.amount for txn in in_month if txn.type == "income"))
        expenses.append(_total(txn.amount for txn in in_month if txn.type == "expense"))
    return TrendSeries(labels=labels, income=income, expenses=expenses)


def category_breakdown(
    transactions: Iterable[Transaction], categories: Iterable[Category]
) -> CategoryBreakdown:
    """Expense totals grouped by category name in order of first appearance.

    Categories sharing a name are merged and keep the colour of the first
    one seen. Categories without expenses are left out.
    """
    index = _category_index(categories)
    totals: Dict[str, Decimal] = {}
    colors: Dict[str, str] = {}
    for txn in transactions:
        if txn.type != "expense":
            continue
        category = index.get(txn.category_id)
        name = category.name if category else UNKNOWN_CATEGORY
        if name not in totals:
            totals[name] = ZERO
            colors[name] = category.color if category else UNKNOWN_COLOR
        totals[name] += txn.amount
    labels = list(totals)
    return CategoryBreakdown(
        labels=labels,
        data=[totals[label] for label in labels],
        colors=[colors[label] for label in labels],
    )
