from datetime import date, datetime, timezone
from decimal import Decimal

from money_track import derivations
from money_track.models import Category


class TestMonthlySummary:
    def test_sums_only_the_current_month(self, make_txn, now):
        transactions = [
            make_txn(1, "income", 5000, 1, "2026-10-05"),
            make_txn(2, "expense", 1200, 8, "2026-10-01"),
            make_txn(3, "expense", 300, 4, "2026-10-10"),
            make_txn(4, "income", 999, 1, "2026-09-30"),
            make_txn(5, "expense", 50, 4, "2025-10-15"),
        ]

        summary = derivations.monthly_summary(transactions, now)

        assert summary.income == Decimal("5000")
        assert summary.expense == Decimal("1500")
        assert summary.balance == Decimal("3500")
        assert summary.savings_rate == Decimal("70.0")

    def test_balance_is_income_minus_expense(self, make_txn, now):
        transactions = [
            make_txn(1, "income", "120.50", 1, "2026-10-02"),
            make_txn(2, "expense", "80.25", 4, "2026-10-03"),
            make_txn(3, "expense", "60.00", 5, "2026-10-04"),
        ]

        summary = derivations.monthly_summary(transactions, now)

        assert summary.income - summary.expense == summary.balance
        assert summary.balance == Decimal("-19.75")

    def test_savings_rate_zero_without_income(self, make_txn, now):
        transactions = [make_txn(1, "expense", 100, 4, "2026-10-02")]

        summary = derivations.monthly_summary(transactions, now)

        assert summary.savings_rate == 0
        assert summary.balance == Decimal("-100")

    def test_savings_rate_rounded_to_one_decimal(self, make_txn, now):
        transactions = [
            make_txn(1, "income", 3, 1, "2026-10-02"),
            make_txn(2, "expense", 1, 4, "2026-10-02"),
        ]

        summary = derivations.monthly_summary(transactions, now)

        assert summary.savings_rate == Decimal("66.7")

    def test_empty_collection_yields_zeros(self, now):
        summary = derivations.monthly_summary([], now)

        assert summary.income == summary.expense == summary.balance == 0
        assert summary.savings_rate == 0


class TestBudgets:
    def test_overview_totals_every_budget_regardless_of_period(self, make_budget, make_txn, now):
        budgets = [make_budget(1, 4, 500), make_budget(2, 5, 200, period="weekly")]
        transactions = [
            make_txn(1, "expense", 300, 4, "2026-10-03"),
            make_txn(2, "expense", 150, 5, "2026-10-04"),
            make_txn(3, "expense", 999, 5, "2026-09-04"),
            make_txn(4, "income", 5000, 1, "2026-10-04"),
        ]

        overview = derivations.budget_overview(budgets, transactions, now)

        assert overview.total_budget == Decimal("700")
        assert overview.monthly_spent == Decimal("450")
        assert overview.remaining == Decimal("250")

    def test_remaining_can_go_negative(self, make_budget, make_txn, now):
        overview = derivations.budget_overview(
            [make_budget(1, 4, 100)], [make_txn(1, "expense", 250, 4, "2026-10-01")], now
        )

        assert overview.remaining == Decimal("-150")

    def test_overview_with_nothing_recorded(self, now):
        overview = derivations.budget_overview([], [], now)

        assert overview.total_budget == overview.monthly_spent == overview.remaining == 0

    def test_category_spent_is_month_and_category_scoped(self, make_txn, now):
        transactions = [
            make_txn(1, "expense", 40, 4, "2026-10-01"),
            make_txn(2, "expense", 60, 4, "2026-10-31"),
            make_txn(3, "expense", 70, 5, "2026-10-02"),
            make_txn(4, "income", 80, 4, "2026-10-02"),
            make_txn(5, "expense", 90, 4, "2026-11-01"),
        ]

        assert derivations.category_spent(transactions, 4, now) == Decimal("100")

    def test_progress_percentage_uncapped_but_bar_clamped(
        self, make_budget, make_txn, categories, now
    ):
        budgets = [make_budget(1, 5, 200), make_budget(2, 4, 500), make_budget(3, 42, 100)]
        transactions = [
            make_txn(1, "expense", 300, 5, "2026-10-03"),
            make_txn(2, "expense", 125, 4, "2026-10-03"),
        ]

        over, under, orphan = derivations.budget_progress(budgets, transactions, categories, now)

        assert over.percentage == Decimal("150")
        assert over.bar_width == Decimal("100")
        assert over.category_name == "Transportation"
        assert under.percentage == Decimal("25")
        assert under.bar_width == Decimal("25")
        assert orphan.category_name == "Unknown"
        assert orphan.spent == 0


class TestGoalProgress:
    def test_percentage_days_and_remaining(self, make_goal, now):
        goal = make_goal(1, 2500, 10000, target_date="2026-10-29")

        progress = derivations.goal_progress(goal, now)

        assert progress.percentage == Decimal("25")
        # 9.5 days until midnight of the target date, rounded up.
        assert progress.days_left == 10
        assert progress.remaining == Decimal("7500")
        assert not progress.is_completed

    def test_days_left_floored_at_zero(self, make_goal, now):
        progress = derivations.goal_progress(make_goal(1, 0, 100, target_date="2026-01-01"), now)

        assert progress.days_left == 0

    def test_goal_created_above_target_counts_as_completed(self, make_goal, now):
        progress = derivations.goal_progress(make_goal(1, 12000, 10000), now)

        assert progress.is_completed
        assert progress.remaining == Decimal("-2000")
        assert progress.percentage == Decimal("120")

    def test_days_until_accepts_plain_dates(self):
        assert derivations.days_until(date(2026, 10, 25), date(2026, 10, 19)) == 6


class TestTransactionViews:
    def test_recent_returns_five_newest(self, make_txn):
        transactions = [
            make_txn(i, "expense", 10, 4, f"2026-10-{day:02d}")
            for i, day in enumerate([3, 9, 1, 7, 5, 8, 2], start=1)
        ]

        recent = derivations.recent_transactions(transactions)

        assert [txn.date.day for txn in recent] == [9, 8, 7, 5, 3]

    def test_recent_keeps_insertion_order_for_same_day(self, make_txn):
        transactions = [
            make_txn(1, "expense", 10, 4, "2026-10-01"),
            make_txn(2, "expense", 10, 4, "2026-10-05"),
            make_txn(3, "income", 10, 1, "2026-10-05"),
            make_txn(4, "expense", 10, 5, "2026-10-05"),
        ]

        recent = derivations.recent_transactions(transactions)

        assert [txn.id for txn in recent] == [2, 3, 4, 1]

    def test_filter_by_category_and_type(self, make_txn, categories):
        transactions = [
            make_txn(1, "expense", 300, 4, "2026-10-01", "Grocery Shopping"),
            make_txn(2, "income", 5000, 1, "2026-10-02", "Monthly Salary"),
            make_txn(3, "expense", 45, 4, "2026-10-09", "Dinner out"),
            make_txn(4, "expense", 150, 5, "2026-10-05", "Gas Station"),
            make_txn(5, "expense", 1200, 8, "2026-10-03", "Rent Payment"),
        ]

        filtered = derivations.filter_transactions(
            transactions, categories, category_id=4, type="expense"
        )

        assert [txn.id for txn in filtered] == [3, 1]

    def test_search_matches_description_or_category_name(self, make_txn, categories):
        transactions = [
            make_txn(1, "expense", 300, 4, "2026-10-01", "Weekly groceries"),
            make_txn(2, "expense", 20, 5, "2026-10-02", "Bus to FOOD market"),
            make_txn(3, "expense", 150, 5, "2026-10-03", "Gas Station"),
            make_txn(4, "expense", 10, 99, "2026-10-04", "Orphaned entry"),
        ]

        filtered = derivations.filter_transactions(transactions, categories, search="food")

        assert [txn.id for txn in filtered] == [2, 1]

    def test_empty_filters_return_everything_sorted(self, make_txn, categories):
        transactions = [
            make_txn(1, "expense", 1, 4, "2026-10-01"),
            make_txn(2, "income", 2, 1, "2026-10-03"),
        ]

        filtered = derivations.filter_transactions(
            transactions, categories, search="", category_id=None, type=""
        )

        assert [txn.id for txn in filtered] == [2, 1]

    def test_rows_label_dangling_categories_unknown(self, make_txn, categories):
        rows = derivations.transaction_rows(
            [make_txn(1, "expense", 5, 4, "2026-10-01"), make_txn(2, "expense", 5, 77, "2026-10-01")],
            categories,
        )

        assert [(row.category_name, row.category_color) for row in rows] == [
            ("Food & Dining", "#f59e0b"),
            ("Unknown", "#6b7280"),
        ]


class TestTrendSeries:
    def test_always_six_zero_filled_months(self, now):
        trend = derivations.trend_series([], now)

        assert trend.labels == ["May 2026", "Jun 2026", "Jul 2026", "Aug 2026", "Sep 2026", "Oct 2026"]
        assert trend.income == [0] * 6
        assert trend.expenses == [0] * 6

    def test_buckets_by_inclusive_month_range(self, make_txn, now):
        transactions = [
            make_txn(1, "income", 100, 1, "2026-08-31"),
            make_txn(2, "income", 200, 1, "2026-09-01"),
            make_txn(3, "expense", 50, 4, "2026-09-30"),
            make_txn(4, "expense", 70, 4, "2026-10-19"),
            make_txn(5, "expense", 999, 4, "2026-04-30"),
        ]

        trend = derivations.trend_series(transactions, now)

        assert trend.income == [0, 0, 0, Decimal("100"), Decimal("200"), 0]
        assert trend.expenses == [0, 0, 0, 0, Decimal("50"), Decimal("70")]

    def test_wraps_across_year_boundary(self):
        trend = derivations.trend_series([], datetime(2026, 2, 10, tzinfo=timezone.utc), months=3)

        assert trend.labels == ["Dec 2025", "Jan 2026", "Feb 2026"]


class TestCategoryBreakdown:
    def test_expense_only_grouped_by_name(self, make_txn):
        categories = [
            Category(id=1, name="Salary", type="income", color="#10b981"),
            Category(id=4, name="Food", type="expense", color="#f59e0b"),
            Category(id=11, name="Food", type="expense", color="#000000"),
            Category(id=6, name="Shopping", type="expense", color="#ec4899"),
            Category(id=7, name="Travel", type="expense", color="#06b6d4"),
        ]
        transactions = [
            make_txn(1, "income", 5000, 1, "2026-10-01"),
            make_txn(2, "expense", 30, 6, "2026-10-01"),
            make_txn(3, "expense", 20, 4, "2026-10-02"),
            make_txn(4, "expense", 15, 11, "2026-03-02"),
        ]

        breakdown = derivations.category_breakdown(transactions, categories)

        assert breakdown.labels == ["Shopping", "Food"]
        assert breakdown.data == [Decimal("30"), Decimal("35")]
        assert breakdown.colors == ["#ec4899", "#f59e0b"]
        assert "Salary" not in breakdown.labels
        assert "Travel" not in breakdown.labels

    def test_dangling_category_reported_as_unknown(self, make_txn, categories):
        breakdown = derivations.category_breakdown(
            [make_txn(1, "expense", 12, 404, "2026-10-01")], categories
        )

        assert breakdown.labels == ["Unknown"]
        assert breakdown.colors == ["#6b7280"]

    def test_empty_breakdown(self, categories):
        breakdown = derivations.category_breakdown([], categories)

        assert breakdown.labels == breakdown.data == breakdown.colors == []
