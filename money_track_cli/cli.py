"""Console interface for Money Track."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from money_track.config import Tracker, open_tracker
from money_track.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from money_track.exchange import apply_import, read_import, write_export
from money_track.models import BUDGET_PERIODS, CURRENCIES, DATE_FORMATS, RECORD_TYPES
from money_track.notifications import Notification
from money_track.samples import seed_demo_data
from money_track.services import Confirm, always_confirm
from money_track.validators import parse_optional_record_id
from money_track.views import View, render


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc
    return value


def _parse_id(value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid id '{value}'") from exc


def _prompt_confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _confirmer(args: argparse.Namespace) -> Confirm:
    return always_confirm if args.yes else _prompt_confirm


def _print_notification(notification: Notification) -> None:
    stream = sys.stderr if notification.kind == "error" else sys.stdout
    print(notification.message, file=stream)


def _format_transaction(row: Dict[str, Any]) -> str:
    return (
        f"[{row['id']}] {row['displayDate']} {row['displayAmount']:>14}  "
        f"{row['description']} ({row['category']})"
    )


def _format_budget(item: Dict[str, Any]) -> str:
    return (
        f"[{item['id']}] {item['category']} ({item['period']}): "
        f"{item['spent']['display']} of {item['budgetDisplay']} spent, {item['percentage']}"
    )


def _format_goal(item: Dict[str, Any]) -> str:
    status = "completed" if item["isCompleted"] else f"{item['daysLeft']} days left"
    return (
        f"[{item['id']}] {item['title']}: {item['progress']} "
        f"({item['remaining']['display']} remaining, due {item['targetDateDisplay']}, {status})"
    )


def _print_lines(lines: List[str], empty: str) -> None:
    if not lines:
        print(empty)
        return
    for line in lines:
        print(line)


def handle_transaction(args: argparse.Namespace, tracker: Tracker) -> None:
    service = tracker.service
    if args.command == "add":
        service.add_transaction(
            args.type,
            args.amount,
            args.description,
            args.category_id,
            args.date or tracker.clock().date().isoformat(),
        )
    elif args.command == "list":
        payload = render(
            View.TRANSACTIONS,
            tracker.store,
            tracker.clock(),
            search=args.search,
            category_id=parse_optional_record_id(args.category, "category"),
            type=args.type,
        )
        _print_lines(
            [_format_transaction(row) for row in payload["items"]], "No transactions found."
        )
    elif args.command == "delete":
        service.delete_transaction(args.id, _confirmer(args))


def handle_budget(args: argparse.Namespace, tracker: Tracker) -> None:
    service = tracker.service
    if args.command == "set":
        service.add_or_update_budget(args.category_id, args.amount, args.period)
    elif args.command == "list":
        payload = render(View.BUDGET, tracker.store, tracker.clock())
        _print_lines([_format_budget(item) for item in payload["items"]], "No budgets set.")
    elif args.command == "delete":
        service.delete_budget(args.id, _confirmer(args))


def handle_goal(args: argparse.Namespace, tracker: Tracker) -> None:
    service = tracker.service
    if args.command == "add":
        service.add_goal(
            args.title,
            args.target_amount,
            args.target_date,
            current_amount=args.current,
            description=args.description,
        )
    elif args.command == "list":
        payload = render(View.GOALS, tracker.store, tracker.clock())
        _print_lines([_format_goal(item) for item in payload["items"]], "No goals set.")
    elif args.command == "progress":
        goal = service.update_goal_progress(args.id, args.amount)
        if goal is None:
            raise RecordNotFoundError(f"Goal {args.id} not found")
        print(f"Goal {goal.id} progress: {goal.current_amount:.2f} / {goal.target_amount:.2f}")
    elif args.command == "delete":
        service.delete_goal(args.id, _confirmer(args))


def handle_category(args: argparse.Namespace, tracker: Tracker) -> None:
    service = tracker.service
    if args.command == "add":
        category = service.add_category(args.name, args.type)
        print(f"[{category.id}] {category.name} ({category.type}) {category.color}")
    elif args.command == "list":
        payload = render(View.SETTINGS, tracker.store, tracker.clock())
        _print_lines(
            [
                f"[{item['id']}] {item['name']} ({item['type']}) {item['color']}"
                for item in payload["categories"]
            ],
            "No categories defined.",
        )
    elif args.command == "delete":
        service.delete_category(args.id, _confirmer(args))


def handle_settings(args: argparse.Namespace, tracker: Tracker) -> None:
    if args.command == "set":
        tracker.service.update_settings(
            currency=args.currency, date_format=args.date_format, theme=args.theme
        )
    settings = tracker.store.settings
    print(f"Currency: {settings.currency}")
    print(f"Date format: {settings.date_format}")
    print(f"Theme: {settings.theme}")


def handle_dashboard(args: argparse.Namespace, tracker: Tracker) -> None:
    payload = render(View.DASHBOARD, tracker.store, tracker.clock())
    summary = payload["summary"]
    overview = payload["budgetOverview"]
    print(f"Income this month:   {summary['income']['display']}")
    print(f"Expenses this month: {summary['expense']['display']}")
    print(f"Net balance:         {summary['balance']['display']}")
    print(f"Savings rate:        {summary['savingsRate']}")
    print(
        f"Budget: {overview['totalBudget']['display']} total, "
        f"{overview['monthlySpent']['display']} spent, "
        f"{overview['remaining']['display']} remaining"
    )
    print("Recent transactions:")
    _print_lines(
        [_format_transaction(row) for row in payload["recentTransactions"]],
        "No transactions yet",
    )


def handle_analytics(args: argparse.Namespace, tracker: Tracker) -> None:
    payload = render(View.ANALYTICS, tracker.store, tracker.clock(), months=args.months)
    trend = payload["trend"]
    print(f"{'Month':<10} {'Income':>12} {'Expenses':>12}")
    for label, income, expense in zip(trend["labels"], trend["income"], trend["expenses"]):
        print(f"{label:<10} {income:>12} {expense:>12}")
    categories = payload["categories"]
    print("Spending by category:")
    _print_lines(
        [f"  {label}: {amount}" for label, amount in zip(categories["labels"], categories["data"])],
        "  No expenses recorded.",
    )


def handle_export(args: argparse.Namespace, tracker: Tracker) -> None:
    target = write_export(tracker.store, args.output_dir, tracker.clock(), tracker.notifier)
    print(target)


def handle_import(args: argparse.Namespace, tracker: Tracker) -> Optional[int]:
    result = read_import(args.file)
    if not apply_import(tracker.store, result, tracker.notifier, tracker.refresher):
        return 1
    return None


def handle_clear(args: argparse.Namespace, tracker: Tracker) -> None:
    tracker.service.clear_all_data(_confirmer(args))


def handle_demo(args: argparse.Namespace, tracker: Tracker) -> None:
    if seed_demo_data(tracker.store, tracker.clock().date()):
        print("Sample data added.")
    else:
        print("Collections already contain data; nothing added.")


HANDLERS: Dict[str, Callable[[argparse.Namespace, Tracker], Optional[int]]] = {
    "transaction": handle_transaction,
    "budget": handle_budget,
    "goal": handle_goal,
    "category": handle_category,
    "settings": handle_settings,
    "dashboard": handle_dashboard,
    "analytics": handle_analytics,
    "export": handle_export,
    "import": handle_import,
    "clear": handle_clear,
    "demo": handle_demo,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Money Track personal finance CLI")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory to store JSON data (default: $MONEY_TRACK_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "-y", "--yes", action="store_true", help="Skip confirmation prompts for deletions"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    txn_parser = subparsers.add_parser("transaction", help="Manage transactions")
    txn_sub = txn_parser.add_subparsers(dest="command", required=True)

    txn_add = txn_sub.add_parser("add", help="Record income or an expense")
    txn_add.add_argument("type", choices=sorted(RECORD_TYPES))
    txn_add.add_argument("amount")
    txn_add.add_argument("description")
    txn_add.add_argument("category_id")
    txn_add.add_argument("--date", type=_parse_date, help="Defaults to today")

    txn_list = txn_sub.add_parser("list", help="List transactions, newest first")
    txn_list.add_argument("--search")
    txn_list.add_argument("--category")
    txn_list.add_argument("--type", choices=sorted(RECORD_TYPES))

    txn_delete = txn_sub.add_parser("delete", help="Delete a transaction")
    txn_delete.add_argument("id", type=_parse_id)

    budget_parser = subparsers.add_parser("budget", help="Manage budgets")
    budget_sub = budget_parser.add_subparsers(dest="command", required=True)

    budget_set = budget_sub.add_parser("set", help="Create or update a category budget")
    budget_set.add_argument("category_id")
    budget_set.add_argument("amount")
    budget_set.add_argument("--period", default="monthly", choices=sorted(BUDGET_PERIODS))

    budget_sub.add_parser("list", help="Show budget utilisation for this month")

    budget_delete = budget_sub.add_parser("delete", help="Delete a budget")
    budget_delete.add_argument("id", type=_parse_id)

    goal_parser = subparsers.add_parser("goal", help="Manage savings goals")
    goal_sub = goal_parser.add_subparsers(dest="command", required=True)

    goal_add = goal_sub.add_parser("add", help="Create a savings goal")
    goal_add.add_argument("title")
    goal_add.add_argument("target_amount")
    goal_add.add_argument("target_date", type=_parse_date)
    goal_add.add_argument("--current", default="0")
    goal_add.add_argument("--description", default="")

    goal_sub.add_parser("list", help="Show goal progress")

    goal_progress = goal_sub.add_parser("progress", help="Add to a goal's saved amount")
    goal_progress.add_argument("id", type=_parse_id)
    goal_progress.add_argument("amount")

    goal_delete = goal_sub.add_parser("delete", help="Delete a goal")
    goal_delete.add_argument("id", type=_parse_id)

    category_parser = subparsers.add_parser("category", help="Manage categories")
    category_sub = category_parser.add_subparsers(dest="command", required=True)

    category_add = category_sub.add_parser("add", help="Add a category")
    category_add.add_argument("name")
    category_add.add_argument("type", choices=sorted(RECORD_TYPES))

    category_sub.add_parser("list", help="List categories")

    category_delete = category_sub.add_parser(
        "delete", help="Delete a category and its transactions and budgets"
    )
    category_delete.add_argument("id", type=_parse_id)

    settings_parser = subparsers.add_parser("settings", help="Show or change settings")
    settings_sub = settings_parser.add_subparsers(dest="command", required=True)
    settings_sub.add_parser("show", help="Show current settings")
    settings_set = settings_sub.add_parser("set", help="Change settings")
    settings_set.add_argument("--currency", choices=sorted(CURRENCIES))
    settings_set.add_argument("--date-format", choices=sorted(DATE_FORMATS))
    settings_set.add_argument("--theme")

    subparsers.add_parser("dashboard", help="Monthly summary and recent transactions")

    analytics_parser = subparsers.add_parser("analytics", help="Income/expense trend")
    analytics_parser.add_argument("--months", type=int, default=6)

    export_parser = subparsers.add_parser("export", help="Export all data to a JSON file")
    export_parser.add_argument("--output-dir", type=Path, default=Path("."))

    import_parser = subparsers.add_parser("import", help="Replace all data from an export file")
    import_parser.add_argument("file", type=Path)

    subparsers.add_parser("clear", help="Delete all data and reset settings")
    subparsers.add_parser("demo", help="Add sample data to empty collections")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        tracker = open_tracker(args.data_dir)
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    tracker.notifier.subscribe(_print_notification)

    handler = HANDLERS.get(args.entity)
    if handler is None:  # pragma: no cover - argparse should prevent this
        parser.error(f"Unknown entity: {args.entity}")
        return 2

    try:
        status = handler(args, tracker)
    except ValidationError as exc:
        tracker.notifier.error(f"Validation error: {exc}")
        return 1
    except RecordNotFoundError as exc:
        tracker.notifier.error(str(exc))
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return status or 0


if __name__ == "__main__":
    raise SystemExit(main())
