"""Demonstration records for a first run."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from .models import Budget, Goal, Transaction, local_now
from .store import RecordStore


def seed_demo_data(store: RecordStore, today: Optional[date] = None) -> bool:
    """Fill each empty collection with sample records; returns True if anything was added."""
    created = local_now()
    today = today or created.date()
    changed = False

    if not store.transactions:
        samples = [
            ("income", "5000", "Monthly Salary", 1),
            ("expense", "1200", "Rent Payment", 8),
            ("expense", "300", "Grocery Shopping", 4),
            ("expense", "150", "Gas Station", 5),
            ("income", "800", "Freelance Project", 2),
        ]
        for type, amount, description, category_id in samples:
            store.transactions.append(
                Transaction(
                    id=store.next_id(),
                    type=type,
                    amount=Decimal(amount),
                    description=description,
                    category_id=category_id,
                    date=today,
                    created_at=created,
                )
            )
        changed = True

    if not store.budgets:
        for category_id, amount in ((4, "500"), (5, "200"), (6, "300")):
            store.budgets.append(
                Budget(
                    id=store.next_id(),
                    category_id=category_id,
                    amount=Decimal(amount),
                    period="monthly",
                    created_at=created,
                )
            )
        changed = True

    if not store.goals:
        store.goals.append(
            Goal(
                id=store.next_id(),
                title="Emergency Fund",
                target_amount=Decimal("10000"),
                current_amount=Decimal("2500"),
                target_date=today + timedelta(days=365),
                created_at=created,
                description="Build an emergency fund for unexpected expenses",
            )
        )
        store.goals.append(
            Goal(
                id=store.next_id(),
                title="Vacation Fund",
                target_amount=Decimal("3000"),
                current_amount=Decimal("800"),
                target_date=today + timedelta(days=180),
                created_at=created,
                description="Save for a dream vacation",
            )
        )
        changed = True

    if changed:
        store.save()
    return changed
