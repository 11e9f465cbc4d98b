import random
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from money_track.models import Budget, Category, Goal, Transaction
from money_track.notifications import Notifier
from money_track.services import MutationService
from money_track.storage import JSONStorage
from money_track.store import RecordStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FixedIds:
    """Id clock that never advances, to exercise the store's monotonic fallback."""

    def __call__(self) -> int:
        return 1_700_000_000_000


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def storage(tmp_path):
    return JSONStorage(tmp_path / "data")


@pytest.fixture
def store(storage):
    record_store = RecordStore(storage, id_clock=FixedIds())
    record_store.load()
    return record_store


@pytest.fixture
def notifier():
    return Notifier(clock=lambda: NOW)


@pytest.fixture
def refreshes():
    return []


@pytest.fixture
def service(store, notifier, refreshes):
    return MutationService(
        store,
        refresh=lambda *views: refreshes.append(views),
        notifier=notifier,
        clock=lambda: NOW,
        rng=random.Random(7),
    )


@pytest.fixture
def make_txn():
    def factory(id, type, amount, category_id, on, description="Sample"):
        return Transaction(
            id=id,
            type=type,
            amount=Decimal(str(amount)),
            description=description,
            category_id=category_id,
            date=on if isinstance(on, date) else date.fromisoformat(on),
            created_at=NOW,
        )

    return factory


@pytest.fixture
def make_budget():
    def factory(id, category_id, amount, period="monthly"):
        return Budget(
            id=id,
            category_id=category_id,
            amount=Decimal(str(amount)),
            period=period,
            created_at=NOW,
        )

    return factory


@pytest.fixture
def make_goal():
    def factory(id, current, target, target_date="2027-10-19", title="Emergency Fund"):
        return Goal(
            id=id,
            title=title,
            target_amount=Decimal(str(target)),
            current_amount=Decimal(str(current)),
            target_date=date.fromisoformat(target_date),
            created_at=NOW,
        )

    return factory


@pytest.fixture
def categories():
    return [
        Category(id=1, name="Salary", type="income", color="#10b981"),
        Category(id=4, name="Food & Dining", type="expense", color="#f59e0b"),
        Category(id=5, name="Transportation", type="expense", color="#ef4444"),
        Category(id=8, name="Bills & Utilities", type="expense", color="#84cc16"),
    ]
