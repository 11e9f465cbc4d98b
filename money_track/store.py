"""In-memory record collections backed by a single persisted snapshot."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .exceptions import PersistenceError
from .models import (
    DEFAULT_CATEGORIES,
    Budget,
    Category,
    Goal,
    Settings,
    Snapshot,
    Transaction,
)
from .storage import JSONStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "moneyTrackData"


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class RecordStore:
    """Holds transactions, budgets, goals, categories and settings.

    The store has no behaviour beyond storage. Callers mutate the public
    lists directly and call :meth:`save` to flush the whole snapshot.
    """

    def __init__(
        self,
        storage: JSONStorage,
        key: str = STORAGE_KEY,
        *,
        id_clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._storage = storage
        self._key = key
        self._id_clock = id_clock
        self._last_id = 0
        self.transactions: List[Transaction] = []
        self.budgets: List[Budget] = []
        self.goals: List[Goal] = []
        self.categories: List[Category] = []
        self.settings = Settings()

    def load(self) -> None:
        """Hydrate from persistence, falling back to defaults when nothing usable is stored."""
        snapshot = self._read_snapshot()
        self.transactions = snapshot.transactions
        self.budgets = snapshot.budgets
        self.goals = snapshot.goals
        self.categories = snapshot.categories
        self.settings = Settings().merged(snapshot.settings)

        if not self.categories:
            logger.info("No categories stored; seeding %d defaults", len(DEFAULT_CATEGORIES))
            self.categories = list(DEFAULT_CATEGORIES)
            self.save()

    def save(self) -> None:
        self._storage.save(self._key, self.to_snapshot())

    def to_snapshot(self) -> Dict[str, Any]:
        snapshot = Snapshot(
            transactions=self.transactions,
            budgets=self.budgets,
            goals=self.goals,
            categories=self.categories,
            settings=self.settings.to_dict(),
        )
        return snapshot.to_dict()

    def replace(self, snapshot: Snapshot) -> None:
        """Swap all four collections wholesale and merge the snapshot's settings."""
        self.transactions = list(snapshot.transactions)
        self.budgets = list(snapshot.budgets)
        self.goals = list(snapshot.goals)
        self.categories = list(snapshot.categories)
        self.settings = self.settings.merged(snapshot.settings)

    def reset(self) -> None:
        self.transactions = []
        self.budgets = []
        self.goals = []
        self.categories = []
        self.settings = Settings()

    def next_id(self) -> int:
        """Return a fresh timestamp-based id that is never reissued by this store."""
        candidate = max(self._id_clock(), self._last_id + 1)
        self._last_id = candidate
        return candidate

    def category_for(self, category_id: int) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def _read_snapshot(self) -> Snapshot:
        try:
            payload = self._storage.load(self._key)
        except PersistenceError as exc:
            logger.warning("Ignoring unreadable snapshot: %s", exc)
            self._set_aside()
            return Snapshot()
        if payload is None:
            return Snapshot()
        try:
            return Snapshot.from_dict(payload)
        except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
            logger.warning("Ignoring malformed snapshot %r: %s", self._key, exc)
            self._set_aside()
            return Snapshot()

    def _set_aside(self) -> None:
        # Seeding defaults saves over the key, so the bad document must move first.
        moved = self._storage.quarantine(self._key)
        if moved is not None:
            logger.warning("Moved unreadable snapshot to %s", moved)
