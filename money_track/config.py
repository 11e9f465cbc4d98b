"""Environment-driven configuration and wiring of the core services."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .models import local_now
from .notifications import Notifier
from .services import MutationService
from .storage import JSONStorage
from .store import RecordStore
from .views import ViewRefresher

DATA_DIR_ENV = "MONEY_TRACK_DATA_DIR"
DEFAULT_DATA_DIR = "data"


def resolve_data_dir(explicit: Optional[Path] = None) -> Path:
    """Explicit path first, then ``MONEY_TRACK_DATA_DIR``, then ``./data``."""
    if explicit is not None:
        return Path(explicit)
    return Path(os.getenv(DATA_DIR_ENV) or DEFAULT_DATA_DIR)


@dataclass
class Tracker:
    """Handle bundling the store with the services that read and write it."""

    store: RecordStore
    service: MutationService
    notifier: Notifier
    refresher: ViewRefresher
    clock: Callable[[], datetime] = field(default=local_now)


def open_tracker(
    data_dir: Optional[Path] = None,
    *,
    clock: Callable[[], datetime] = local_now,
) -> Tracker:
    storage = JSONStorage(resolve_data_dir(data_dir))
    store = RecordStore(storage)
    store.load()
    notifier = Notifier(clock=clock)
    refresher = ViewRefresher(store, clock=clock)
    service = MutationService(store, refresh=refresher, notifier=notifier, clock=clock)
    return Tracker(store=store, service=service, notifier=notifier, refresher=refresher, clock=clock)
