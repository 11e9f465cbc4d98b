"""Export the store to a JSON file and import it back."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .exceptions import PersistenceError
from .models import Snapshot, isoformat_utc, local_now
from .notifications import Notifier
from .store import RecordStore
from .views import View

logger = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid file format"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of parsing an export file: either a snapshot or an error message."""

    snapshot: Optional[Snapshot] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None and self.error is None


def export_payload(store: RecordStore, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or local_now()
    payload = store.to_snapshot()
    payload["exportDate"] = isoformat_utc(now)
    return payload


def export_filename(now: Optional[datetime] = None) -> str:
    now = now or local_now()
    return f"money-track-export-{now.date().isoformat()}.json"


def write_export(
    store: RecordStore,
    directory: Path,
    now: Optional[datetime] = None,
    notifier: Optional[Notifier] = None,
) -> Path:
    now = now or local_now()
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / export_filename(now)
    try:
        with target.open("w", encoding="utf-8") as handle:
            json.dump(export_payload(store, now), handle, indent=2, ensure_ascii=False)
    except OSError as exc:
        raise PersistenceError(f"Unable to write export to {target}") from exc
    logger.info("Exported snapshot to %s", target)
    if notifier is not None:
        notifier.success("Data exported successfully!")
    return target


def parse_import(text: str) -> ImportResult:
    try:
        payload = json.loads(text)
    except (TypeError, ValueError) as exc:
        logger.info("Rejected import: %s", exc)
        return ImportResult(error=INVALID_FORMAT)
    if not isinstance(payload, dict):
        return ImportResult(error=INVALID_FORMAT)
    try:
        snapshot = Snapshot.from_dict(payload)
    except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
        logger.info("Rejected import: %s", exc)
        return ImportResult(error=INVALID_FORMAT)
    return ImportResult(snapshot=snapshot)


def read_import(path: Path) -> ImportResult:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.info("Unable to read import file %s: %s", path, exc)
        return ImportResult(error=INVALID_FORMAT)
    return parse_import(text)


def apply_import(
    store: RecordStore,
    result: ImportResult,
    notifier: Optional[Notifier] = None,
    refresh: Optional[Callable[..., None]] = None,
) -> bool:
    """Replace the store contents with an imported snapshot.

    A failed parse only posts an error notification; the store is untouched.
    """
    if not result.ok:
        if notifier is not None:
            notifier.error(result.error or INVALID_FORMAT)
        return False
    store.replace(result.snapshot)
    store.save()
    if refresh is not None:
        refresh(View.DASHBOARD, View.TRANSACTIONS, View.BUDGET, View.GOALS, View.SETTINGS)
    if notifier is not None:
        notifier.success("Data imported successfully!")
    return True
