"""Persistence utilities for the Money Track core."""

from __future__ import annotations

import itertools
import json
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import PersistenceError


class JSONStorage:
    """File-backed key-value store with crash-safe writes.

    Each key maps to one JSON document at ``<base_path>/<key>.json``.
    """

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        if not isinstance(payload, dict):
            raise PersistenceError(f"Expected object payload in {path}")
        return payload

    def save(self, key: str, payload: Dict[str, Any]) -> None:
        path = self._path_for(key)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)
                handle.flush()
        except (OSError, TypeError, ValueError) as exc:
            temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Unable to write to {temp_path}") from exc
        # replace() is atomic on POSIX, so readers never see a half-written snapshot.
        temp_path.replace(path)

    def quarantine(self, key: str) -> Optional[Path]:
        """Move an unreadable document to ``<key>.json.corrupt`` and return its new path.

        Earlier quarantined copies are kept; later ones get a numeric suffix.
        """
        path = self._path_for(key)
        if not path.exists():
            return None
        target = path.with_suffix(path.suffix + ".corrupt")
        for counter in itertools.count(1):
            if not target.exists():
                break
            target = path.with_suffix(f"{path.suffix}.corrupt{counter}")
        try:
            path.replace(target)
        except OSError as exc:
            raise PersistenceError(f"Unable to move {path} aside") from exc
        return target

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self._base_path / f"{key}.json"

    @property
    def base_path(self) -> Path:
        return self._base_path
