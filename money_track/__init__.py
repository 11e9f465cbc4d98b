"""Core business logic package for the Money Track personal finance tracker."""

from .config import Tracker, open_tracker
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import Budget, Category, Goal, Settings, Snapshot, Transaction
from .notifications import Notification, Notifier
from .services import MutationService
from .storage import JSONStorage
from .store import RecordStore
from .views import View, ViewRefresher

__all__ = [
    "Budget",
    "Category",
    "Goal",
    "Settings",
    "Snapshot",
    "Transaction",
    "MutationService",
    "Notification",
    "Notifier",
    "JSONStorage",
    "RecordStore",
    "Tracker",
    "View",
    "ViewRefresher",
    "open_tracker",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
