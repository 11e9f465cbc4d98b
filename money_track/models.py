"""Data models for the Money Track domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

__all__ = [
    "Budget",
    "Category",
    "Goal",
    "Settings",
    "Snapshot",
    "Transaction",
    "DEFAULT_CATEGORIES",
    "CATEGORY_PALETTE",
    "CURRENCIES",
    "DATE_FORMATS",
    "BUDGET_PERIODS",
    "RECORD_TYPES",
    "isoformat_utc",
    "parse_datetime",
    "parse_date",
    "local_now",
]

RECORD_TYPES = {"income", "expense"}
BUDGET_PERIODS = {"weekly", "monthly", "yearly"}
CURRENCIES = {"INR", "EUR", "GBP", "USD"}
DATE_FORMATS = {"MM/DD/YYYY", "DD/MM/YYYY", "YYYY-MM-DD"}

CATEGORY_PALETTE = (
    "#ef4444",
    "#f97316",
    "#f59e0b",
    "#eab308",
    "#84cc16",
    "#22c55e",
    "#10b981",
    "#14b8a6",
    "#06b6d4",
    "#0ea5e9",
    "#3b82f6",
    "#6366f1",
    "#8b5cf6",
    "#a855f7",
    "#d946ef",
    "#ec4899",
    "#f43f5e",
)


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_now() -> datetime:
    """Current time in the machine's local timezone, which is what record dates are written in."""
    return datetime.now().astimezone()


def parse_date(value: Any) -> date:
    """Parse a calendar date from a ``date``, ``datetime`` or ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Exports from the browser app occasionally carry a full timestamp.
    return date.fromisoformat(text[:10])


def _amount(value: Any) -> Decimal:
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number, got {value!r}")
    return amount


def _created_at(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now(timezone.utc)
    return parse_datetime(value)


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    type: str
    color: str = "#6b7280"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            type=str(data["type"]),
            color=str(data.get("color") or "#6b7280"),
        )


@dataclass(frozen=True)
class Transaction:
    id: int
    type: str
    amount: Decimal
    description: str
    category_id: int
    date: date
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the transaction to JSON-friendly natives."""
        return {
            "id": self.id,
            "type": self.type,
            "amount": f"{self.amount:.2f}",
            "description": self.description,
            "categoryId": self.category_id,
            "date": self.date.isoformat(),
            "createdAt": isoformat_utc(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Hydrate a Transaction from JSON-native data."""
        return cls(
            id=int(data["id"]),
            type=str(data["type"]),
            amount=_amount(data["amount"]),
            description=str(data["description"]),
            category_id=int(data["categoryId"]),
            date=parse_date(data["date"]),
            created_at=_created_at(data.get("createdAt")),
        )


@dataclass(frozen=True)
class Budget:
    id: int
    category_id: int
    amount: Decimal
    period: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "categoryId": self.category_id,
            "amount": f"{self.amount:.2f}",
            "period": self.period,
            "createdAt": isoformat_utc(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Budget":
        return cls(
            id=int(data["id"]),
            category_id=int(data["categoryId"]),
            amount=_amount(data["amount"]),
            period=str(data.get("period") or "monthly"),
            created_at=_created_at(data.get("createdAt")),
        )


@dataclass(frozen=True)
class Goal:
    id: int
    title: str
    target_amount: Decimal
    current_amount: Decimal
    target_date: date
    created_at: datetime
    description: str = ""

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "targetAmount": f"{self.target_amount:.2f}",
            "currentAmount": f"{self.current_amount:.2f}",
            "targetDate": self.target_date.isoformat(),
            "description": self.description,
            "createdAt": isoformat_utc(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Goal":
        return cls(
            id=int(data["id"]),
            title=str(data["title"]),
            target_amount=_amount(data["targetAmount"]),
            current_amount=_amount(data.get("currentAmount") or 0),
            target_date=parse_date(data["targetDate"]),
            created_at=_created_at(data.get("createdAt")),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class Settings:
    currency: str = "INR"
    date_format: str = "DD/MM/YYYY"
    theme: str = "light"

    def to_dict(self) -> Dict[str, Any]:
        return {"currency": self.currency, "dateFormat": self.date_format, "theme": self.theme}

    def merged(self, payload: Optional[Dict[str, Any]]) -> "Settings":
        """Overlay saved settings on top of these, key by key."""
        if not payload:
            return self
        return Settings(
            currency=str(payload.get("currency", self.currency)),
            date_format=str(payload.get("dateFormat", self.date_format)),
            theme=str(payload.get("theme", self.theme)),
        )


DEFAULT_CATEGORIES: List[Category] = [
    Category(id=1, name="Salary", type="income", color="#10b981"),
    Category(id=2, name="Freelance", type="income", color="#3b82f6"),
    Category(id=3, name="Investment", type="income", color="#8b5cf6"),
    Category(id=4, name="Food & Dining", type="expense", color="#f59e0b"),
    Category(id=5, name="Transportation", type="expense", color="#ef4444"),
    Category(id=6, name="Shopping", type="expense", color="#ec4899"),
    Category(id=7, name="Entertainment", type="expense", color="#06b6d4"),
    Category(id=8, name="Bills & Utilities", type="expense", color="#84cc16"),
    Category(id=9, name="Healthcare", type="expense", color="#f97316"),
    Category(id=10, name="Education", type="expense", color="#6366f1"),
]


@dataclass
class Snapshot:
    """The full persisted state as one unit."""

    transactions: List[Transaction] = field(default_factory=list)
    budgets: List[Budget] = field(default_factory=list)
    goals: List[Goal] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    settings: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactions": [item.to_dict() for item in self.transactions],
            "budgets": [item.to_dict() for item in self.budgets],
            "goals": [item.to_dict() for item in self.goals],
            "categories": [item.to_dict() for item in self.categories],
            "settings": dict(self.settings or {}),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        """Hydrate a snapshot; absent collections default to empty."""
        settings = data.get("settings")
        return cls(
            transactions=[Transaction.from_dict(item) for item in _records(data, "transactions")],
            budgets=[Budget.from_dict(item) for item in _records(data, "budgets")],
            goals=[Goal.from_dict(item) for item in _records(data, "goals")],
            categories=[Category.from_dict(item) for item in _records(data, "categories")],
            settings=dict(settings) if isinstance(settings, dict) else None,
        )


def _records(data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    raw = data.get(key) or []
    if not isinstance(raw, list):
        raise TypeError(f"{key} must be a list")
    for item in raw:
        if not isinstance(item, dict):
            raise TypeError(f"{key} entries must be objects")
    return raw
