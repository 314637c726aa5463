"""
schemas.py — Record data contracts (pydantic v2).

Defines:
  - Category, TransactionKind, RiskProfile, MediaKind, DocumentStatus enums
  - ExpenseRecord, BudgetRecord, InvestmentGoal, DocumentRecord (frozen records)
  - BankStatementExtract, BillExtract (synthetic document extraction output)
  - ExpenseForm, BudgetForm, GoalForm (free-text form payloads from the views)

Records are frozen: "updates" are model_copy() + replace in the owning collection.
id is Optional on every record; RecordCollection.add() assigns one when absent.
"""
from __future__ import annotations

import datetime as dt
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Category: closed set, display metadata fixed per member
# ---------------------------------------------------------------------------

class CategoryDisplay(NamedTuple):
    icon: str          # lucide icon name used by the views
    color: str         # palette colour for badges / progress bars
    chart_color: str   # hex colour for the pie chart


class Category(str, Enum):
    food = "Food"
    transport = "Transport"
    shopping = "Shopping"
    bills = "Bills"
    entertainment = "Entertainment"
    salary = "Salary"

    @property
    def display(self) -> CategoryDisplay:
        return _CATEGORY_DISPLAY[self]

    @classmethod
    def from_text(cls, text: Optional[str]) -> Optional["Category"]:
        """Case-insensitive lookup by display name. None for anything unknown."""
        if not text:
            return None
        needle = text.strip().lower()
        for member in cls:
            if member.value.lower() == needle:
                return member
        return None


_CATEGORY_DISPLAY: dict[Category, CategoryDisplay] = {
    Category.food:          CategoryDisplay("Coffee",       "orange", "#3B82F6"),
    Category.transport:     CategoryDisplay("Car",          "blue",   "#10B981"),
    Category.shopping:      CategoryDisplay("ShoppingCart", "purple", "#EF4444"),
    Category.bills:         CategoryDisplay("Home",         "green",  "#F59E0B"),
    Category.entertainment: CategoryDisplay("Gamepad2",     "pink",   "#8B5CF6"),
    Category.salary:        CategoryDisplay("DollarSign",   "indigo", "#6366F1"),
}


class TransactionKind(str, Enum):
    income = "income"
    expense = "expense"


class RiskProfile(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class MediaKind(str, Enum):
    pdf = "pdf"
    image = "image"


class DocumentStatus(str, Enum):
    processing = "processing"
    completed = "completed"
    error = "error"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class ExpenseRecord(BaseModel):
    """A single income or expense transaction. amount is always positive; kind carries the sign."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = None
    amount: float = Field(..., gt=0)
    category: Category
    description: str
    date: dt.date = Field(default_factory=dt.date.today)
    kind: TransactionKind = TransactionKind.expense


class BudgetRecord(BaseModel):
    """
    Monthly limit for one category.
    spent_amount is maintained independently of the expense collection and
    may exceed budgeted_amount; over budget is a state, not an error.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = None
    category: Category
    budgeted_amount: float = Field(..., gt=0)
    spent_amount: float = Field(default=0, ge=0)


class InvestmentGoal(BaseModel):
    """Savings goal. current_amount may already exceed target_amount."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = None
    name: str
    target_amount: float = Field(..., gt=0)
    current_amount: float = Field(default=0, ge=0)
    timeframe_months: int = Field(..., gt=0)
    risk_profile: RiskProfile = RiskProfile.medium


class BankStatementExtract(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    transactions: int
    total_income: float
    total_expenses: float
    categories: List[str]


class BillExtract(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    amount: float
    due_date: date
    category: str
    vendor: str


ExtractedData = Union[BankStatementExtract, BillExtract]


class DocumentRecord(BaseModel):
    """
    Uploaded document. Lifecycle: processing → completed | error (both terminal).
    extracted_data is only ever set on completed documents.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: Optional[str] = None
    name: str
    media_kind: MediaKind
    size_bytes: int = Field(..., ge=0)
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: DocumentStatus = DocumentStatus.processing
    extracted_data: Optional[ExtractedData] = None
    error_message: Optional[str] = None


# ---------------------------------------------------------------------------
# Forms: raw view input, every numeric field is free text
# ---------------------------------------------------------------------------

FormNumber = Optional[Union[float, str]]
FormText = Optional[str]


def _enum_or_default(enum_cls, value, default):
    """Selects arrive as free text too: blank or unknown keeps the form default."""
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip().lower()
    for member in enum_cls:
        if member.value == text:
            return member
    return default


class ExpenseForm(BaseModel):
    """
    Every field may be absent or null; the aggregator decides what is
    missing. A bad field never fails the request, it makes the add a no-op.
    """
    model_config = ConfigDict(extra="forbid")

    amount: FormNumber = None
    category: FormText = None
    description: FormText = None
    date: FormText = None          # ISO date; empty → today
    kind: TransactionKind = TransactionKind.expense

    @field_validator("kind", mode="before")
    @classmethod
    def _coerce_kind(cls, value):
        return _enum_or_default(TransactionKind, value, TransactionKind.expense)


class BudgetForm(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: FormText = None
    budgeted: FormNumber = None


class GoalForm(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: FormText = None
    target_amount: FormNumber = None
    current_amount: FormNumber = None
    timeframe: FormNumber = None   # months
    risk_profile: RiskProfile = RiskProfile.medium

    @field_validator("risk_profile", mode="before")
    @classmethod
    def _coerce_risk(cls, value):
        return _enum_or_default(RiskProfile, value, RiskProfile.medium)


__all__ = [
    "Category",
    "CategoryDisplay",
    "TransactionKind",
    "RiskProfile",
    "MediaKind",
    "DocumentStatus",
    "ExpenseRecord",
    "BudgetRecord",
    "InvestmentGoal",
    "BankStatementExtract",
    "BillExtract",
    "ExtractedData",
    "DocumentRecord",
    "ExpenseForm",
    "BudgetForm",
    "GoalForm",
]
