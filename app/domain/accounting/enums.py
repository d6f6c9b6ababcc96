"""Accounting domain enums."""

from enum import Enum as PyEnum


class AccountType(str, PyEnum):
    """Chart of Accounts account types."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class JournalStatus(str, PyEnum):
    """Journal entry status. Draft -> Posted is one-way."""
    DRAFT = "draft"
    POSTED = "posted"


class InvoiceType(str, PyEnum):
    """Invoice direction."""
    RECEIVABLE = "receivable"  # Customer owes us
    PAYABLE = "payable"  # We owe a vendor


class InvoiceStatus(str, PyEnum):
    """Invoice status."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentStatus(str, PyEnum):
    """Payment status."""
    COMPLETED = "completed"


class PaymentMethod(str, PyEnum):
    """Accepted payment methods."""
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"
    CARD = "card"
    OTHER = "other"


class ProjectStatus(str, PyEnum):
    """Construction project status."""
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RiskLevel(str, PyEnum):
    """Project risk level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ProjectHealth(str, PyEnum):
    """Project health derived from progress and budget deviation."""
    GOOD = "good"
    POOR = "poor"
    CRITICAL = "critical"
