"""Database models."""

from .base import Base, TimestampMixin
from .accounting import (
    Account,
    JournalEntry,
    JournalLine,
    Customer,
    Vendor,
    Invoice,
    Payment,
)
from .project import Project, RiskLog

__all__ = [
    "Base",
    "TimestampMixin",
    "Account",
    "JournalEntry",
    "JournalLine",
    "Customer",
    "Vendor",
    "Invoice",
    "Payment",
    "Project",
    "RiskLog",
]
