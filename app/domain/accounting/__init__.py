"""Accounting domain module."""

from .enums import (
    AccountType,
    JournalStatus,
    InvoiceType,
    InvoiceStatus,
    PaymentStatus,
    PaymentMethod,
    ProjectStatus,
    RiskLevel,
)
from .exceptions import (
    LedgerError,
    ValidationError,
    UnbalancedEntryError,
    InsufficientLinesError,
    InvalidLineError,
    InactiveAccountError,
    ConflictError,
    DuplicateCodeError,
    AlreadyPostedError,
    OverpaymentRejectedError,
    NotFoundError,
)

__all__ = [
    "AccountType",
    "JournalStatus",
    "InvoiceType",
    "InvoiceStatus",
    "PaymentStatus",
    "PaymentMethod",
    "ProjectStatus",
    "RiskLevel",
    "LedgerError",
    "ValidationError",
    "UnbalancedEntryError",
    "InsufficientLinesError",
    "InvalidLineError",
    "InactiveAccountError",
    "ConflictError",
    "DuplicateCodeError",
    "AlreadyPostedError",
    "OverpaymentRejectedError",
    "NotFoundError",
]
