"""Accounting models."""

from .chart_of_accounts import Account
from .journal_entry import JournalEntry, JournalLine
from .contacts import Customer, Vendor
from .invoice import Invoice, Payment

__all__ = [
    "Account",
    "JournalEntry",
    "JournalLine",
    "Customer",
    "Vendor",
    "Invoice",
    "Payment",
]
