"""Pydantic schemas for API requests and responses."""

from .common import Pagination
from .ledger import (
    AccountCreate,
    AccountUpdate,
    AccountResponse,
    JournalEntryCreate,
    JournalEntryResponse,
    JournalEntryListResponse,
)
from .invoices import (
    CounterpartyCreate,
    CounterpartyResponse,
    InvoiceCreate,
    InvoiceResponse,
    InvoiceDetailResponse,
    PaymentCreate,
    PaymentResponse,
)
from .insights import (
    ProjectCreate,
    ProjectResponse,
    RiskResponse,
    CashFlowForecastResponse,
    ProjectProgressInsightResponse,
    DashboardInsightsResponse,
)

__all__ = [
    "Pagination",
    "AccountCreate",
    "AccountUpdate",
    "AccountResponse",
    "JournalEntryCreate",
    "JournalEntryResponse",
    "JournalEntryListResponse",
    "CounterpartyCreate",
    "CounterpartyResponse",
    "InvoiceCreate",
    "InvoiceResponse",
    "InvoiceDetailResponse",
    "PaymentCreate",
    "PaymentResponse",
    "ProjectCreate",
    "ProjectResponse",
    "RiskResponse",
    "CashFlowForecastResponse",
    "ProjectProgressInsightResponse",
    "DashboardInsightsResponse",
]
