"""Reporting schemas."""

from datetime import date
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel

from app.domain.accounting.enums import InvoiceType


class StatementAccount(BaseModel):
    account_id: UUID
    code: str
    name: str
    balance: Decimal


class StatementSection(BaseModel):
    accounts: List[StatementAccount]
    total: Decimal


class BalanceSheetResponse(BaseModel):
    as_of: date
    assets: StatementSection
    liabilities: StatementSection
    equity: StatementSection
    current_earnings: Decimal
    balanced: bool


class IncomeStatementAccount(BaseModel):
    account_id: UUID
    code: str
    name: str
    amount: Decimal


class IncomeStatementSection(BaseModel):
    accounts: List[IncomeStatementAccount]
    total: Decimal


class IncomeStatementResponse(BaseModel):
    date_from: date
    date_to: date
    revenue: IncomeStatementSection
    expenses: IncomeStatementSection
    net_income: Decimal
    profit_margin: Decimal


class AgingInvoice(BaseModel):
    invoice_id: UUID
    invoice_number: str
    due_date: date
    days_past_due: int
    balance: Decimal


class AgingBucket(BaseModel):
    bucket: str
    count: int
    total: Decimal
    invoices: List[AgingInvoice]


class AgingReportResponse(BaseModel):
    invoice_type: InvoiceType
    as_of: date
    buckets: List[AgingBucket]
    total_outstanding: Decimal
