"""Reporting service for financial statements, cash flow history and aging."""

import logging
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Any

from sqlalchemy.orm import Session
from sqlalchemy import func, case

from app.core.config import get_settings
from app.models.accounting import (
    Account,
    Invoice,
    JournalEntry,
    JournalLine,
    Payment,
)
from app.domain.accounting.enums import (
    AccountType,
    InvoiceStatus,
    InvoiceType,
    JournalStatus,
)
from app.domain.accounting.posting_rules import NORMAL_BALANCE_SIGN
from app.services.cash_flow_forecaster import MonthlyCashFlow

logger = logging.getLogger(__name__)

AGING_BUCKETS = ("current", "0-30", "31-60", "61-90", "90+")


def get_balance_sheet(db: Session, as_of: date | None = None) -> Dict[str, Any]:
    """
    Generate Balance Sheet from posted journal lines dated on or before ``as_of``.

    Revenue less expenses not yet closed to equity is shown as
    "Current Earnings" inside the equity section so the sheet balances.

    Returns:
        Dict with assets, liabilities, equity sections, totals and a
        ``balanced`` flag
    """
    as_of = as_of or date.today()

    posted = (
        db.query(
            JournalLine.account_id.label("account_id"),
            func.sum(JournalLine.debit - JournalLine.credit).label("net_debit"),
        )
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .filter(
            JournalEntry.status == JournalStatus.POSTED,
            JournalEntry.entry_date <= as_of,
        )
        .group_by(JournalLine.account_id)
        .subquery()
    )

    rows = (
        db.query(Account, posted.c.net_debit)
        .outerjoin(posted, posted.c.account_id == Account.id)
        .order_by(Account.account_type, Account.code)
        .all()
    )

    sections: Dict[AccountType, List[Dict[str, Any]]] = {
        AccountType.ASSET: [],
        AccountType.LIABILITY: [],
        AccountType.EQUITY: [],
    }
    totals: Dict[AccountType, Decimal] = {t: Decimal("0.00") for t in AccountType}

    for account, net_debit in rows:
        balance = (
            Decimal(str(net_debit or 0)) * NORMAL_BALANCE_SIGN[account.account_type]
        ).quantize(Decimal("0.01"))
        # Deactivated accounts only show while they still carry a balance
        if not account.is_active and not balance:
            continue
        totals[account.account_type] += balance
        if account.account_type in sections:
            sections[account.account_type].append({
                "account_id": account.id,
                "code": account.code,
                "name": account.name,
                "balance": balance,
            })

    current_earnings = totals[AccountType.REVENUE] - totals[AccountType.EXPENSE]
    total_equity = totals[AccountType.EQUITY] + current_earnings
    liabilities_plus_equity = totals[AccountType.LIABILITY] + total_equity

    return {
        "as_of": as_of,
        "assets": {"accounts": sections[AccountType.ASSET], "total": totals[AccountType.ASSET]},
        "liabilities": {"accounts": sections[AccountType.LIABILITY], "total": totals[AccountType.LIABILITY]},
        "equity": {"accounts": sections[AccountType.EQUITY], "total": total_equity},
        "current_earnings": current_earnings,
        "balanced": abs(totals[AccountType.ASSET] - liabilities_plus_equity) < get_settings().balance_tolerance,
    }


def get_income_statement(db: Session, date_from: date, date_to: date) -> Dict[str, Any]:
    """
    Generate Income Statement from posted journal lines in a date range.

    Returns:
        Dict with revenue and expense accounts, totals, net income and
        profit margin (percent of revenue)
    """
    net_amount = func.sum(
        case(
            (Account.account_type == AccountType.REVENUE, JournalLine.credit - JournalLine.debit),
            (Account.account_type == AccountType.EXPENSE, JournalLine.debit - JournalLine.credit),
            else_=0,
        )
    ).label("amount")

    results = (
        db.query(
            Account.id.label("account_id"),
            Account.code,
            Account.name,
            Account.account_type,
            net_amount,
        )
        .join(JournalLine, JournalLine.account_id == Account.id)
        .join(JournalEntry, JournalEntry.id == JournalLine.journal_entry_id)
        .filter(
            JournalEntry.status == JournalStatus.POSTED,
            JournalEntry.entry_date >= date_from,
            JournalEntry.entry_date <= date_to,
            Account.account_type.in_([AccountType.REVENUE, AccountType.EXPENSE]),
        )
        .group_by(Account.id, Account.code, Account.name, Account.account_type)
        .order_by(Account.code)
        .all()
    )

    revenue: List[Dict[str, Any]] = []
    expenses: List[Dict[str, Any]] = []
    for row in results:
        line = {
            "account_id": row.account_id,
            "code": row.code,
            "name": row.name,
            "amount": Decimal(str(row.amount or 0)).quantize(Decimal("0.01")),
        }
        if row.account_type == AccountType.REVENUE:
            revenue.append(line)
        else:
            expenses.append(line)

    total_revenue = sum((r["amount"] for r in revenue), Decimal("0.00"))
    total_expenses = sum((e["amount"] for e in expenses), Decimal("0.00"))
    net_income = total_revenue - total_expenses
    profit_margin = (
        (net_income / total_revenue * 100).quantize(Decimal("0.01"))
        if total_revenue > 0
        else Decimal("0.00")
    )

    return {
        "date_from": date_from,
        "date_to": date_to,
        "revenue": {"accounts": revenue, "total": total_revenue},
        "expenses": {"accounts": expenses, "total": total_expenses},
        "net_income": net_income,
        "profit_margin": profit_margin,
    }


def get_monthly_cash_flow(
    db: Session,
    months: int = 6,
    as_of: date | None = None,
) -> List[MonthlyCashFlow]:
    """
    Monthly cash movement from recorded payments, most recent month first.

    Payments on receivable invoices count as inflow, payments on payable
    invoices as outflow. Only months with at least one payment are returned,
    at most ``months`` of them, up to and including ``as_of``'s month.
    """
    as_of = as_of or date.today()

    rows = (
        db.query(Payment.payment_date, Payment.amount, Invoice.invoice_type)
        .join(Invoice, Invoice.id == Payment.invoice_id)
        .filter(Payment.payment_date <= as_of)
        .order_by(Payment.payment_date.desc())
        .all()
    )

    # Grouped in Python so the query stays portable across databases
    buckets: "OrderedDict[date, Dict[str, Decimal]]" = OrderedDict()
    for payment_date, amount, invoice_type in rows:
        month = payment_date.replace(day=1)
        if month not in buckets:
            if len(buckets) == months:
                break
            buckets[month] = {"inflow": Decimal("0.00"), "outflow": Decimal("0.00")}
        key = "inflow" if invoice_type == InvoiceType.RECEIVABLE else "outflow"
        buckets[month][key] += Decimal(amount)

    return [
        MonthlyCashFlow(month=month, inflow=totals["inflow"], outflow=totals["outflow"])
        for month, totals in buckets.items()
    ]


def aging_bucket(days_past_due: int) -> str:
    """Classify days past due into an aging bucket."""
    if days_past_due <= 0:
        return "current"
    if days_past_due <= 30:
        return "0-30"
    if days_past_due <= 60:
        return "31-60"
    if days_past_due <= 90:
        return "61-90"
    return "90+"


def get_aging_report(
    db: Session,
    invoice_type: InvoiceType,
    as_of: date | None = None,
) -> Dict[str, Any]:
    """
    Receivables or payables aging.

    Open (sent or overdue) invoices with an outstanding balance are grouped
    by days past due.
    """
    as_of = as_of or date.today()
    tolerance = get_settings().balance_tolerance

    invoices = (
        db.query(Invoice)
        .filter(
            Invoice.invoice_type == invoice_type,
            Invoice.status.in_([InvoiceStatus.SENT, InvoiceStatus.OVERDUE]),
            Invoice.balance > tolerance,
        )
        .order_by(Invoice.due_date)
        .all()
    )

    buckets: Dict[str, Dict[str, Any]] = {
        name: {"bucket": name, "count": 0, "total": Decimal("0.00"), "invoices": []}
        for name in AGING_BUCKETS
    }
    for invoice in invoices:
        days_past_due = (as_of - invoice.due_date).days
        bucket = buckets[aging_bucket(days_past_due)]
        bucket["count"] += 1
        bucket["total"] += Decimal(invoice.balance)
        bucket["invoices"].append({
            "invoice_id": invoice.id,
            "invoice_number": invoice.invoice_number,
            "due_date": invoice.due_date,
            "days_past_due": max(days_past_due, 0),
            "balance": Decimal(invoice.balance),
        })

    return {
        "invoice_type": invoice_type,
        "as_of": as_of,
        "buckets": [buckets[name] for name in AGING_BUCKETS],
        "total_outstanding": sum((b["total"] for b in buckets.values()), Decimal("0.00")),
    }
