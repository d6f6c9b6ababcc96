"""Tests for financial statements, cash flow history and aging."""

from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from app.domain.accounting.enums import InvoiceStatus, InvoiceType, PaymentMethod
from app.domain.accounting.invoice_service import create_invoice, record_payment
from app.domain.accounting.ledger_service import JournalLineInput, create_journal_entry
from app.domain.accounting.posting_service import post_journal_entry
from app.services.reporting_service import (
    aging_bucket,
    get_aging_report,
    get_balance_sheet,
    get_income_statement,
    get_monthly_cash_flow,
)


def _entry(db: Session, number, entry_date, debit_account, credit_account, amount, post=True):
    entry = create_journal_entry(
        db,
        entry_number=number,
        entry_date=entry_date,
        description=None,
        lines=[
            JournalLineInput(account_id=debit_account.id, debit=Decimal(amount)),
            JournalLineInput(account_id=credit_account.id, credit=Decimal(amount)),
        ],
    )
    if post:
        post_journal_entry(db, entry.id)
    return entry


def _book_quarter(db: Session, accounts):
    _entry(db, "JE-1", date(2024, 1, 2), accounts["cash"], accounts["equity"], "1000")
    _entry(db, "JE-2", date(2024, 1, 15), accounts["cash"], accounts["revenue"], "500")
    _entry(db, "JE-3", date(2024, 2, 10), accounts["expense"], accounts["cash"], "200")
    # Draft entries never reach balances or statements
    _entry(db, "JE-4", date(2024, 2, 20), accounts["cash"], accounts["revenue"], "999", post=False)


def test_balance_sheet_balances_with_current_earnings(db: Session, accounts):
    _book_quarter(db, accounts)

    sheet = get_balance_sheet(db, as_of=date(2024, 3, 31))

    assert sheet["assets"]["total"] == Decimal("1300.00")
    assert sheet["liabilities"]["total"] == Decimal("0.00")
    assert sheet["current_earnings"] == Decimal("300.00")
    assert sheet["equity"]["total"] == Decimal("1300.00")
    assert sheet["balanced"] is True
    assert [a["code"] for a in sheet["assets"]["accounts"]] == ["1000", "1200"]


def test_balance_sheet_ignores_entries_after_as_of(db: Session, accounts):
    _book_quarter(db, accounts)
    _entry(db, "JE-5", date(2024, 6, 1), accounts["cash"], accounts["revenue"], "500")

    before_anything = get_balance_sheet(db, as_of=date(2023, 12, 31))
    january = get_balance_sheet(db, as_of=date(2024, 1, 10))
    march = get_balance_sheet(db, as_of=date(2024, 3, 31))

    assert before_anything["assets"]["total"] == Decimal("0.00")
    assert before_anything["current_earnings"] == Decimal("0.00")
    assert january["assets"]["total"] == Decimal("1000.00")
    assert january["current_earnings"] == Decimal("0.00")
    assert january["balanced"] is True
    assert march["assets"]["total"] == Decimal("1300.00")
    assert march["current_earnings"] == Decimal("300.00")


def test_income_statement_uses_posted_lines_in_range(db: Session, accounts):
    _book_quarter(db, accounts)

    statement = get_income_statement(db, date(2024, 1, 1), date(2024, 3, 31))

    assert statement["revenue"]["total"] == Decimal("500.00")
    assert statement["expenses"]["total"] == Decimal("200.00")
    assert statement["net_income"] == Decimal("300.00")
    assert statement["profit_margin"] == Decimal("60.00")


def test_income_statement_date_range(db: Session, accounts):
    _book_quarter(db, accounts)

    february = get_income_statement(db, date(2024, 2, 1), date(2024, 2, 29))

    assert february["revenue"]["total"] == Decimal("0.00")
    assert february["expenses"]["total"] == Decimal("200.00")
    assert february["profit_margin"] == Decimal("0.00")


def _invoice(db: Session, number, invoice_type, counterparty, due_date, total="1000"):
    kwargs = {"customer_id": counterparty.id} if invoice_type == InvoiceType.RECEIVABLE else {"vendor_id": counterparty.id}
    return create_invoice(
        db,
        invoice_number=number,
        invoice_type=invoice_type,
        invoice_date=due_date - timedelta(days=30),
        due_date=due_date,
        subtotal=Decimal(total),
        status=InvoiceStatus.SENT,
        **kwargs,
    )


def _pay(db: Session, invoice, number, amount, payment_date):
    record_payment(
        db,
        invoice_id=invoice.id,
        amount=Decimal(amount),
        payment_number=number,
        payment_date=payment_date,
        payment_method=PaymentMethod.CHECK,
    )


def test_monthly_cash_flow_groups_by_month(db: Session, customer, vendor):
    sale = _invoice(db, "INV-1", InvoiceType.RECEIVABLE, customer, date(2024, 6, 30), "5000")
    bill = _invoice(db, "BILL-1", InvoiceType.PAYABLE, vendor, date(2024, 6, 30), "5000")
    _pay(db, sale, "P-1", "1000", date(2024, 1, 10))
    _pay(db, sale, "P-2", "500", date(2024, 1, 20))
    _pay(db, bill, "P-3", "300", date(2024, 1, 25))
    _pay(db, sale, "P-4", "700", date(2024, 3, 5))
    _pay(db, bill, "P-5", "400", date(2024, 4, 5))

    history = get_monthly_cash_flow(db, months=6, as_of=date(2024, 3, 31))

    assert [m.month for m in history] == [date(2024, 3, 1), date(2024, 1, 1)]
    assert history[0].inflow == Decimal("700.00")
    assert history[0].outflow == Decimal("0.00")
    assert history[1].inflow == Decimal("1500.00")
    assert history[1].outflow == Decimal("300.00")
    assert history[1].net_flow == Decimal("1200.00")


def test_monthly_cash_flow_limits_months(db: Session, customer):
    sale = _invoice(db, "INV-1", InvoiceType.RECEIVABLE, customer, date(2024, 6, 30), "5000")
    for month in range(1, 5):
        _pay(db, sale, f"P-{month}", "100", date(2024, month, 15))

    history = get_monthly_cash_flow(db, months=2, as_of=date(2024, 12, 31))

    assert [m.month for m in history] == [date(2024, 4, 1), date(2024, 3, 1)]


def test_aging_buckets(db: Session, customer):
    _invoice(db, "INV-CUR", InvoiceType.RECEIVABLE, customer, date(2024, 4, 30), "100")
    _invoice(db, "INV-45", InvoiceType.RECEIVABLE, customer, date(2024, 1, 31), "200")
    _invoice(db, "INV-120", InvoiceType.RECEIVABLE, customer, date(2023, 11, 16), "300")

    report = get_aging_report(db, InvoiceType.RECEIVABLE, as_of=date(2024, 3, 15))
    buckets = {b["bucket"]: b for b in report["buckets"]}

    assert buckets["current"]["total"] == Decimal("100.00")
    assert buckets["31-60"]["total"] == Decimal("200.00")
    assert buckets["31-60"]["invoices"][0]["days_past_due"] == 44
    assert buckets["90+"]["count"] == 1
    assert buckets["0-30"]["count"] == 0
    assert report["total_outstanding"] == Decimal("600.00")


def test_aging_bucket_edges():
    assert aging_bucket(0) == "current"
    assert aging_bucket(1) == "0-30"
    assert aging_bucket(30) == "0-30"
    assert aging_bucket(31) == "31-60"
    assert aging_bucket(61) == "61-90"
    assert aging_bucket(91) == "90+"
