"""Tests for invoice creation, payments and derived overdue status."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models import Invoice, Payment, Project
from app.domain.accounting.enums import (
    InvoiceStatus,
    InvoiceType,
    PaymentMethod,
)
from app.domain.accounting.exceptions import (
    DuplicateCodeError,
    NotFoundError,
    OverpaymentRejectedError,
    ValidationError,
)
from app.domain.accounting.invoice_service import (
    count_overdue_invoices,
    create_invoice,
    effective_status,
    get_invoice,
    list_invoices,
    list_payments,
    record_payment,
    update_invoice_status,
)
from app.domain.events import EventBus, InvoiceCreatedForProject


def _receivable(db: Session, customer, number="INV-001", total=Decimal("1000.00"), **kwargs):
    kwargs.setdefault("status", InvoiceStatus.SENT)
    return create_invoice(
        db,
        invoice_number=number,
        invoice_type=InvoiceType.RECEIVABLE,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        subtotal=total,
        customer_id=customer.id,
        **kwargs,
    )


def _pay(db: Session, invoice_id, amount, number):
    return record_payment(
        db,
        invoice_id=invoice_id,
        amount=amount,
        payment_number=number,
        payment_date=date(2024, 1, 15),
        payment_method=PaymentMethod.BANK_TRANSFER,
    )


def _project_spent(project_id) -> Decimal:
    with SessionLocal() as session:
        return session.get(Project, project_id).spent


# ============================================
# CREATION
# ============================================

def test_invoice_totals(db: Session, customer):
    invoice = create_invoice(
        db,
        invoice_number="INV-TOT",
        invoice_type=InvoiceType.RECEIVABLE,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        subtotal=Decimal("1000.00"),
        tax_amount=Decimal("100.00"),
        discount_amount=Decimal("50.00"),
        customer_id=customer.id,
    )

    assert invoice.total_amount == Decimal("1050.00")
    assert invoice.balance == Decimal("1050.00")
    assert invoice.paid_amount == Decimal("0.00")
    assert invoice.status == InvoiceStatus.DRAFT
    assert invoice.currency == "USD"


def test_receivable_requires_customer(db: Session, vendor):
    with pytest.raises(ValidationError):
        create_invoice(
            db,
            invoice_number="INV-X",
            invoice_type=InvoiceType.RECEIVABLE,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            subtotal=Decimal("10.00"),
            vendor_id=vendor.id,
        )


def test_payable_requires_vendor(db: Session, customer):
    with pytest.raises(ValidationError):
        create_invoice(
            db,
            invoice_number="BILL-X",
            invoice_type=InvoiceType.PAYABLE,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            subtotal=Decimal("10.00"),
            customer_id=customer.id,
        )


def test_unknown_customer(db: Session):
    with pytest.raises(NotFoundError):
        create_invoice(
            db,
            invoice_number="INV-X",
            invoice_type=InvoiceType.RECEIVABLE,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            subtotal=Decimal("10.00"),
            customer_id=uuid4(),
        )


def test_due_date_before_invoice_date_rejected(db: Session, customer):
    with pytest.raises(ValidationError):
        create_invoice(
            db,
            invoice_number="INV-X",
            invoice_type=InvoiceType.RECEIVABLE,
            invoice_date=date(2024, 2, 1),
            due_date=date(2024, 1, 1),
            subtotal=Decimal("10.00"),
            customer_id=customer.id,
        )


def test_cannot_create_paid_invoice(db: Session, customer):
    with pytest.raises(ValidationError):
        _receivable(db, customer, status=InvoiceStatus.PAID)


def test_duplicate_invoice_number(db: Session, customer):
    _receivable(db, customer, number="INV-DUP")
    with pytest.raises(DuplicateCodeError):
        _receivable(db, customer, number="INV-DUP")


# ============================================
# PROJECT SPEND
# ============================================

def test_payable_invoice_adds_to_project_spent(db: Session, vendor, project):
    create_invoice(
        db,
        invoice_number="BILL-001",
        invoice_type=InvoiceType.PAYABLE,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        subtotal=Decimal("2500.00"),
        vendor_id=vendor.id,
        project_id=project.id,
    )

    assert _project_spent(project.id) == Decimal("2500.00")


def test_receivable_invoice_leaves_project_spent(db: Session, customer, project):
    _receivable(db, customer, project_id=project.id)

    assert _project_spent(project.id) == Decimal("0.00")


def test_bus_without_handlers_skips_spend_update(db: Session, vendor, project):
    create_invoice(
        db,
        invoice_number="BILL-002",
        invoice_type=InvoiceType.PAYABLE,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        subtotal=Decimal("700.00"),
        vendor_id=vendor.id,
        project_id=project.id,
        event_bus=EventBus(),
    )

    assert _project_spent(project.id) == Decimal("0.00")


def test_failing_handler_rolls_back_invoice(db: Session, vendor, project):
    bus = EventBus()

    def explode(session, event):
        raise RuntimeError("handler failed")

    bus.subscribe(InvoiceCreatedForProject, explode)

    with pytest.raises(RuntimeError):
        create_invoice(
            db,
            invoice_number="BILL-003",
            invoice_type=InvoiceType.PAYABLE,
            invoice_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            subtotal=Decimal("700.00"),
            vendor_id=vendor.id,
            project_id=project.id,
            event_bus=bus,
        )

    with SessionLocal() as session:
        assert session.query(Invoice).count() == 0


# ============================================
# PAYMENTS
# ============================================

def test_partial_then_final_payment(db: Session, customer):
    invoice = _receivable(db, customer)

    _pay(db, invoice.id, Decimal("600.00"), "PAY-1")
    invoice = get_invoice(db, invoice.id)
    assert invoice.paid_amount == Decimal("600.00")
    assert invoice.balance == Decimal("400.00")
    assert invoice.status == InvoiceStatus.SENT

    _pay(db, invoice.id, Decimal("400.00"), "PAY-2")
    invoice = get_invoice(db, invoice.id)
    assert invoice.paid_amount == Decimal("1000.00")
    assert invoice.balance == Decimal("0.00")
    assert invoice.status == InvoiceStatus.PAID
    assert len(invoice.payments) == 2


def test_overpayment_rejected_and_invoice_unchanged(db: Session, customer):
    invoice = _receivable(db, customer)
    _pay(db, invoice.id, Decimal("600.00"), "PAY-1")

    with pytest.raises(OverpaymentRejectedError) as exc_info:
        _pay(db, invoice.id, Decimal("500.00"), "PAY-2")

    assert exc_info.value.balance == Decimal("400.00")
    with SessionLocal() as session:
        stored = session.get(Invoice, invoice.id)
        assert stored.balance == Decimal("400.00")
        assert stored.paid_amount == Decimal("600.00")
        assert session.query(Payment).count() == 1


def test_stale_session_payment_cannot_overdraw(db: Session, customer):
    invoice = _receivable(db, customer)

    with SessionLocal() as first, SessionLocal() as second:
        assert second.get(Invoice, invoice.id).balance == Decimal("1000.00")

        _pay(first, invoice.id, Decimal("800.00"), "PAY-A")
        with pytest.raises(OverpaymentRejectedError) as exc_info:
            _pay(second, invoice.id, Decimal("800.00"), "PAY-B")

    assert exc_info.value.balance == Decimal("200.00")
    with SessionLocal() as session:
        stored = session.get(Invoice, invoice.id)
        assert stored.balance == Decimal("200.00")
        assert stored.paid_amount == Decimal("800.00")
        assert session.query(Payment).count() == 1


def test_paid_plus_balance_equals_total(db: Session, customer):
    invoice = _receivable(db, customer, total=Decimal("900.00"))
    for number, amount in (("P1", "100.00"), ("P2", "250.00"), ("P3", "50.00")):
        _pay(db, invoice.id, Decimal(amount), number)

    invoice = get_invoice(db, invoice.id)
    assert invoice.paid_amount + invoice.balance == invoice.total_amount
    assert sum(p.amount for p in invoice.payments) == invoice.paid_amount


def test_non_positive_payment_rejected(db: Session, customer):
    invoice = _receivable(db, customer)
    with pytest.raises(ValidationError):
        _pay(db, invoice.id, Decimal("0"), "PAY-0")


def test_payment_on_unknown_invoice(db: Session):
    with pytest.raises(NotFoundError):
        _pay(db, uuid4(), Decimal("10.00"), "PAY-X")


def test_payment_on_cancelled_invoice(db: Session, customer):
    invoice = _receivable(db, customer)
    update_invoice_status(db, invoice.id, InvoiceStatus.CANCELLED)
    with pytest.raises(ValidationError):
        _pay(db, invoice.id, Decimal("10.00"), "PAY-C")


def test_duplicate_payment_number(db: Session, customer):
    invoice = _receivable(db, customer)
    _pay(db, invoice.id, Decimal("10.00"), "PAY-D")
    with pytest.raises(DuplicateCodeError):
        _pay(db, invoice.id, Decimal("10.00"), "PAY-D")


def test_list_payments_by_invoice(db: Session, customer):
    first = _receivable(db, customer, number="INV-A")
    second = _receivable(db, customer, number="INV-B")
    _pay(db, first.id, Decimal("10.00"), "PAY-A")
    _pay(db, second.id, Decimal("20.00"), "PAY-B")

    payments, total = list_payments(db, invoice_id=first.id)
    assert total == 1
    assert payments[0].payment_number == "PAY-A"


# ============================================
# STATUS
# ============================================

def test_draft_can_be_sent(db: Session, customer):
    invoice = _receivable(db, customer, status=InvoiceStatus.DRAFT)
    invoice = update_invoice_status(db, invoice.id, InvoiceStatus.SENT)
    assert invoice.status == InvoiceStatus.SENT


def test_paid_cannot_be_set_by_hand(db: Session, customer):
    invoice = _receivable(db, customer)
    with pytest.raises(ValidationError):
        update_invoice_status(db, invoice.id, InvoiceStatus.PAID)


def test_partially_paid_invoice_cannot_be_cancelled(db: Session, customer):
    invoice = _receivable(db, customer)
    _pay(db, invoice.id, Decimal("10.00"), "PAY-1")
    with pytest.raises(ValidationError):
        update_invoice_status(db, invoice.id, InvoiceStatus.CANCELLED)


def test_cancel_from_stale_session_after_payment_rejected(db: Session, customer):
    invoice = _receivable(db, customer)

    with SessionLocal() as first, SessionLocal() as second:
        assert second.get(Invoice, invoice.id).paid_amount == Decimal("0.00")

        _pay(first, invoice.id, Decimal("100.00"), "PAY-1")
        with pytest.raises(ValidationError):
            update_invoice_status(second, invoice.id, InvoiceStatus.CANCELLED)

    with SessionLocal() as session:
        stored = session.get(Invoice, invoice.id)
        assert stored.status == InvoiceStatus.SENT
        assert stored.paid_amount == Decimal("100.00")


def test_overdue_is_derived_from_due_date(db: Session, customer):
    invoice = _receivable(db, customer)

    assert effective_status(invoice, as_of=date(2024, 1, 31)) == InvoiceStatus.SENT
    assert effective_status(invoice, as_of=date(2024, 2, 1)) == InvoiceStatus.OVERDUE
    # Nothing is written back
    assert get_invoice(db, invoice.id).status == InvoiceStatus.SENT


def test_draft_and_paid_invoices_never_overdue(db: Session, customer):
    draft = _receivable(db, customer, number="INV-D", status=InvoiceStatus.DRAFT)
    paid = _receivable(db, customer, number="INV-P")
    _pay(db, paid.id, Decimal("1000.00"), "PAY-P")
    paid = get_invoice(db, paid.id)

    later = date(2024, 6, 1)
    assert effective_status(draft, as_of=later) == InvoiceStatus.DRAFT
    assert effective_status(paid, as_of=later) == InvoiceStatus.PAID


def test_list_and_count_overdue(db: Session, customer, project):
    _receivable(db, customer, number="INV-OLD", project_id=project.id)
    create_invoice(
        db,
        invoice_number="INV-NEW",
        invoice_type=InvoiceType.RECEIVABLE,
        invoice_date=date(2024, 1, 1),
        due_date=date(2024, 12, 31),
        subtotal=Decimal("100.00"),
        customer_id=customer.id,
        project_id=project.id,
        status=InvoiceStatus.SENT,
    )
    as_of = date(2024, 3, 1)

    overdue, total = list_invoices(db, status=InvoiceStatus.OVERDUE, as_of=as_of)
    assert total == 1
    assert overdue[0].invoice_number == "INV-OLD"

    sent, total = list_invoices(db, status=InvoiceStatus.SENT, as_of=as_of)
    assert [i.invoice_number for i in sent] == ["INV-NEW"]

    assert count_overdue_invoices(db, project.id, as_of) == 1
