"""Invoice and payment reconciliation.

Invoices track their own ``paid_amount`` and ``balance``; payments are
applied with a conditional in-database decrement so concurrent payments on
the same invoice serialize and can never push the balance below zero.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, List, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.config import get_settings
from app.models.accounting import Customer, Invoice, Payment, Vendor
from app.models.base import utc_now
from app.models.project import Project
from app.domain.accounting.enums import (
    InvoiceStatus,
    InvoiceType,
    PaymentMethod,
    PaymentStatus,
)
from app.domain.accounting.exceptions import (
    DuplicateCodeError,
    NotFoundError,
    OverpaymentRejectedError,
    ValidationError,
)
from app.domain.events import EventBus, InvoiceCreatedForProject, get_event_bus

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# Statuses a caller may pick when creating an invoice
INITIAL_STATUSES = {InvoiceStatus.DRAFT, InvoiceStatus.SENT}

# Manual transitions; paid and overdue are never set by hand
ALLOWED_TRANSITIONS = {
    InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.CANCELLED},
    InvoiceStatus.SENT: {InvoiceStatus.CANCELLED},
    InvoiceStatus.OVERDUE: {InvoiceStatus.CANCELLED},
}


# ============================================
# COUNTERPARTIES
# ============================================

def create_customer(db: Session, code: str, name: str, **details: Any) -> Customer:
    """Create a customer. Extra keyword arguments map to Customer columns."""
    if db.scalar(select(Customer.id).where(Customer.code == code)) is not None:
        raise DuplicateCodeError(f"Customer code {code} already exists")
    customer = Customer(code=code, name=name, **details)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    logger.info(f"Created customer {customer.code} id={customer.id}")
    return customer


def create_vendor(db: Session, code: str, name: str, **details: Any) -> Vendor:
    """Create a vendor. Extra keyword arguments map to Vendor columns."""
    if db.scalar(select(Vendor.id).where(Vendor.code == code)) is not None:
        raise DuplicateCodeError(f"Vendor code {code} already exists")
    vendor = Vendor(code=code, name=name, **details)
    db.add(vendor)
    db.commit()
    db.refresh(vendor)
    logger.info(f"Created vendor {vendor.code} id={vendor.id}")
    return vendor


def list_customers(db: Session) -> List[Customer]:
    return list(db.scalars(select(Customer).where(Customer.is_active.is_(True)).order_by(Customer.name)))


def list_vendors(db: Session) -> List[Vendor]:
    return list(db.scalars(select(Vendor).where(Vendor.is_active.is_(True)).order_by(Vendor.name)))


# ============================================
# INVOICES
# ============================================

def create_invoice(
    db: Session,
    invoice_number: str,
    invoice_type: InvoiceType,
    invoice_date: date,
    due_date: date,
    subtotal: Decimal,
    tax_amount: Decimal = ZERO,
    discount_amount: Decimal = ZERO,
    customer_id: UUID | None = None,
    vendor_id: UUID | None = None,
    project_id: UUID | None = None,
    status: InvoiceStatus = InvoiceStatus.DRAFT,
    currency: str | None = None,
    notes: str | None = None,
    created_by: str | None = None,
    event_bus: EventBus | None = None,
) -> Invoice:
    """
    Create an invoice with ``total = subtotal + tax - discount``.

    A payable invoice linked to a project publishes InvoiceCreatedForProject;
    handlers run in this session and commit with the invoice.

    Raises:
        ValidationError: Bad counterparty, dates, amounts or initial status
        NotFoundError: Unknown customer, vendor or project
        DuplicateCodeError: ``invoice_number`` already used
    """
    subtotal = Decimal(subtotal)
    tax_amount = Decimal(tax_amount or 0)
    discount_amount = Decimal(discount_amount or 0)

    if subtotal < 0 or tax_amount < 0 or discount_amount < 0:
        raise ValidationError("Invoice amounts cannot be negative")
    total_amount = subtotal + tax_amount - discount_amount
    if total_amount < 0:
        raise ValidationError("Discount exceeds subtotal plus tax")
    if due_date < invoice_date:
        raise ValidationError("Due date cannot be before invoice date")
    if status not in INITIAL_STATUSES:
        raise ValidationError(f"Invoice cannot be created with status {status.value}")

    _validate_counterparty(db, invoice_type, customer_id, vendor_id)
    if project_id is not None and db.get(Project, project_id) is None:
        raise NotFoundError(f"Project {project_id} not found")

    if db.scalar(select(Invoice.id).where(Invoice.invoice_number == invoice_number)) is not None:
        raise DuplicateCodeError(f"Invoice number {invoice_number} already exists")

    invoice = Invoice(
        invoice_number=invoice_number,
        invoice_type=invoice_type,
        customer_id=customer_id,
        vendor_id=vendor_id,
        project_id=project_id,
        invoice_date=invoice_date,
        due_date=due_date,
        status=status,
        currency=currency or get_settings().default_currency,
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        paid_amount=ZERO,
        balance=total_amount,
        notes=notes,
        created_by=created_by,
    )

    try:
        db.add(invoice)
        db.flush()

        if project_id is not None and invoice_type == InvoiceType.PAYABLE:
            bus = event_bus or get_event_bus()
            bus.publish(
                db,
                InvoiceCreatedForProject(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    project_id=project_id,
                    total_amount=total_amount,
                ),
            )

        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCodeError(f"Invoice number {invoice_number} already exists") from e
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info(
        f"Created {invoice_type.value} invoice {invoice.invoice_number} id={invoice.id} "
        f"total={total_amount}"
    )
    return invoice


def _validate_counterparty(
    db: Session,
    invoice_type: InvoiceType,
    customer_id: UUID | None,
    vendor_id: UUID | None,
) -> None:
    if invoice_type == InvoiceType.RECEIVABLE:
        if customer_id is None:
            raise ValidationError("Customer is required for receivable invoice")
        if vendor_id is not None:
            raise ValidationError("Receivable invoice cannot reference a vendor")
        if db.get(Customer, customer_id) is None:
            raise NotFoundError(f"Customer {customer_id} not found")
    else:
        if vendor_id is None:
            raise ValidationError("Vendor is required for payable invoice")
        if customer_id is not None:
            raise ValidationError("Payable invoice cannot reference a customer")
        if db.get(Vendor, vendor_id) is None:
            raise NotFoundError(f"Vendor {vendor_id} not found")


def get_invoice(db: Session, invoice_id: UUID) -> Invoice:
    """Fetch an invoice with its payments or raise NotFoundError."""
    invoice = db.scalar(
        select(Invoice).options(selectinload(Invoice.payments)).where(Invoice.id == invoice_id)
    )
    if not invoice:
        raise NotFoundError(f"Invoice {invoice_id} not found")
    return invoice


def list_invoices(
    db: Session,
    invoice_type: InvoiceType | None = None,
    status: InvoiceStatus | None = None,
    customer_id: UUID | None = None,
    vendor_id: UUID | None = None,
    project_id: UUID | None = None,
    as_of: date | None = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Invoice], int]:
    """
    List invoices, newest first.

    Filtering by ``InvoiceStatus.OVERDUE`` uses the derived overdue rule as
    of ``as_of`` (default today) rather than the stored status.
    """
    as_of = as_of or date.today()
    predicates: List[Any] = []
    if invoice_type is not None:
        predicates.append(Invoice.invoice_type == invoice_type)
    if customer_id is not None:
        predicates.append(Invoice.customer_id == customer_id)
    if vendor_id is not None:
        predicates.append(Invoice.vendor_id == vendor_id)
    if project_id is not None:
        predicates.append(Invoice.project_id == project_id)
    if status == InvoiceStatus.OVERDUE:
        predicates.extend(overdue_predicates(as_of))
    elif status == InvoiceStatus.SENT:
        predicates.append(Invoice.status == InvoiceStatus.SENT)
        predicates.append(~_overdue_clause(as_of))
    elif status is not None:
        predicates.append(Invoice.status == status)

    total = db.scalar(select(func.count(Invoice.id)).where(*predicates)) or 0
    invoices = db.scalars(
        select(Invoice)
        .where(*predicates)
        .order_by(Invoice.invoice_date.desc(), Invoice.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(invoices), total


def update_invoice_status(db: Session, invoice_id: UUID, status: InvoiceStatus) -> Invoice:
    """
    Move an invoice through a manual status transition.

    Allowed: draft -> sent, draft/sent/overdue -> cancelled (only while
    nothing has been paid). The change is a conditional update on the status
    that was read, and cancelling also requires ``paid_amount = 0`` in the
    same statement, so a payment landing in between makes it fail.
    """
    invoice = get_invoice(db, invoice_id)
    current = invoice.status
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if status not in allowed:
        raise ValidationError(
            f"Cannot change invoice {invoice.invoice_number} from {current.value} to {status.value}"
        )
    if status == InvoiceStatus.CANCELLED and invoice.paid_amount > 0:
        raise ValidationError(
            f"Invoice {invoice.invoice_number} has payments and cannot be cancelled"
        )

    conditions = [Invoice.id == invoice_id, Invoice.status == current]
    if status == InvoiceStatus.CANCELLED:
        conditions.append(Invoice.paid_amount == 0)

    try:
        changed = db.execute(
            update(Invoice)
            .where(*conditions)
            .values(status=status, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if changed.rowcount != 1:
            db.rollback()
            db.refresh(invoice)
            if invoice.paid_amount > 0:
                raise ValidationError(
                    f"Invoice {invoice.invoice_number} has payments and cannot be cancelled"
                )
            raise ValidationError(
                f"Invoice {invoice.invoice_number} changed to {invoice.status.value} concurrently"
            )
        db.commit()
    except ValidationError:
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info(f"Invoice {invoice.invoice_number} status -> {status.value}")
    return invoice


# ============================================
# OVERDUE (derived)
# ============================================

def _overdue_clause(as_of: date):
    tolerance = get_settings().balance_tolerance
    return (
        Invoice.status.in_([InvoiceStatus.SENT, InvoiceStatus.OVERDUE])
        & (Invoice.balance > tolerance)
        & (Invoice.due_date < as_of)
    )


def overdue_predicates(as_of: date) -> List[Any]:
    """Predicates selecting invoices that read as overdue on ``as_of``."""
    return [_overdue_clause(as_of)]


def effective_status(invoice: Invoice, as_of: date | None = None) -> InvoiceStatus:
    """
    Status as presented to readers.

    A sent invoice with an outstanding balance past its due date reads as
    overdue. Nothing writes this status back.
    """
    as_of = as_of or date.today()
    if (
        invoice.status in (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)
        and invoice.balance > get_settings().balance_tolerance
        and invoice.due_date < as_of
    ):
        return InvoiceStatus.OVERDUE
    return invoice.status


def count_overdue_invoices(db: Session, project_id: UUID, as_of: date | None = None) -> int:
    """Number of a project's invoices that are overdue on ``as_of``."""
    as_of = as_of or date.today()
    return db.scalar(
        select(func.count(Invoice.id)).where(
            Invoice.project_id == project_id,
            *overdue_predicates(as_of),
        )
    ) or 0


# ============================================
# PAYMENTS
# ============================================

def record_payment(
    db: Session,
    invoice_id: UUID,
    amount: Decimal,
    payment_number: str,
    payment_date: date,
    payment_method: PaymentMethod,
    reference_number: str | None = None,
    notes: str | None = None,
    created_by: str | None = None,
) -> Payment:
    """
    Apply a payment to an invoice.

    The payment row, ``paid_amount`` increment, ``balance`` decrement and the
    paid status flip commit together or not at all.

    Raises:
        NotFoundError: If the invoice does not exist
        ValidationError: Non-positive amount or cancelled invoice
        OverpaymentRejectedError: If ``amount`` exceeds the current balance;
            the invoice is left unchanged
        DuplicateCodeError: ``payment_number`` already used
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Payment amount must be positive")

    try:
        invoice = db.get(Invoice, invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice {invoice_id} not found")
        if invoice.status == InvoiceStatus.CANCELLED:
            raise ValidationError(f"Invoice {invoice.invoice_number} is cancelled")
        if db.scalar(select(Payment.id).where(Payment.payment_number == payment_number)) is not None:
            raise DuplicateCodeError(f"Payment number {payment_number} already exists")

        # Conditional decrement: a concurrent payment that drained the
        # balance first makes this match zero rows.
        applied = db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id, Invoice.balance >= amount)
            .values(
                paid_amount=Invoice.paid_amount + amount,
                balance=Invoice.balance - amount,
            )
            .execution_options(synchronize_session=False)
        )
        if applied.rowcount != 1:
            db.refresh(invoice)
            raise OverpaymentRejectedError(amount, invoice.balance)

        payment = Payment(
            payment_number=payment_number,
            invoice_id=invoice_id,
            payment_date=payment_date,
            amount=amount,
            payment_method=payment_method,
            reference_number=reference_number,
            notes=notes,
            status=PaymentStatus.COMPLETED,
            created_by=created_by,
        )
        db.add(payment)

        db.execute(
            update(Invoice)
            .where(Invoice.id == invoice_id, Invoice.balance <= get_settings().balance_tolerance)
            .values(status=InvoiceStatus.PAID)
            .execution_options(synchronize_session=False)
        )

        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCodeError(f"Payment number {payment_number} already exists") from e
    except Exception:
        db.rollback()
        raise

    db.refresh(payment)
    logger.info(
        f"Recorded payment {payment.payment_number} of {amount} against invoice {invoice_id}"
    )
    return payment


def list_payments(
    db: Session,
    invoice_id: UUID | None = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Payment], int]:
    """List payments, newest first."""
    predicates: List[Any] = []
    if invoice_id is not None:
        predicates.append(Payment.invoice_id == invoice_id)

    total = db.scalar(select(func.count(Payment.id)).where(*predicates)) or 0
    payments = db.scalars(
        select(Payment)
        .where(*predicates)
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(payments), total
