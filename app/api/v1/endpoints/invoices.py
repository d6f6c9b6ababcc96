"""Invoice and payment API endpoints."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_actor_id, ledger_http_error
from app.db.dependencies import get_db
from app.domain.accounting.enums import InvoiceStatus, InvoiceType
from app.domain.accounting.exceptions import LedgerError
from app.domain.accounting.invoice_service import (
    create_invoice,
    get_invoice,
    list_invoices,
    list_payments,
    record_payment,
    update_invoice_status,
)
from app.schemas.common import Pagination
from app.schemas.invoices import (
    InvoiceCreate,
    InvoiceDetailResponse,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatusUpdate,
    PaymentCreate,
    PaymentListResponse,
    PaymentResponse,
    RecordPaymentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _invoice_detail(invoice) -> InvoiceDetailResponse:
    return InvoiceDetailResponse.from_invoice(
        invoice,
        payments=[PaymentResponse.model_validate(p) for p in invoice.payments],
    )


@router.post("/invoices", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice_endpoint(
    invoice_data: InvoiceCreate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> InvoiceResponse:
    """
    Create a receivable or payable invoice.

    Receivables need a customer, payables a vendor. A payable linked to a
    project adds its total to the project's spent amount.
    """
    try:
        invoice = create_invoice(
            db,
            invoice_number=invoice_data.invoice_number,
            invoice_type=invoice_data.invoice_type,
            invoice_date=invoice_data.invoice_date,
            due_date=invoice_data.due_date,
            subtotal=invoice_data.subtotal,
            tax_amount=invoice_data.tax_amount,
            discount_amount=invoice_data.discount_amount,
            customer_id=invoice_data.customer_id,
            vendor_id=invoice_data.vendor_id,
            project_id=invoice_data.project_id,
            status=invoice_data.status,
            currency=invoice_data.currency,
            notes=invoice_data.notes,
            created_by=actor_id,
        )
        return InvoiceResponse.from_invoice(invoice)
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error creating invoice: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating invoice: {str(e)}")


@router.get("/invoices", response_model=InvoiceListResponse)
def list_invoices_endpoint(
    invoice_type: Optional[InvoiceType] = Query(None, description="receivable or payable"),
    status: Optional[InvoiceStatus] = Query(None, description="Filter by (derived) status"),
    customer_id: Optional[UUID] = Query(None),
    vendor_id: Optional[UUID] = Query(None),
    project_id: Optional[UUID] = Query(None),
    as_of: Optional[date] = Query(None, description="Date overdue is judged against"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> InvoiceListResponse:
    """List invoices, newest first."""
    invoices, total = list_invoices(
        db,
        invoice_type=invoice_type,
        status=status,
        customer_id=customer_id,
        vendor_id=vendor_id,
        project_id=project_id,
        as_of=as_of,
        page=page,
        limit=limit,
    )
    return InvoiceListResponse(
        invoices=[InvoiceResponse.from_invoice(i, as_of) for i in invoices],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/invoices/{invoice_id}", response_model=InvoiceDetailResponse)
def get_invoice_endpoint(
    invoice_id: UUID,
    db: Session = Depends(get_db),
) -> InvoiceDetailResponse:
    """Get an invoice with its payments."""
    try:
        return _invoice_detail(get_invoice(db, invoice_id))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.patch("/invoices/{invoice_id}/status", response_model=InvoiceResponse)
def update_invoice_status_endpoint(
    invoice_id: UUID,
    status_data: InvoiceStatusUpdate,
    db: Session = Depends(get_db),
) -> InvoiceResponse:
    """Send or cancel an invoice."""
    try:
        invoice = update_invoice_status(db, invoice_id, status_data.status)
        return InvoiceResponse.from_invoice(invoice)
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error updating invoice {invoice_id} status: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating invoice: {str(e)}")


@router.post(
    "/invoices/{invoice_id}/payments",
    response_model=RecordPaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_payment_endpoint(
    invoice_id: UUID,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> RecordPaymentResponse:
    """
    Record a payment against an invoice.

    A payment larger than the outstanding balance is rejected with 409 and
    the invoice is left unchanged. Paying the balance in full marks the
    invoice paid.
    """
    try:
        payment = record_payment(
            db,
            invoice_id=invoice_id,
            amount=payment_data.amount,
            payment_number=payment_data.payment_number,
            payment_date=payment_data.payment_date,
            payment_method=payment_data.payment_method,
            reference_number=payment_data.reference_number,
            notes=payment_data.notes,
            created_by=actor_id,
        )
        invoice = get_invoice(db, invoice_id)
        return RecordPaymentResponse(
            payment=PaymentResponse.model_validate(payment),
            invoice_balance=invoice.balance,
            invoice_paid_amount=invoice.paid_amount,
            invoice_status=invoice.status,
        )
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error recording payment for invoice {invoice_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error recording payment: {str(e)}")


@router.get("/payments", response_model=PaymentListResponse)
def list_payments_endpoint(
    invoice_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> PaymentListResponse:
    """List payments, newest first."""
    payments, total = list_payments(db, invoice_id=invoice_id, page=page, limit=limit)
    return PaymentListResponse(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        pagination=Pagination.build(page, limit, total),
    )
