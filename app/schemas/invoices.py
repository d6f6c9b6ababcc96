"""Invoice, payment and counterparty schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.accounting.enums import (
    InvoiceStatus,
    InvoiceType,
    PaymentMethod,
    PaymentStatus,
)
from app.domain.accounting.invoice_service import effective_status
from app.schemas.common import Pagination


class CounterpartyCreate(BaseModel):
    """Schema for creating a customer or vendor."""
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    contact_person: Optional[str] = Field(default=None, max_length=200)
    email: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=50)
    payment_terms: int = Field(default=30, ge=0)
    currency: str = Field(default="USD", max_length=10)


class CounterpartyResponse(BaseModel):
    id: UUID
    code: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_terms: int
    currency: str
    is_active: bool

    class Config:
        from_attributes = True


class InvoiceCreate(BaseModel):
    """Schema for creating an invoice."""
    invoice_number: str = Field(..., min_length=1, max_length=100)
    invoice_type: InvoiceType
    customer_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    invoice_date: date
    due_date: date
    subtotal: Decimal = Field(..., ge=0, decimal_places=2)
    tax_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    currency: Optional[str] = Field(default=None, max_length=10)
    notes: Optional[str] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class PaymentCreate(BaseModel):
    """Schema for recording a payment against an invoice."""
    payment_number: str = Field(..., min_length=1, max_length=100)
    payment_date: date
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    payment_method: PaymentMethod
    reference_number: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: UUID
    payment_number: str
    invoice_id: UUID
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod
    reference_number: Optional[str] = None
    notes: Optional[str] = None
    status: PaymentStatus
    created_by: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    """Schema for invoice response. ``status`` is the derived status."""
    id: UUID
    invoice_number: str
    invoice_type: InvoiceType
    customer_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    project_id: Optional[UUID] = None
    invoice_date: date
    due_date: date
    status: InvoiceStatus
    stored_status: InvoiceStatus
    currency: str
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_invoice(cls, invoice, as_of: Optional[date] = None, **extra):
        data = {
            name: getattr(invoice, name)
            for name in InvoiceResponse.model_fields
            if name not in ("status", "stored_status")
        }
        return cls(
            **data,
            status=effective_status(invoice, as_of),
            stored_status=invoice.status,
            **extra,
        )


class InvoiceDetailResponse(InvoiceResponse):
    payments: List[PaymentResponse] = []


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceResponse]
    pagination: Pagination


class PaymentListResponse(BaseModel):
    payments: List[PaymentResponse]
    pagination: Pagination


class RecordPaymentResponse(BaseModel):
    """Response after recording a payment."""
    payment: PaymentResponse
    invoice_balance: Decimal
    invoice_paid_amount: Decimal
    invoice_status: InvoiceStatus
