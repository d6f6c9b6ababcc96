"""Invoice and Payment models."""

from datetime import date
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Date, Enum, ForeignKey, Index, Numeric, CheckConstraint, Text, Uuid
from sqlalchemy.orm import mapped_column, Mapped, relationship

from app.models.base import Base, TimestampMixin, enum_values
from app.domain.accounting.enums import (
    InvoiceType,
    InvoiceStatus,
    PaymentMethod,
    PaymentStatus,
)


class Invoice(TimestampMixin, Base):
    """Receivable or payable invoice."""

    __tablename__ = "invoices"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    invoice_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    invoice_type: Mapped[InvoiceType] = mapped_column(
        Enum(InvoiceType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )

    customer_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("customers.id"), nullable=True)
    vendor_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("vendors.id"), nullable=True)
    project_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("projects.id"),
        nullable=True,
        index=True,
    )

    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(InvoiceStatus, values_callable=enum_values, native_enum=False, length=20),
        default=InvoiceStatus.DRAFT,
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    payments: Mapped[list["Payment"]] = relationship(
        "Payment",
        back_populates="invoice",
        order_by="Payment.payment_date.desc()",
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="check_invoice_balance_non_negative"),
        CheckConstraint("paid_amount >= 0", name="check_invoice_paid_non_negative"),
        Index("ix_invoices_status_due_date", "status", "due_date"),
    )


class Payment(TimestampMixin, Base):
    """Payment applied against a single invoice."""

    __tablename__ = "payments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    payment_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    invoice_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id"),
        nullable=False,
        index=True,
    )
    invoice: Mapped[Invoice] = relationship("Invoice", back_populates="payments")

    payment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, values_callable=enum_values, native_enum=False, length=20),
        default=PaymentStatus.COMPLETED,
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="check_payment_amount_positive"),
    )
