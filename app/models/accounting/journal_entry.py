"""Journal Entry and Journal Line models."""

from datetime import datetime, date
from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Date, DateTime, Enum, ForeignKey, Numeric, CheckConstraint, Uuid
from sqlalchemy.orm import mapped_column, Mapped, relationship

from app.models.base import Base, TimestampMixin, enum_values
from app.domain.accounting.enums import JournalStatus


class JournalEntry(TimestampMixin, Base):
    """Journal Entry model."""

    __tablename__ = "journal_entries"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    entry_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    total_debit: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    total_credit: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    status: Mapped[JournalStatus] = mapped_column(
        Enum(JournalStatus, values_callable=enum_values, native_enum=False, length=20),
        default=JournalStatus.DRAFT,
        nullable=False,
    )

    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    posted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    posted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relationships
    lines: Mapped[list["JournalLine"]] = relationship(
        "JournalLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_number",
    )


class JournalLine(TimestampMixin, Base):
    """Journal Line model (one debit or credit against one account)."""

    __tablename__ = "journal_lines"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    journal_entry_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("journal_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    line_number: Mapped[int] = mapped_column(nullable=False, default=1)

    # Relationship
    entry: Mapped[JournalEntry] = relationship("JournalEntry", back_populates="lines")

    account_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )
    account: Mapped["Account"] = relationship("Account")

    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    debit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    credit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)

    __table_args__ = (
        CheckConstraint("debit >= 0", name="check_debit_non_negative"),
        CheckConstraint("credit >= 0", name="check_credit_non_negative"),
        CheckConstraint("debit = 0 OR credit = 0", name="check_single_sided_line"),
    )
