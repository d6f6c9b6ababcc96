"""Chart of Accounts model."""

from decimal import Decimal
from uuid import uuid4, UUID
from sqlalchemy import String, Boolean, Enum, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import mapped_column, Mapped, relationship

from app.models.base import Base, TimestampMixin, enum_values
from app.domain.accounting.enums import AccountType


class Account(TimestampMixin, Base):
    """
    Ledger account.

    ``balance`` is a running figure in the account's normal-balance sign and
    is only ever changed by posting a journal entry.
    """

    __tablename__ = "accounts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    account_type: Mapped[AccountType] = mapped_column(
        Enum(AccountType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    parent_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("accounts.id"),
        nullable=True,
    )

    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    currency: Mapped[str] = mapped_column(String(10), default="USD", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    parent: Mapped["Account | None"] = relationship("Account", remote_side="Account.id")

    def __repr__(self) -> str:
        return f"<Account {self.code} {self.account_type.value} balance={self.balance}>"
