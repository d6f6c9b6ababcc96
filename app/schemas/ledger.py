"""General ledger schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.accounting.enums import AccountType, JournalStatus
from app.schemas.common import Pagination


class AccountCreate(BaseModel):
    """Schema for creating an account."""
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    account_type: AccountType
    parent_id: Optional[UUID] = None
    currency: Optional[str] = Field(default=None, max_length=10)
    description: Optional[str] = Field(default=None, max_length=500)


class AccountUpdate(BaseModel):
    """Editable account metadata. Balance and type are not editable."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    parent_id: Optional[UUID] = None
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None


class AccountResponse(BaseModel):
    """Schema for account response."""
    id: UUID
    code: str
    name: str
    account_type: AccountType
    parent_id: Optional[UUID] = None
    balance: Decimal
    currency: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class JournalLineCreate(BaseModel):
    """One line of a journal entry request."""
    account_id: UUID
    debit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    credit: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    description: Optional[str] = Field(default=None, max_length=500)


class JournalEntryCreate(BaseModel):
    """Schema for creating a draft journal entry."""
    entry_number: str = Field(..., min_length=1, max_length=50)
    entry_date: date
    description: Optional[str] = Field(default=None, max_length=500)
    reference: Optional[str] = Field(default=None, max_length=100)
    lines: List[JournalLineCreate]


class JournalLineResponse(BaseModel):
    id: UUID
    line_number: int
    account_id: UUID
    account_code: Optional[str] = None
    account_name: Optional[str] = None
    description: Optional[str] = None
    debit: Decimal
    credit: Decimal

    class Config:
        from_attributes = True

    @classmethod
    def from_line(cls, line) -> "JournalLineResponse":
        response = cls.model_validate(line)
        if line.account is not None:
            response.account_code = line.account.code
            response.account_name = line.account.name
        return response


class JournalEntryResponse(BaseModel):
    """Schema for journal entry response with lines."""
    id: UUID
    entry_number: str
    entry_date: date
    description: Optional[str] = None
    reference: Optional[str] = None
    total_debit: Decimal
    total_credit: Decimal
    status: JournalStatus
    created_by: Optional[str] = None
    posted_by: Optional[str] = None
    posted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    lines: List[JournalLineResponse] = []

    class Config:
        from_attributes = True

    @classmethod
    def from_entry(cls, entry) -> "JournalEntryResponse":
        response = cls.model_validate(entry)
        response.lines = [JournalLineResponse.from_line(line) for line in entry.lines]
        return response


class JournalEntryListResponse(BaseModel):
    journal_entries: List[JournalEntryResponse]
    pagination: Pagination
