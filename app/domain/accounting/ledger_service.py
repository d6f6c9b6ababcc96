"""General Ledger service: chart of accounts and draft journal entries."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, List, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.config import get_settings
from app.models.accounting import Account, JournalEntry, JournalLine
from app.domain.accounting.enums import AccountType, JournalStatus
from app.domain.accounting.exceptions import (
    DuplicateCodeError,
    InactiveAccountError,
    InsufficientLinesError,
    InvalidLineError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class JournalLineInput:
    """One requested debit or credit against an account."""
    account_id: UUID
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str | None = None


# ============================================
# CHART OF ACCOUNTS
# ============================================

def create_account(
    db: Session,
    code: str,
    name: str,
    account_type: AccountType,
    parent_id: UUID | None = None,
    currency: str | None = None,
    description: str | None = None,
) -> Account:
    """
    Create a ledger account with a zero balance.

    Raises:
        DuplicateCodeError: If an account with ``code`` already exists
        NotFoundError: If ``parent_id`` does not exist
        ValidationError: If the parent is itself a child account
    """
    if db.scalar(select(Account.id).where(Account.code == code)) is not None:
        raise DuplicateCodeError(f"Account code {code} already exists")

    if parent_id is not None:
        _validate_parent(db, parent_id)

    account = Account(
        code=code,
        name=name,
        account_type=account_type,
        parent_id=parent_id,
        currency=currency or get_settings().default_currency,
        description=description,
        balance=ZERO,
        is_active=True,
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCodeError(f"Account code {code} already exists") from e
    db.refresh(account)

    logger.info(f"Created account {account.code} ({account.account_type.value}) id={account.id}")
    return account


def get_account(db: Session, account_id: UUID) -> Account:
    """Fetch an account or raise NotFoundError."""
    account = db.get(Account, account_id)
    if not account:
        raise NotFoundError(f"Account {account_id} not found")
    return account


def list_accounts(
    db: Session,
    account_type: AccountType | None = None,
    is_active: bool | None = None,
) -> List[Account]:
    """List accounts ordered by code."""
    predicates = []
    if account_type is not None:
        predicates.append(Account.account_type == account_type)
    if is_active is not None:
        predicates.append(Account.is_active == is_active)

    return list(db.scalars(select(Account).where(*predicates).order_by(Account.code)))


def update_account(
    db: Session,
    account_id: UUID,
    name: str | None = None,
    description: str | None = None,
    parent_id: UUID | None = None,
    is_active: bool | None = None,
) -> Account:
    """
    Update account metadata.

    The balance and account type are not editable here; balances move only
    through posting.
    """
    account = get_account(db, account_id)

    if parent_id is not None:
        if parent_id == account.id:
            raise ValidationError("An account cannot be its own parent")
        _validate_parent(db, parent_id)
        has_children = db.scalar(select(Account.id).where(Account.parent_id == account.id).limit(1))
        if has_children is not None:
            raise ValidationError(
                f"Account {account.code} has sub-accounts and cannot become a sub-account"
            )
        account.parent_id = parent_id
    if name is not None:
        account.name = name
    if description is not None:
        account.description = description
    if is_active is not None:
        account.is_active = is_active

    db.commit()
    db.refresh(account)
    logger.info(f"Updated account {account.code}")
    return account


def deactivate_account(db: Session, account_id: UUID) -> Account:
    """Soft-delete an account. Accounts are never hard-deleted."""
    return update_account(db, account_id, is_active=False)


def _validate_parent(db: Session, parent_id: UUID) -> Account:
    parent = db.get(Account, parent_id)
    if not parent:
        raise NotFoundError(f"Parent account {parent_id} not found")
    # Single-level hierarchy
    if parent.parent_id is not None:
        raise ValidationError(
            f"Parent account {parent.code} is itself a sub-account"
        )
    return parent


# ============================================
# JOURNAL ENTRIES
# ============================================

def validate_lines(lines: Sequence[JournalLineInput]) -> Tuple[Decimal, Decimal]:
    """
    Check line shape and balance.

    Returns:
        (total_debit, total_credit)

    Raises:
        InsufficientLinesError: If fewer than two lines
        InvalidLineError: If a line is negative or two-sided
        UnbalancedEntryError: If debits and credits differ beyond tolerance
    """
    if len(lines) < 2:
        raise InsufficientLinesError(
            f"A journal entry needs at least 2 lines, got {len(lines)}"
        )

    for index, line in enumerate(lines, start=1):
        if line.debit < 0 or line.credit < 0:
            raise InvalidLineError(f"Line {index}: amounts cannot be negative")
        if line.debit != 0 and line.credit != 0:
            raise InvalidLineError(f"Line {index}: a line carries either a debit or a credit, not both")

    total_debit = sum((Decimal(line.debit) for line in lines), ZERO)
    total_credit = sum((Decimal(line.credit) for line in lines), ZERO)

    if abs(total_debit - total_credit) > get_settings().balance_tolerance:
        raise UnbalancedEntryError(total_debit, total_credit)

    return total_debit, total_credit


def create_journal_entry(
    db: Session,
    entry_number: str,
    entry_date: date,
    description: str | None,
    lines: Sequence[JournalLineInput],
    reference: str | None = None,
    created_by: str | None = None,
) -> JournalEntry:
    """
    Create a draft journal entry with its lines.

    Nothing is written unless every check passes. Balances are untouched;
    see posting_service.post_journal_entry.

    Raises:
        InsufficientLinesError, InvalidLineError, UnbalancedEntryError
        NotFoundError: If a line references an unknown account
        InactiveAccountError: If a line references a deactivated account
        DuplicateCodeError: If ``entry_number`` is already used
    """
    total_debit, total_credit = validate_lines(lines)

    account_ids = {line.account_id for line in lines}
    accounts = {
        account.id: account
        for account in db.scalars(select(Account).where(Account.id.in_(account_ids)))
    }
    for account_id in account_ids:
        account = accounts.get(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        if not account.is_active:
            raise InactiveAccountError(f"Account {account.code} is inactive")

    if db.scalar(select(JournalEntry.id).where(JournalEntry.entry_number == entry_number)) is not None:
        raise DuplicateCodeError(f"Journal entry number {entry_number} already exists")

    journal_entry = JournalEntry(
        entry_number=entry_number,
        entry_date=entry_date,
        description=description,
        reference=reference,
        total_debit=total_debit,
        total_credit=total_credit,
        status=JournalStatus.DRAFT,
        created_by=created_by,
    )
    for line_number, line in enumerate(lines, start=1):
        journal_entry.lines.append(
            JournalLine(
                line_number=line_number,
                account_id=line.account_id,
                description=line.description,
                debit=Decimal(line.debit),
                credit=Decimal(line.credit),
            )
        )
    db.add(journal_entry)

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateCodeError(f"Journal entry number {entry_number} already exists") from e
    db.refresh(journal_entry)

    logger.info(
        f"Created draft journal entry {journal_entry.entry_number} id={journal_entry.id} "
        f"with {len(lines)} lines, total={total_debit}"
    )
    return journal_entry


def get_journal_entry(db: Session, entry_id: UUID) -> JournalEntry:
    """Fetch a journal entry with its lines or raise NotFoundError."""
    entry = db.scalar(
        select(JournalEntry)
        .options(selectinload(JournalEntry.lines).selectinload(JournalLine.account))
        .where(JournalEntry.id == entry_id)
    )
    if not entry:
        raise NotFoundError(f"Journal entry {entry_id} not found")
    return entry


def journal_entry_filters(
    status: JournalStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> List[Any]:
    """Build the predicate list for journal entry queries."""
    predicates: List[Any] = []
    if status is not None:
        predicates.append(JournalEntry.status == status)
    if date_from is not None:
        predicates.append(JournalEntry.entry_date >= date_from)
    if date_to is not None:
        predicates.append(JournalEntry.entry_date <= date_to)
    return predicates


def list_journal_entries(
    db: Session,
    status: JournalStatus | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[JournalEntry], int]:
    """
    List journal entries, newest first, each with its lines attached.

    Returns:
        (entries on the requested page, total matching entries)
    """
    predicates = journal_entry_filters(status, date_from, date_to)

    total = db.scalar(select(func.count(JournalEntry.id)).where(*predicates)) or 0

    entries = db.scalars(
        select(JournalEntry)
        .options(selectinload(JournalEntry.lines).selectinload(JournalLine.account))
        .where(*predicates)
        .order_by(JournalEntry.entry_date.desc(), JournalEntry.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(entries), total
