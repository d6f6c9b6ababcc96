"""Journal posting engine.

Posting is the only path that changes account balances. It runs as one
database transaction: the Draft -> Posted flip is a compare-and-swap on the
entry row, and every balance change is an in-database increment, so two
concurrent posts of the same entry cannot both succeed.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.accounting import Account, JournalEntry, JournalLine
from app.models.base import utc_now
from app.domain.accounting.enums import JournalStatus
from app.domain.accounting.exceptions import AlreadyPostedError, NotFoundError
from app.domain.accounting.ledger_service import get_journal_entry
from app.domain.accounting.posting_rules import aggregate_deltas

logger = logging.getLogger(__name__)


def post_journal_entry(db: Session, entry_id: UUID, posted_by: str | None = None) -> JournalEntry:
    """
    Post a draft journal entry, applying its lines to account balances.

    Args:
        db: Database session
        entry_id: JournalEntry UUID
        posted_by: Actor id recorded on the entry

    Returns:
        The posted JournalEntry with lines loaded

    Raises:
        NotFoundError: If the entry does not exist
        AlreadyPostedError: If the entry is not in draft (including when a
            concurrent post won the race)
    """
    try:
        current_status = db.scalar(select(JournalEntry.status).where(JournalEntry.id == entry_id))
        if current_status is None:
            raise NotFoundError(f"Journal entry {entry_id} not found")
        if current_status != JournalStatus.DRAFT:
            raise AlreadyPostedError(f"Journal entry {entry_id} already posted")

        now = utc_now()

        # Claim the entry. Zero rows means someone else posted it since the read above.
        claimed = db.execute(
            update(JournalEntry)
            .where(JournalEntry.id == entry_id, JournalEntry.status == JournalStatus.DRAFT)
            .values(status=JournalStatus.POSTED, posted_at=now, posted_by=posted_by, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            raise AlreadyPostedError(f"Journal entry {entry_id} already posted")

        rows = db.execute(
            select(JournalLine.account_id, Account.account_type, JournalLine.debit, JournalLine.credit)
            .join(Account, Account.id == JournalLine.account_id)
            .where(JournalLine.journal_entry_id == entry_id)
        ).all()

        deltas = aggregate_deltas(
            (row.account_id, row.account_type, Decimal(row.debit), Decimal(row.credit))
            for row in rows
        )
        _apply_balance_deltas(db, deltas, now)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        f"Posted journal entry {entry_id}: {len(rows)} lines across {len(deltas)} accounts"
    )
    return get_journal_entry(db, entry_id)


def _apply_balance_deltas(db: Session, deltas: Dict[UUID, Decimal], now: datetime) -> None:
    # Fixed lock order across concurrent posts
    for account_id in sorted(deltas, key=str):
        result = db.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(balance=Account.balance + deltas[account_id], updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError(f"Account {account_id} not found while posting")
