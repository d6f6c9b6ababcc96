"""Journal entry API endpoints."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_actor_id, ledger_http_error
from app.db.dependencies import get_db
from app.domain.accounting.enums import JournalStatus
from app.domain.accounting.exceptions import LedgerError
from app.domain.accounting.ledger_service import (
    JournalLineInput,
    create_journal_entry,
    get_journal_entry,
    list_journal_entries,
)
from app.domain.accounting.posting_service import post_journal_entry
from app.schemas.common import Pagination
from app.schemas.ledger import (
    JournalEntryCreate,
    JournalEntryListResponse,
    JournalEntryResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
def create_journal_entry_endpoint(
    entry_data: JournalEntryCreate,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> JournalEntryResponse:
    """
    Create a draft journal entry.

    Debits must equal credits within 0.01 and every line must reference an
    active account. Account balances are not touched until the entry is
    posted.
    """
    try:
        lines = [
            JournalLineInput(
                account_id=line.account_id,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
            )
            for line in entry_data.lines
        ]
        journal_entry = create_journal_entry(
            db,
            entry_number=entry_data.entry_number,
            entry_date=entry_data.entry_date,
            description=entry_data.description,
            lines=lines,
            reference=entry_data.reference,
            created_by=actor_id,
        )
        return JournalEntryResponse.from_entry(get_journal_entry(db, journal_entry.id))
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error creating journal entry: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating journal entry: {str(e)}")


@router.get("", response_model=JournalEntryListResponse)
def list_journal_entries_endpoint(
    status: Optional[JournalStatus] = Query(None, description="Filter by status"),
    date_from: Optional[date] = Query(None, description="Earliest entry date"),
    date_to: Optional[date] = Query(None, description="Latest entry date"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> JournalEntryListResponse:
    """List journal entries with their lines, newest first."""
    entries, total = list_journal_entries(
        db,
        status=status,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return JournalEntryListResponse(
        journal_entries=[JournalEntryResponse.from_entry(e) for e in entries],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{entry_id}", response_model=JournalEntryResponse)
def get_journal_entry_endpoint(
    entry_id: UUID,
    db: Session = Depends(get_db),
) -> JournalEntryResponse:
    try:
        return JournalEntryResponse.from_entry(get_journal_entry(db, entry_id))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.post("/{entry_id}/post", response_model=JournalEntryResponse)
def post_journal_entry_endpoint(
    entry_id: UUID,
    db: Session = Depends(get_db),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> JournalEntryResponse:
    """
    Post a draft journal entry.

    Applies every line to its account balance and marks the entry posted in
    one transaction. Posting an entry twice returns 409 and leaves balances
    unchanged.
    """
    try:
        journal_entry = post_journal_entry(db, entry_id, posted_by=actor_id)
        return JournalEntryResponse.from_entry(journal_entry)
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error posting journal entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error posting journal entry: {str(e)}")
