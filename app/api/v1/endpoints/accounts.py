"""Chart of accounts API endpoints."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import ledger_http_error
from app.db.dependencies import get_db
from app.domain.accounting.enums import AccountType
from app.domain.accounting.exceptions import LedgerError
from app.domain.accounting.ledger_service import (
    create_account,
    deactivate_account,
    get_account,
    list_accounts,
    update_account,
)
from app.schemas.ledger import AccountCreate, AccountResponse, AccountUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account_endpoint(
    account_data: AccountCreate,
    db: Session = Depends(get_db),
) -> AccountResponse:
    """
    Create a ledger account.

    New accounts start with a zero balance; the balance moves only when
    journal entries touching the account are posted.
    """
    try:
        account = create_account(
            db,
            code=account_data.code,
            name=account_data.name,
            account_type=account_data.account_type,
            parent_id=account_data.parent_id,
            currency=account_data.currency,
            description=account_data.description,
        )
        return AccountResponse.model_validate(account)
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error creating account: {e}")
        raise HTTPException(status_code=500, detail=f"Error creating account: {str(e)}")


@router.get("", response_model=List[AccountResponse])
def list_accounts_endpoint(
    account_type: Optional[AccountType] = Query(None, description="Filter by account type"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    db: Session = Depends(get_db),
) -> List[AccountResponse]:
    """List accounts ordered by code."""
    accounts = list_accounts(db, account_type=account_type, is_active=is_active)
    return [AccountResponse.model_validate(a) for a in accounts]


@router.get("/{account_id}", response_model=AccountResponse)
def get_account_endpoint(
    account_id: UUID,
    db: Session = Depends(get_db),
) -> AccountResponse:
    try:
        return AccountResponse.model_validate(get_account(db, account_id))
    except LedgerError as e:
        raise ledger_http_error(e)


@router.patch("/{account_id}", response_model=AccountResponse)
def update_account_endpoint(
    account_id: UUID,
    account_data: AccountUpdate,
    db: Session = Depends(get_db),
) -> AccountResponse:
    """Update account name, description, parent or active flag."""
    try:
        account = update_account(
            db,
            account_id,
            name=account_data.name,
            description=account_data.description,
            parent_id=account_data.parent_id,
            is_active=account_data.is_active,
        )
        return AccountResponse.model_validate(account)
    except LedgerError as e:
        raise ledger_http_error(e)
    except Exception as e:
        logger.error(f"Error updating account {account_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Error updating account: {str(e)}")


@router.post("/{account_id}/deactivate", response_model=AccountResponse)
def deactivate_account_endpoint(
    account_id: UUID,
    db: Session = Depends(get_db),
) -> AccountResponse:
    """Deactivate an account. Its history and balance are kept."""
    try:
        return AccountResponse.model_validate(deactivate_account(db, account_id))
    except LedgerError as e:
        raise ledger_http_error(e)
