"""Customer and vendor API endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.dependencies import ledger_http_error
from app.db.dependencies import get_db
from app.domain.accounting.exceptions import LedgerError
from app.domain.accounting.invoice_service import (
    create_customer,
    create_vendor,
    list_customers,
    list_vendors,
)
from app.schemas.invoices import CounterpartyCreate, CounterpartyResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/customers", response_model=CounterpartyResponse, status_code=status.HTTP_201_CREATED)
def create_customer_endpoint(
    customer_data: CounterpartyCreate,
    db: Session = Depends(get_db),
) -> CounterpartyResponse:
    try:
        customer = create_customer(db, **customer_data.model_dump())
        return CounterpartyResponse.model_validate(customer)
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("/customers", response_model=List[CounterpartyResponse])
def list_customers_endpoint(db: Session = Depends(get_db)) -> List[CounterpartyResponse]:
    """Active customers by name."""
    return [CounterpartyResponse.model_validate(c) for c in list_customers(db)]


@router.post("/vendors", response_model=CounterpartyResponse, status_code=status.HTTP_201_CREATED)
def create_vendor_endpoint(
    vendor_data: CounterpartyCreate,
    db: Session = Depends(get_db),
) -> CounterpartyResponse:
    try:
        vendor = create_vendor(db, **vendor_data.model_dump())
        return CounterpartyResponse.model_validate(vendor)
    except LedgerError as e:
        raise ledger_http_error(e)


@router.get("/vendors", response_model=List[CounterpartyResponse])
def list_vendors_endpoint(db: Session = Depends(get_db)) -> List[CounterpartyResponse]:
    """Active vendors by name."""
    return [CounterpartyResponse.model_validate(v) for v in list_vendors(db)]
