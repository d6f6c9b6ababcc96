"""Shared fixtures.

Tests run against a throwaway SQLite file; DATABASE_URL must be set before
anything under ``app`` is imported because settings and the engine are
created at import time.
"""

import os
import tempfile
from datetime import date
from decimal import Decimal

_db_dir = tempfile.mkdtemp(prefix="sitebooks-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"

import pytest
from sqlalchemy.orm import Session

from app.db.session import SessionLocal, engine
from app.domain.accounting.enums import AccountType
from app.domain.accounting.ledger_service import create_account
from app.domain.accounting.invoice_service import create_customer, create_vendor
from app.domain.projects.project_service import create_project
from app.models import Base


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test an empty schema."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db() -> Session:
    """Provide database session for tests."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def accounts(db: Session):
    """A small chart of accounts keyed by short name."""
    return {
        "cash": create_account(db, "1000", "Cash", AccountType.ASSET),
        "receivable": create_account(db, "1200", "Accounts Receivable", AccountType.ASSET),
        "payable": create_account(db, "2000", "Accounts Payable", AccountType.LIABILITY),
        "equity": create_account(db, "3000", "Owner Equity", AccountType.EQUITY),
        "revenue": create_account(db, "4000", "Contract Revenue", AccountType.REVENUE),
        "expense": create_account(db, "5000", "Subcontractor Costs", AccountType.EXPENSE),
    }


@pytest.fixture
def customer(db: Session):
    return create_customer(db, code="C-001", name="Harbor Developments")


@pytest.fixture
def vendor(db: Session):
    return create_vendor(db, code="V-001", name="Northside Concrete")


@pytest.fixture
def project(db: Session):
    return create_project(
        db,
        project_code="PRJ-001",
        project_name="Riverside Tower",
        budget=Decimal("100000.00"),
        start_date=date(2024, 1, 1),
    )
