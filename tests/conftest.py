"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created before each test and dropped
after it, so every test starts from an empty ledger.
"""

import os
import uuid
from decimal import Decimal

# Must be set before the application modules read their settings.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_app.db")
os.environ.setdefault("LOG_JSON", "true")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pharmacy_ledger.logging_config import reset_logging
from pharmacy_ledger.main import app
from pharmacy_ledger.models.base import Base, get_db, UnitOfWork
from pharmacy_ledger.models.enums import AccountType
from pharmacy_ledger.schemas.account import AccountCreate
from pharmacy_ledger.schemas.client import ClientCreate
from pharmacy_ledger.services.account_service import AccountService
from pharmacy_ledger.services.client_service import ClientService


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

VENDOR_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    reset_logging()
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """The sessionmaker itself, for tests that need several sessions."""
    return TestSessionLocal


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def uow(db_session):
    return UnitOfWork(db_session)


@pytest.fixture
def vendor_id():
    return VENDOR_ID


@pytest.fixture
def make_account(db_session, uow, vendor_id):
    """Factory: open a vendor account with an optional opening balance."""
    def _make(name="Main Till", balance="0", is_active=True):
        return AccountService(db_session).create_account(uow, AccountCreate(
            vendor_id=vendor_id,
            account_name=name,
            account_type=AccountType.CASH,
            opening_balance=Decimal(balance),
            is_active=is_active,
        ))
    return _make


@pytest.fixture
def make_client(db_session, uow, vendor_id):
    def _make(name="Acme Clinic", **fields):
        return ClientService(db_session).create_client(uow, ClientCreate(
            vendor_id=vendor_id, name=name, **fields,
        ))
    return _make


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
