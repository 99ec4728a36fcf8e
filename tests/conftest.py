"""Shared pytest fixtures for passbook tests."""

import logging
import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest
from click.testing import CliRunner

from passbook.database.factories import create_sqlite_database
from passbook.domain.account import AccountService
from passbook.domain.recipient import RecipientService
from passbook.domain.transaction import TransactionService

# Validation date used by service-level tests
TODAY = date(2024, 6, 15)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handler changes made by setup_logging when the CLI runs."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cli_runner():
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def recipient_service(temp_db):
    """Create a RecipientService with a temporary database."""
    return RecipientService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService whose clock is fixed at TODAY."""
    return TransactionService(temp_db, today=lambda: TODAY)


@pytest.fixture
def current_account(account_service):
    """A current account holding 10,000.00."""
    account_id = account_service.create_account(
        name="HDFC Current",
        account_type="current",
        opening_balance=Decimal("10000.00"),
        bank_name="HDFC Bank",
        account_number="50100012345678",
    )
    return account_service.get_account(account_id)


@pytest.fixture
def savings_account(account_service):
    """An empty savings account."""
    account_id = account_service.create_account(
        name="ICICI Savings", account_type="savings", bank_name="ICICI Bank"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def supplier(recipient_service, current_account):
    """A supplier recipient scoped to the current account."""
    recipient_id = recipient_service.create_recipient(
        name="Acme Traders", recipient_type="supplier", account_id=current_account.id
    )
    return recipient_service.get_recipient(recipient_id)


def balance_of(db, account_id):
    """Read an account's current balance straight from the database."""
    return db.get_account(account_id).current_balance
