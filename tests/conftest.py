"""Shared pytest fixtures for bankledger tests."""

import logging
import tempfile
import os
from decimal import Decimal
import pytest

from bankledger.database.factories import create_sqlite_database
from bankledger.domain.account import AccountService
from bankledger.domain.authorization import Actor
from bankledger.domain.cards import CardService
from bankledger.domain.errors import PersistenceError
from bankledger.domain.goals import GoalService
from bankledger.domain.ledger import LedgerService
from bankledger.domain.notifications import NotificationService
from bankledger.domain.users import UserService
from bankledger.logging_config import LOGGER_NAME


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
def reset_logging():
    """Undo CLI logging setup so handlers never outlive a CliRunner stream."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def user_service(temp_db):
    return UserService(temp_db)


@pytest.fixture
def account_service(temp_db):
    return AccountService(temp_db)


@pytest.fixture
def ledger(temp_db):
    return LedgerService(temp_db)


@pytest.fixture
def card_service(temp_db):
    return CardService(temp_db)


@pytest.fixture
def goal_service(temp_db):
    return GoalService(temp_db)


@pytest.fixture
def admin_user(user_service):
    """An administrator profile."""
    return user_service.create_user("admin@bank.test", "Ada", "Admin", is_admin=True)


@pytest.fixture
def customer(user_service):
    """A customer profile named Jane Doe."""
    return user_service.create_user("jane@bank.test", "Jane", "Doe")


@pytest.fixture
def other_customer(user_service):
    """A second, unrelated customer."""
    return user_service.create_user("john@bank.test", "John", "Roe")


@pytest.fixture
def customer_actor(customer):
    return Actor(user_id=customer.id, is_admin=False)


@pytest.fixture
def other_actor(other_customer):
    return Actor(user_id=other_customer.id, is_admin=False)


@pytest.fixture
def sample_account(account_service, customer):
    """Customer checking account holding 500.00."""
    return account_service.open_account(customer.id, "checking", Decimal("500.00"))


@pytest.fixture
def sample_card(card_service, customer, sample_account):
    """Debit card on the sample account."""
    return card_service.issue_card(customer.id, sample_account.id)


@pytest.fixture
def sample_goal(goal_service, customer):
    """Goal of 1000.00 with nothing saved."""
    return goal_service.create_goal(customer.id, "Vacation", Decimal("1000.00"))


@pytest.fixture
def inbox(temp_db, customer_actor):
    """Notification inbox as the customer."""
    return NotificationService(temp_db, actor=customer_actor)


@pytest.fixture
def break_table(temp_db, monkeypatch):
    """Make one row operation fail for one table.

    Usage: break_table("update", "accounts")
    """

    def _break(method: str, table: str):
        original = getattr(temp_db, method)

        def failing(name, *args, **kwargs):
            if name == table:
                raise PersistenceError(f"{method} on {table} failed")
            return original(name, *args, **kwargs)

        monkeypatch.setattr(temp_db, method, failing)

    return _break


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
