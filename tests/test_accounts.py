"""Tests for accounts and users."""

from decimal import Decimal
import pytest

from bankledger.domain.account import AccountService, generate_account_number
from bankledger.domain.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from bankledger.domain.users import UserService


class TestUsers:
    """Tests for UserService."""

    def test_create_user(self, customer):
        assert customer.email == "jane@bank.test"
        assert customer.full_name == "Jane Doe"
        assert customer.is_admin is False
        assert len(customer.id) == 36

    def test_email_normalized(self, user_service):
        user = user_service.create_user("  Mixed@Bank.Test ", "A", "B")
        assert user.email == "mixed@bank.test"

    def test_duplicate_email(self, user_service, customer):
        with pytest.raises(ConflictError):
            user_service.create_user("JANE@bank.test", "Jane", "Again")

    def test_invalid_email(self, user_service):
        with pytest.raises(ValidationError):
            user_service.create_user("not-an-email", "A", "B")

    def test_names_required(self, user_service):
        with pytest.raises(ValidationError):
            user_service.create_user("x@bank.test", "", "B")

    def test_list_ordered_by_last_name(self, user_service, customer, other_customer, admin_user):
        assert [u.last_name for u in user_service.list_users()] == ["Admin", "Doe", "Roe"]

    def test_customer_cannot_create(self, temp_db, customer_actor):
        with pytest.raises(PermissionDeniedError):
            UserService(temp_db, actor=customer_actor).create_user("y@bank.test", "Y", "Z")

    def test_require_user(self, user_service, customer):
        assert user_service.require_user(customer.id) == customer
        with pytest.raises(NotFoundError):
            user_service.require_user("nobody")


class TestAccounts:
    """Tests for AccountService."""

    def test_account_number_digits(self):
        number = generate_account_number()
        assert len(number) == 10 and number.isdigit()

    def test_open_account(self, sample_account, customer):
        assert sample_account.user_id == customer.id
        assert sample_account.balance == Decimal("500.00")
        assert sample_account.is_frozen is False
        assert sample_account.is_active is True
        assert sample_account.version == 0

    def test_open_account_invalid_type(self, account_service, customer):
        with pytest.raises(ValidationError, match="account type"):
            account_service.open_account(customer.id, "crypto")

    def test_open_account_missing_user(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.open_account("ghost")

    def test_freeze_and_unfreeze(self, account_service, sample_account):
        assert account_service.set_frozen(sample_account.id, True).is_frozen is True
        assert account_service.set_frozen(sample_account.id, False).is_frozen is False

    def test_set_balance_bumps_version(self, account_service, sample_account):
        account = account_service.set_balance(sample_account.id, Decimal("12.345"))

        assert account.balance == Decimal("12.34")
        assert account.version == sample_account.version + 1

    def test_set_balance_out_of_range(self, account_service, sample_account):
        with pytest.raises(ValidationError, match="outside the supported range"):
            account_service.set_balance(sample_account.id, Decimal("99999999999999.99"))
        assert account_service.get_account(sample_account.id).balance == Decimal("500.00")

    def test_open_account_balance_out_of_range(self, account_service, customer):
        with pytest.raises(ValidationError, match="outside the supported range"):
            account_service.open_account(customer.id, "savings", Decimal("-10000000000"))

    def test_set_balance_conflict(self, temp_db, account_service, sample_account, monkeypatch):
        """A balance edit racing another writer fails instead of overwriting it."""
        stale = sample_account
        monkeypatch.setattr(temp_db, "get_account", lambda account_id: stale)
        AccountService(temp_db).set_balance(sample_account.id, Decimal("1"))

        with pytest.raises(PersistenceError):
            account_service.set_balance(sample_account.id, Decimal("2"))

    def test_list_accounts_scoped(self, temp_db, account_service, customer_actor, other_customer, sample_account):
        account_service.open_account(other_customer.id, "savings")

        assert len(account_service.list_accounts()) == 2
        own = AccountService(temp_db, actor=customer_actor).list_accounts()
        assert [a.id for a in own] == [sample_account.id]

    def test_require_account_permissions(self, temp_db, other_actor, sample_account):
        with pytest.raises(PermissionDeniedError):
            AccountService(temp_db, actor=other_actor).require_account(sample_account.id)

    def test_customer_cannot_freeze(self, temp_db, customer_actor, sample_account):
        with pytest.raises(PermissionDeniedError):
            AccountService(temp_db, actor=customer_actor).set_frozen(sample_account.id, True)
