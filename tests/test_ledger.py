"""Tests for the ledger engine."""

import logging
from datetime import date, datetime
from decimal import Decimal
import pytest

from bankledger.database.base import TRANSACTIONS, NOTIFICATIONS
from bankledger.domain.account import AccountService
from bankledger.domain.errors import (
    AccountFrozenError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from bankledger.domain.ledger import LedgerService, compute_balance


def _balance(temp_db, account_id):
    return temp_db.get_account(account_id).balance


class TestComputeBalance:
    """Tests for balance derivation."""

    def test_deposit_adds(self):
        assert compute_balance(Decimal("500.00"), "deposit", Decimal("125.50")) == Decimal("625.50")

    def test_withdrawal_subtracts(self):
        assert compute_balance(Decimal("500.00"), "withdrawal", Decimal("20.00")) == Decimal("480.00")

    def test_withdrawal_may_go_negative(self):
        assert compute_balance(Decimal("10.00"), "withdrawal", Decimal("25.00")) == Decimal("-15.00")

    def test_transfer_leaves_balance(self):
        assert compute_balance(Decimal("500.00"), "transfer", Decimal("99.00")) == Decimal("500.00")


class TestApplyTransaction:
    """Tests for LedgerService.apply_transaction."""

    def test_deposit_scenario(self, temp_db, ledger, sample_account, customer):
        """500.00 + deposit 125.50 gives 625.50, one row and one notification."""
        applied = ledger.apply_transaction(sample_account.id, "deposit", Decimal("125.50"), "Payroll")

        assert applied.balance == Decimal("625.50")
        assert _balance(temp_db, sample_account.id) == Decimal("625.50")

        rows = temp_db.select(TRANSACTIONS, {"account_id": sample_account.id})
        assert len(rows) == 1
        assert rows[0].transaction_type == "deposit"
        assert rows[0].amount == Decimal("125.50")
        assert rows[0].description == "Payroll"

        notifications = temp_db.select(NOTIFICATIONS, {"user_id": customer.id})
        assert len(notifications) == 1
        assert notifications[0].title == "New deposit Transaction"
        assert notifications[0].message == (
            "A deposit of $125.50 has been applied to your account: Payroll"
        )
        assert notifications[0].is_read is False
        assert applied.notification == notifications[0]

    def test_withdrawal_can_overdraw(self, temp_db, ledger, sample_account):
        applied = ledger.apply_transaction(sample_account.id, "withdrawal", Decimal("700.00"), "Rent")

        assert applied.balance == Decimal("-200.00")
        assert _balance(temp_db, sample_account.id) == Decimal("-200.00")

    def test_transfer_is_recorded_without_moving_funds(self, temp_db, ledger, sample_account):
        applied = ledger.apply_transaction(sample_account.id, "transfer", Decimal("250.00"), "To savings")

        assert applied.transaction.transaction_type == "transfer"
        assert _balance(temp_db, sample_account.id) == Decimal("500.00")
        assert len(temp_db.select(TRANSACTIONS)) == 1

    def test_repeated_deposits_accumulate(self, temp_db, ledger, sample_account):
        amounts = [Decimal("0.01"), Decimal("10"), Decimal("99.99"), Decimal("1234.56")]
        for amount in amounts:
            ledger.apply_transaction(sample_account.id, "deposit", amount, "Top up")

        assert _balance(temp_db, sample_account.id) == Decimal("500.00") + sum(amounts)

    def test_type_is_case_insensitive(self, ledger, sample_account):
        applied = ledger.apply_transaction(sample_account.id, "Deposit", Decimal("1.00"), "x")
        assert applied.transaction.transaction_type == "deposit"

    def test_string_amount_accepted(self, ledger, sample_account):
        applied = ledger.apply_transaction(sample_account.id, "deposit", "125.50", "Cash")
        assert applied.balance == Decimal("625.50")

    def test_version_bumped_on_each_write(self, temp_db, ledger, sample_account):
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("1"), "a")
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("1"), "b")

        assert temp_db.get_account(sample_account.id).version == sample_account.version + 2

    def test_backdated_timestamp(self, ledger, sample_account):
        when = datetime(2024, 1, 15, 9, 30)
        applied = ledger.apply_transaction(sample_account.id, "deposit", Decimal("5"), "Old", occurred_at=when)

        assert applied.transaction.created_at == when

    def test_backdated_date_becomes_midnight(self, ledger, sample_account):
        applied = ledger.apply_transaction(
            sample_account.id, "deposit", Decimal("5"), "Old", occurred_at=date(2024, 2, 1)
        )

        assert applied.transaction.created_at == datetime(2024, 2, 1, 0, 0)

    def test_frozen_account_rejected(self, temp_db, ledger, account_service, sample_account, customer):
        """A frozen account rejects every type and nothing is written."""
        account_service.set_frozen(sample_account.id, True)

        for transaction_type in ("deposit", "withdrawal", "transfer"):
            with pytest.raises(AccountFrozenError):
                ledger.apply_transaction(sample_account.id, transaction_type, Decimal("10"), "Blocked")

        assert _balance(temp_db, sample_account.id) == Decimal("500.00")
        assert temp_db.select(TRANSACTIONS) == []
        assert temp_db.select(NOTIFICATIONS, {"user_id": customer.id}) == []

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), "abc", None, "NaN", 0.001])
    def test_non_positive_amount_rejected(self, temp_db, ledger, sample_account, amount):
        with pytest.raises(ValidationError):
            ledger.apply_transaction(sample_account.id, "deposit", amount, "Bad")

        assert temp_db.select(TRANSACTIONS) == []
        assert _balance(temp_db, sample_account.id) == Decimal("500.00")

    def test_largest_amount_stored_exactly(self, temp_db, ledger, account_service, customer):
        account = account_service.open_account(customer.id)

        applied = ledger.apply_transaction(account.id, "deposit", Decimal("9999999999.99"), "Max")

        assert temp_db.get_transaction(applied.transaction.id).amount == Decimal("9999999999.99")
        assert temp_db.get_account(account.id).balance == Decimal("9999999999.99")

    @pytest.mark.parametrize("amount", [Decimal("10000000000.00"), Decimal("99999999999999.99")])
    def test_amount_beyond_column_rejected(self, temp_db, ledger, sample_account, amount):
        """Amounts the money columns cannot hold are refused before anything is written."""
        with pytest.raises(ValidationError, match="must not exceed"):
            ledger.apply_transaction(sample_account.id, "deposit", amount, "Big")

        assert temp_db.select(TRANSACTIONS) == []
        assert _balance(temp_db, sample_account.id) == Decimal("500.00")

    def test_balance_overflow_rejected(self, temp_db, ledger, account_service, sample_account):
        account_service.set_balance(sample_account.id, Decimal("9999999999.00"))

        with pytest.raises(ValidationError, match="outside the supported range"):
            ledger.apply_transaction(sample_account.id, "deposit", Decimal("1.00"), "Overflow")

        assert temp_db.select(TRANSACTIONS) == []
        assert _balance(temp_db, sample_account.id) == Decimal("9999999999.00")

    def test_balance_underflow_rejected(self, temp_db, ledger, account_service, sample_account):
        account_service.set_balance(sample_account.id, Decimal("-9999999999.00"))

        with pytest.raises(ValidationError, match="outside the supported range"):
            ledger.apply_transaction(sample_account.id, "withdrawal", Decimal("5.00"), "Underflow")

        assert temp_db.select(TRANSACTIONS) == []

    def test_transfer_near_limit_allowed(self, ledger, account_service, sample_account):
        account_service.set_balance(sample_account.id, Decimal("9999999999.99"))

        applied = ledger.apply_transaction(sample_account.id, "transfer", Decimal("100.00"), "Moved")

        assert applied.balance == Decimal("9999999999.99")

    def test_invalid_type_rejected(self, temp_db, ledger, sample_account):
        with pytest.raises(ValidationError, match="transaction type"):
            ledger.apply_transaction(sample_account.id, "refund", Decimal("10"), "Bad")
        assert temp_db.select(TRANSACTIONS) == []

    @pytest.mark.parametrize("description", ["", "   ", None])
    def test_description_required(self, ledger, sample_account, description):
        with pytest.raises(ValidationError, match="Description"):
            ledger.apply_transaction(sample_account.id, "deposit", Decimal("10"), description)

    def test_missing_account(self, ledger):
        with pytest.raises(NotFoundError, match="Account 999 not found"):
            ledger.apply_transaction(999, "deposit", Decimal("10"), "Nowhere")

    def test_customer_cannot_apply(self, temp_db, customer_actor, sample_account):
        ledger = LedgerService(temp_db, actor=customer_actor)

        with pytest.raises(PermissionDeniedError):
            ledger.apply_transaction(sample_account.id, "deposit", Decimal("10"), "Self-service")
        assert _balance(temp_db, sample_account.id) == Decimal("500.00")

    def test_transaction_insert_failure_leaves_balance(self, temp_db, ledger, sample_account, break_table):
        break_table("insert", "transactions")

        with pytest.raises(PersistenceError):
            ledger.apply_transaction(sample_account.id, "deposit", Decimal("10"), "Lost")

        assert _balance(temp_db, sample_account.id) == Decimal("500.00")

    def test_balance_write_failure_keeps_transaction(self, temp_db, ledger, sample_account, break_table, caplog):
        """Step 4 failing leaves the recorded transaction without its effect."""
        break_table("update", "accounts")

        with caplog.at_level(logging.ERROR, logger="bankledger"):
            with pytest.raises(PersistenceError, match="balance was not updated"):
                ledger.apply_transaction(sample_account.id, "deposit", Decimal("10"), "Half done")

        assert len(temp_db.select(TRANSACTIONS)) == 1
        assert _balance(temp_db, sample_account.id) == Decimal("500.00")
        assert any("not updated" in record.getMessage() for record in caplog.records)

    def test_concurrent_balance_change_detected(self, temp_db, ledger, sample_account, monkeypatch):
        """A writer landing between read and write makes the CAS miss instead of losing its update."""
        original_insert = temp_db.insert

        def insert_then_interfere(table, values):
            row = original_insert(table, values)
            if table == TRANSACTIONS:
                AccountService(temp_db).set_balance(sample_account.id, Decimal("42.00"))
            return row

        monkeypatch.setattr(temp_db, "insert", insert_then_interfere)

        with pytest.raises(PersistenceError):
            ledger.apply_transaction(sample_account.id, "deposit", Decimal("10"), "Racing")

        assert _balance(temp_db, sample_account.id) == Decimal("42.00")

    def test_notification_failure_does_not_fail_transaction(
        self, temp_db, ledger, sample_account, break_table, caplog
    ):
        break_table("insert", "notifications")

        with caplog.at_level(logging.WARNING, logger="bankledger"):
            applied = ledger.apply_transaction(sample_account.id, "deposit", Decimal("10"), "Quiet")

        assert applied.notification is None
        assert applied.balance == Decimal("510.00")
        assert len(temp_db.select(TRANSACTIONS)) == 1
        assert any("Notification dropped" in record.getMessage() for record in caplog.records)


class TestEditTransaction:
    """Tests for LedgerService.edit_transaction."""

    @pytest.fixture
    def recorded(self, ledger, sample_account):
        return ledger.apply_transaction(sample_account.id, "deposit", Decimal("100.00"), "Original").transaction

    def test_edit_description(self, temp_db, ledger, sample_account, recorded):
        updated = ledger.edit_transaction(recorded.id, {"description": "Corrected"})

        assert updated.description == "Corrected"
        assert updated.amount == recorded.amount
        assert updated.created_at == recorded.created_at
        assert _balance(temp_db, sample_account.id) == Decimal("600.00")

    @pytest.mark.parametrize(
        "patch",
        [
            {"amount": Decimal("1.00")},
            {"transaction_type": "withdrawal"},
            {"created_at": datetime(2020, 1, 1)},
            {"account_id": 2},
            {"description": "ok", "amount": Decimal("5")},
        ],
    )
    def test_balance_fields_rejected(self, temp_db, ledger, sample_account, recorded, patch):
        with pytest.raises(ValidationError, match="balance integrity"):
            ledger.edit_transaction(recorded.id, patch)

        unchanged = temp_db.get_transaction(recorded.id)
        assert unchanged == recorded
        assert _balance(temp_db, sample_account.id) == Decimal("600.00")

    def test_unknown_field_rejected(self, ledger, recorded):
        with pytest.raises(ValidationError, match="notes"):
            ledger.edit_transaction(recorded.id, {"notes": "x"})

    def test_empty_patch_is_noop(self, ledger, recorded):
        assert ledger.edit_transaction(recorded.id, {}) == recorded

    def test_missing_transaction(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.edit_transaction(12345, {"description": "x"})

    def test_customer_cannot_edit(self, temp_db, customer_actor, recorded):
        with pytest.raises(PermissionDeniedError):
            LedgerService(temp_db, actor=customer_actor).edit_transaction(recorded.id, {"description": "x"})


class TestDeleteTransaction:
    """Tests for LedgerService.delete_transaction."""

    def test_delete_does_not_reverse_balance(self, temp_db, ledger, sample_account):
        txn = ledger.apply_transaction(sample_account.id, "deposit", Decimal("100.00"), "Bonus").transaction

        deleted = ledger.delete_transaction(txn.id)

        assert deleted.id == txn.id
        assert temp_db.get_transaction(txn.id) is None
        assert _balance(temp_db, sample_account.id) == Decimal("600.00")

    def test_delete_missing(self, ledger):
        with pytest.raises(NotFoundError, match="Transaction 77 not found"):
            ledger.delete_transaction(77)


class TestListTransactions:
    """Tests for LedgerService.list_transactions."""

    def test_newest_first(self, ledger, sample_account):
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("1"), "old", datetime(2024, 1, 1))
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("2"), "new", datetime(2024, 3, 1))
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("3"), "mid", datetime(2024, 2, 1))

        descriptions = [t.description for t in ledger.list_transactions(sample_account.id)]
        assert descriptions == ["new", "mid", "old"]

    def test_date_filter(self, ledger, sample_account):
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("1"), "jan", datetime(2024, 1, 10))
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("2"), "feb", datetime(2024, 2, 10))

        result = ledger.list_transactions(sample_account.id, start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))
        assert [t.description for t in result] == ["feb"]

    def test_owner_may_list_own_account(self, temp_db, ledger, customer_actor, sample_account):
        ledger.apply_transaction(sample_account.id, "deposit", Decimal("1"), "mine")

        own = LedgerService(temp_db, actor=customer_actor).list_transactions(sample_account.id)
        assert len(own) == 1

    def test_other_user_denied(self, temp_db, other_actor, sample_account):
        with pytest.raises(PermissionDeniedError):
            LedgerService(temp_db, actor=other_actor).list_transactions(sample_account.id)

    def test_customer_cannot_list_everything(self, temp_db, customer_actor):
        with pytest.raises(PermissionDeniedError):
            LedgerService(temp_db, actor=customer_actor).list_transactions()
