"""Ledger engine: applies monetary transactions to accounts.

Applying a transaction is a fixed sequence against the store:

1. load the account and refuse if it is frozen
2. derive the new balance from the transaction type
3. insert the transaction row
4. write the new balance (compare-and-swap on the account version)
5. notify the account owner

Nothing wraps these steps in a database transaction. A failure in step 3
leaves everything untouched; a failure in step 4 leaves a recorded
transaction whose effect never reached the balance. That window is logged
and reported to the caller but not compensated. Notification failures in
step 5 are logged and swallowed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, date, time, UTC
from decimal import Decimal
from typing import Any, Mapping, Optional

from bankledger.database.base import Database, ACCOUNTS, TRANSACTIONS
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_admin, require_owner_or_admin
from bankledger.domain.entities import (
    Account,
    Notification,
    Transaction,
    DEPOSIT,
    WITHDRAWAL,
    TRANSACTION_TYPES,
)
from bankledger.domain.errors import (
    AccountFrozenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    account_frozen,
    account_not_found,
    balance_out_of_range,
    immutable_transaction_fields,
    invalid_choice,
    stale_balance,
    transaction_not_found,
)
from bankledger.domain.notifications import (
    NotificationEmitter,
    TRANSACTION_APPLIED,
    transaction_message,
)
from bankledger.logging_config import log_action
from bankledger.utils.amount_parser import in_money_range, positive_amount

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"description"})
BALANCE_FIELDS = frozenset({"amount", "transaction_type", "created_at", "account_id"})


@dataclass(frozen=True)
class AppliedTransaction:
    """Outcome of a successfully applied transaction."""

    transaction: Transaction
    account: Account
    notification: Optional[Notification]

    @property
    def balance(self) -> Decimal:
        return self.account.balance


def compute_balance(balance: Decimal, transaction_type: str, amount: Decimal) -> Decimal:
    """Return the balance after applying one transaction.

    Withdrawals may drive the balance negative. Transfers are recorded
    events only and leave the balance unchanged.
    """
    if transaction_type == DEPOSIT:
        return balance + amount
    if transaction_type == WITHDRAWAL:
        return balance - amount
    return balance


class LedgerService:
    """Service for applying, editing and deleting transactions."""

    def __init__(
        self,
        db: Database,
        actor: Optional[Actor] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        """Initialize ledger service.

        Args:
            db: Database instance
            actor: Identity the operations run as (defaults to the system operator)
            emitter: Notification emitter (defaults to one on the same database)
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR
        self.emitter = emitter or NotificationEmitter(db)

    @staticmethod
    def _validate_type(transaction_type: str) -> str:
        normalized = (transaction_type or "").strip().lower()
        if normalized not in TRANSACTION_TYPES:
            raise ValidationError(invalid_choice("transaction type", transaction_type, TRANSACTION_TYPES))
        return normalized

    @staticmethod
    def _validate_description(description: Optional[str]) -> str:
        if description is None or not description.strip():
            raise ValidationError("Description is required")
        return description.strip()

    def apply_transaction(
        self,
        account_id: int,
        transaction_type: str,
        amount: Decimal,
        description: str,
        occurred_at: Optional[datetime] = None,
    ) -> AppliedTransaction:
        """Apply a transaction to an account.

        Args:
            account_id: Target account ID
            transaction_type: deposit, withdrawal or transfer
            amount: Positive amount
            description: What the transaction is for
            occurred_at: Backdated timestamp (defaults to now)

        Returns:
            AppliedTransaction with the stored transaction and the account
            carrying its new balance

        Raises:
            PermissionDeniedError: If the actor is not an administrator
            ValidationError: If amount, type or description is invalid, or the
                new balance would not fit the balance column
            NotFoundError: If the account does not exist
            AccountFrozenError: If the account is frozen
            PersistenceError: If the transaction or balance write failed
        """
        require_admin(self.actor, "record transactions")
        transaction_type = self._validate_type(transaction_type)
        amount = positive_amount(amount)
        description = self._validate_description(description)
        if isinstance(occurred_at, date) and not isinstance(occurred_at, datetime):
            occurred_at = datetime.combine(occurred_at, time.min)

        # Step 1: load account state
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if account.is_frozen:
            log_action(logger, "warning", account_frozen(account_id),
                       user_id=self.actor.user_id, action="apply_transaction",
                       resource=f"account:{account_id}")
            raise AccountFrozenError(account_frozen(account_id))

        # Step 2: derive the new balance
        new_balance = compute_balance(account.balance, transaction_type, amount)
        if not in_money_range(new_balance):
            raise ValidationError(balance_out_of_range(account_id, new_balance))

        # Step 3: record the transaction
        transaction = self.db.insert(
            TRANSACTIONS,
            {
                "account_id": account_id,
                "amount": amount,
                "transaction_type": transaction_type,
                "description": description,
                "created_at": occurred_at or datetime.now(UTC),
            },
        )

        # Step 4: persist the balance, guarded by the version read in step 1
        try:
            account = self.db.update(
                ACCOUNTS,
                account_id,
                {"balance": new_balance, "version": account.version + 1},
                expected={"version": account.version},
            )
        except PersistenceError as e:
            log_action(logger, "error",
                       f"Transaction {transaction.id} recorded but balance of account {account_id} not updated: {e}",
                       user_id=self.actor.user_id, action="apply_transaction",
                       resource=f"transaction:{transaction.id}",
                       extra={"expected_balance": str(new_balance)})
            raise PersistenceError(stale_balance(account_id)) from e

        log_action(logger, "info",
                   f"Applied {transaction_type} of {amount} to account {account_id}; balance now {account.balance}",
                   user_id=self.actor.user_id, action="apply_transaction",
                   resource=f"transaction:{transaction.id}")

        # Step 5: tell the owner
        title, message = transaction_message(transaction_type, amount, description)
        notification = self.emitter.emit_quietly(TRANSACTION_APPLIED, account.user_id, title, message)

        return AppliedTransaction(transaction=transaction, account=account, notification=notification)

    def edit_transaction(self, transaction_id: int, patch: Mapping[str, Any]) -> Transaction:
        """Edit the description of a recorded transaction.

        The account balance is never touched.

        Raises:
            ValidationError: If patch names any field other than description
            NotFoundError: If the transaction does not exist
        """
        require_admin(self.actor, "edit transactions")
        patch = dict(patch)

        locked = sorted(BALANCE_FIELDS & patch.keys())
        if locked:
            raise ValidationError(immutable_transaction_fields(locked))
        unknown = sorted(patch.keys() - EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit transaction field(s): {', '.join(unknown)}")

        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if not patch:
            return transaction

        patch["description"] = self._validate_description(patch["description"])
        updated = self.db.update(TRANSACTIONS, transaction_id, patch)
        log_action(logger, "info", f"Edited transaction {transaction_id}",
                   user_id=self.actor.user_id, action="edit_transaction",
                   resource=f"transaction:{transaction_id}")
        return updated

    def delete_transaction(self, transaction_id: int) -> Transaction:
        """Delete a transaction record.

        The balance effect of the transaction is not reversed.

        Returns:
            The deleted transaction

        Raises:
            NotFoundError: If the transaction does not exist
        """
        require_admin(self.actor, "delete transactions")
        transaction = self.db.get_transaction(transaction_id)
        if transaction is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.delete(TRANSACTIONS, transaction_id)
        log_action(logger, "warning",
                   f"Deleted transaction {transaction_id}; balance of account "
                   f"{transaction.account_id} was not adjusted",
                   user_id=self.actor.user_id, action="delete_transaction",
                   resource=f"transaction:{transaction_id}",
                   extra={"amount": str(transaction.amount), "type": transaction.transaction_type})
        return transaction

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        """List transactions newest first.

        Args:
            account_id: Optional account filter
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date

        Raises:
            NotFoundError: If account_id is given and does not exist
        """
        if account_id is not None:
            account = self.db.get_account(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            require_owner_or_admin(self.actor, account.user_id, f"view transactions of account {account_id}")
            transactions = self.db.select(TRANSACTIONS, {"account_id": account_id},
                                          order_by="created_at", descending=True)
        else:
            require_admin(self.actor, "list all transactions")
            transactions = self.db.select(TRANSACTIONS, order_by="created_at", descending=True)

        if start_date is not None:
            transactions = [t for t in transactions if t.created_at.date() >= start_date]
        if end_date is not None:
            transactions = [t for t in transactions if t.created_at.date() <= end_date]
        return transactions
