"""Account domain service."""

import logging
import secrets
from decimal import Decimal
from typing import Optional

from bankledger.database.base import Database, ACCOUNTS
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_admin, require_owner_or_admin
from bankledger.domain.entities import Account as AccountEntity
from bankledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    balance_out_of_range,
    user_not_found,
)
from bankledger.logging_config import log_action
from bankledger.utils.amount_parser import CENT, in_money_range

logger = logging.getLogger(__name__)

ACCOUNT_TYPES = ("checking", "savings", "money_market", "business")


def generate_account_number() -> str:
    """Return 10 random decimal digits."""
    return "".join(secrets.choice("0123456789") for _ in range(10))


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database, actor: Optional[Actor] = None):
        """Initialize account service.

        Args:
            db: Database instance
            actor: Identity the operations run as (defaults to the system operator)
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR

    def open_account(
        self, user_id: str, account_type: str = "checking", initial_balance: Decimal = Decimal("0")
    ) -> AccountEntity:
        """Open a new account for a user.

        Args:
            user_id: Owning user ID
            account_type: One of ACCOUNT_TYPES
            initial_balance: Opening balance

        Returns:
            Account entity

        Raises:
            NotFoundError: If the user does not exist
            ValidationError: If the account type is unknown or the opening
                balance is not a storable amount
        """
        require_admin(self.actor, "open accounts")
        if account_type not in ACCOUNT_TYPES:
            raise ValidationError(
                f"Invalid account type '{account_type}'. Must be one of: {', '.join(ACCOUNT_TYPES)}"
            )
        try:
            initial_balance = Decimal(initial_balance).quantize(CENT)
        except (ArithmeticError, TypeError, ValueError):
            raise ValidationError(f"Invalid balance '{initial_balance}'") from None
        if not in_money_range(initial_balance):
            raise ValidationError(f"Opening balance {initial_balance} is outside the supported range")
        if self.db.get_profile(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        account = self.db.insert(
            ACCOUNTS,
            {
                "user_id": user_id,
                "account_number": generate_account_number(),
                "account_type": account_type,
                "balance": initial_balance,
            },
        )
        log_action(logger, "info", f"Opened account {account.id}",
                   user_id=self.actor.user_id, action="open_account", resource=f"account:{account.id}")
        return account

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID, or None if not found."""
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID, checking the actor may see it.

        Raises:
            NotFoundError: If account not found
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        require_owner_or_admin(self.actor, account.user_id, f"view account {account_id}")
        return account

    def list_accounts(self, user_id: Optional[str] = None) -> list[AccountEntity]:
        """List accounts, optionally only those of one user.

        Non-admin actors only ever see their own accounts.
        """
        if not self.actor.is_admin:
            user_id = self.actor.user_id
        filters = {"user_id": user_id} if user_id is not None else None
        return self.db.select(ACCOUNTS, filters)

    def set_frozen(self, account_id: int, frozen: bool) -> AccountEntity:
        """Freeze or unfreeze an account."""
        require_admin(self.actor, "freeze accounts")
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        account = self.db.update(ACCOUNTS, account_id, {"is_frozen": frozen})
        log_action(logger, "info", f"Account {account_id} {'frozen' if frozen else 'unfrozen'}",
                   user_id=self.actor.user_id, action="set_frozen", resource=f"account:{account_id}")
        return account

    def set_balance(self, account_id: int, balance: Decimal) -> AccountEntity:
        """Overwrite an account balance (direct admin edit).

        Uses the same version compare-and-swap as the ledger so a concurrent
        transaction cannot be silently overwritten.

        Raises:
            NotFoundError: If account not found
            ValidationError: If balance is not a storable amount
            PersistenceError: If the balance changed underneath the edit
        """
        require_admin(self.actor, "edit balances")
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        try:
            balance = Decimal(balance).quantize(CENT)
        except (ArithmeticError, TypeError, ValueError):
            raise ValidationError(f"Invalid balance '{balance}'") from None
        if not in_money_range(balance):
            raise ValidationError(balance_out_of_range(account_id, balance))

        updated = self.db.update(
            ACCOUNTS,
            account_id,
            {"balance": balance, "version": account.version + 1},
            expected={"version": account.version},
        )
        log_action(logger, "info", f"Balance of account {account_id} set to {balance}",
                   user_id=self.actor.user_id, action="set_balance", resource=f"account:{account_id}",
                   extra={"previous": str(account.balance)})
        return updated
