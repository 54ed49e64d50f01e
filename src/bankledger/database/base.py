"""Abstract database interface.

Every store the services touch (profiles, accounts, transactions, cards,
notifications, financial goals) is reached through the same four row
operations. Typed lookups are thin conveniences on top of them.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any, Mapping

# Import entities directly to avoid circular import through domain/__init__.py
from bankledger.domain.entities import (
    Profile,
    Account,
    Transaction,
    Card,
    Notification,
    FinancialGoal,
)

PROFILES = "profiles"
ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"
CARDS = "cards"
NOTIFICATIONS = "notifications"
FINANCIAL_GOALS = "financial_goals"


class Database(ABC):
    """Abstract database interface for bankledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Generic row operations
    @abstractmethod
    def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Any]:
        """Return domain entities from table whose columns equal filters."""
        pass

    @abstractmethod
    def insert(self, table: str, values: Mapping[str, Any]) -> Any:
        """Insert a row and return it as a domain entity."""
        pass

    @abstractmethod
    def update(
        self,
        table: str,
        row_id: Any,
        patch: Mapping[str, Any],
        expected: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Apply patch to a row and return the updated entity.

        When expected is given the write only happens if every listed column
        still holds the expected value (compare-and-swap). A write that
        matches no row raises PersistenceError.
        """
        pass

    @abstractmethod
    def delete(self, table: str, row_id: Any) -> None:
        """Delete a row. Raises NotFoundError if it does not exist."""
        pass

    def get(self, table: str, row_id: Any) -> Optional[Any]:
        """Get one row by primary key, or None."""
        rows = self.select(table, {"id": row_id})
        return rows[0] if rows else None

    # Typed lookups
    def get_profile(self, user_id: str) -> Optional[Profile]:
        """Get user profile by ID."""
        return self.get(PROFILES, user_id)

    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        return self.get(ACCOUNTS, account_id)

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        return self.get(TRANSACTIONS, transaction_id)

    def get_card(self, card_id: int) -> Optional[Card]:
        """Get card by ID."""
        return self.get(CARDS, card_id)

    def get_notification(self, notification_id: int) -> Optional[Notification]:
        """Get notification by ID."""
        return self.get(NOTIFICATIONS, notification_id)

    def get_goal(self, goal_id: int) -> Optional[FinancialGoal]:
        """Get financial goal by ID."""
        return self.get(FINANCIAL_GOALS, goal_id)
