"""Domain model entities for bankledger.

These are pure data classes representing business concepts, independent of
database schema. Services only ever see these; the database layer maps its
rows onto them.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from typing import Optional

DEPOSIT = "deposit"
WITHDRAWAL = "withdrawal"
TRANSFER = "transfer"
TRANSACTION_TYPES = (DEPOSIT, WITHDRAWAL, TRANSFER)

DEBIT = "debit"
CREDIT = "credit"
CARD_TYPES = (DEBIT, CREDIT)


@dataclass(frozen=True)
class Profile:
    """Portal user (customer or administrator)."""

    id: str
    email: str
    first_name: str
    last_name: str
    is_admin: bool
    created_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Account:
    """Bank account domain entity.

    ``version`` is bumped on every balance write and used as the
    compare-and-swap token for the next one.
    """

    id: int
    user_id: str
    account_number: str
    account_type: str
    balance: Decimal
    is_frozen: bool
    is_active: bool
    version: int
    created_at: datetime


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    account_id: int
    amount: Decimal
    transaction_type: str
    description: str
    created_at: datetime


@dataclass(frozen=True)
class Card:
    """Payment card domain entity."""

    id: int
    user_id: str
    account_id: int
    card_number: str
    card_type: str
    expiry_date: str
    cvv: str
    card_holder_name: str
    is_active: bool
    daily_limit: Optional[Decimal]
    transaction_limit: Optional[Decimal]
    is_frozen: bool
    freeze_until: Optional[date]
    notifications_enabled: bool
    created_at: datetime

    @property
    def last4(self) -> str:
        return self.card_number[-4:]

    @property
    def masked_number(self) -> str:
        return f"**** **** **** {self.last4}"


@dataclass(frozen=True)
class Notification:
    """User-facing notification entity."""

    id: int
    user_id: str
    title: str
    message: str
    type: Optional[str]
    is_read: bool
    created_at: datetime


@dataclass(frozen=True)
class FinancialGoal:
    """Savings goal entity."""

    id: int
    user_id: str
    title: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: Optional[date]
    is_active: bool
    created_at: datetime

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def progress_percent(self) -> Decimal:
        """Progress towards the target, capped at 100 for display."""
        if self.target_amount <= 0:
            return Decimal("100")
        percent = self.current_amount / self.target_amount * 100
        return min(percent, Decimal("100"))
