"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so services never see ORM objects
and the generic row interface can return typed entities for any table.
"""

from typing import Any, Callable

from bankledger.domain import entities as domain
from bankledger.database.models import (
    Base,
    Profile as ORMProfile,
    Account as ORMAccount,
    Transaction as ORMTransaction,
    Card as ORMCard,
    Notification as ORMNotification,
    FinancialGoal as ORMFinancialGoal,
)


def profile_to_domain(orm_profile: ORMProfile) -> domain.Profile:
    """Convert SQLAlchemy Profile model to domain Profile entity."""
    return domain.Profile(
        id=orm_profile.id,
        email=orm_profile.email,
        first_name=orm_profile.first_name,
        last_name=orm_profile.last_name,
        is_admin=orm_profile.is_admin,
        created_at=orm_profile.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        account_number=orm_account.account_number,
        account_type=orm_account.account_type,
        balance=orm_account.balance,
        is_frozen=orm_account.is_frozen,
        is_active=orm_account.is_active,
        version=orm_account.version,
        created_at=orm_account.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        amount=orm_transaction.amount,
        transaction_type=orm_transaction.transaction_type,
        description=orm_transaction.description,
        created_at=orm_transaction.created_at,
    )


def card_to_domain(orm_card: ORMCard) -> domain.Card:
    """Convert SQLAlchemy Card model to domain Card entity."""
    return domain.Card(
        id=orm_card.id,
        user_id=orm_card.user_id,
        account_id=orm_card.account_id,
        card_number=orm_card.card_number,
        card_type=orm_card.card_type,
        expiry_date=orm_card.expiry_date,
        cvv=orm_card.cvv,
        card_holder_name=orm_card.card_holder_name,
        is_active=orm_card.is_active,
        daily_limit=orm_card.daily_limit,
        transaction_limit=orm_card.transaction_limit,
        is_frozen=orm_card.is_frozen,
        freeze_until=orm_card.freeze_until,
        notifications_enabled=orm_card.notifications_enabled,
        created_at=orm_card.created_at,
    )


def notification_to_domain(orm_notification: ORMNotification) -> domain.Notification:
    """Convert SQLAlchemy Notification model to domain Notification entity."""
    return domain.Notification(
        id=orm_notification.id,
        user_id=orm_notification.user_id,
        title=orm_notification.title,
        message=orm_notification.message,
        type=orm_notification.type,
        is_read=orm_notification.is_read,
        created_at=orm_notification.created_at,
    )


def goal_to_domain(orm_goal: ORMFinancialGoal) -> domain.FinancialGoal:
    """Convert SQLAlchemy FinancialGoal model to domain FinancialGoal entity."""
    return domain.FinancialGoal(
        id=orm_goal.id,
        user_id=orm_goal.user_id,
        title=orm_goal.title,
        target_amount=orm_goal.target_amount,
        current_amount=orm_goal.current_amount,
        deadline=orm_goal.deadline,
        is_active=orm_goal.is_active,
        created_at=orm_goal.created_at,
    )


# Table name -> (ORM model, mapper)
TABLES: dict[str, tuple[type[Base], Callable[[Any], Any]]] = {
    "profiles": (ORMProfile, profile_to_domain),
    "accounts": (ORMAccount, account_to_domain),
    "transactions": (ORMTransaction, transaction_to_domain),
    "cards": (ORMCard, card_to_domain),
    "notifications": (ORMNotification, notification_to_domain),
    "financial_goals": (ORMFinancialGoal, goal_to_domain),
}
