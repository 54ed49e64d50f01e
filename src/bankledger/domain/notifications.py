"""Notification emitter and the owning user's notification inbox."""

import logging
from decimal import Decimal
from typing import Optional

from bankledger.database.base import Database, NOTIFICATIONS
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_owner
from bankledger.domain.entities import Card, Notification
from bankledger.domain.errors import (
    NotFoundError,
    NotificationError,
    PersistenceError,
    notification_not_found,
)

logger = logging.getLogger(__name__)

TRANSACTION_APPLIED = "transaction_applied"
CARD_ISSUED = "card_issued"
CARD_STATUS_CHANGED = "card_status_changed"
CARD_DELETED = "card_deleted"
CARD_LIMITS_CHANGED = "card_limits_changed"
CARD_FREEZE_CHANGED = "card_freeze_changed"
CARD_NOTIFICATIONS_CHANGED = "card_notifications_changed"
GOAL_CONTRIBUTION = "goal_contribution"

# Which events produce a notification for the affected user.
NOTIFICATION_POLICY: dict[str, bool] = {
    TRANSACTION_APPLIED: True,
    CARD_ISSUED: True,
    CARD_STATUS_CHANGED: True,
    CARD_DELETED: True,
    CARD_LIMITS_CHANGED: False,
    CARD_FREEZE_CHANGED: False,
    CARD_NOTIFICATIONS_CHANGED: False,
    GOAL_CONTRIBUTION: False,
}


def transaction_message(transaction_type: str, amount: Decimal, description: str) -> tuple[str, str]:
    """Return (title, message) for an applied transaction."""
    return (
        f"New {transaction_type} Transaction",
        f"A {transaction_type} of ${amount:.2f} has been applied to your account: {description}",
    )


def card_issued_message(card: Card) -> tuple[str, str]:
    """Return (title, message) for a newly issued card."""
    return (
        "New Card Added",
        f"A new {card.card_type} card has been added to your account. "
        f"The card ends in {card.last4}.",
    )


def card_status_message(card: Card, active: bool) -> tuple[str, str]:
    """Return (title, message) for an activated or deactivated card."""
    if active:
        return "Card Activated", f"Your card ending in {card.last4} has been activated."
    return (
        "Card Deactivated",
        f"Your card ending in {card.last4} has been deactivated for security reasons.",
    )


def card_removed_message(card: Card) -> tuple[str, str]:
    """Return (title, message) for a deleted card."""
    return (
        "Card Removed",
        f"Your {card.card_type} card ending in {card.last4} has been removed from your account.",
    )


class NotificationEmitter:
    """Append-only writer of notification records.

    The emitter never touches any other table. Store failures surface as
    NotificationError so the triggering operation can decide to swallow them.
    """

    def __init__(self, db: Database, policy: Optional[dict[str, bool]] = None):
        """Initialize notification emitter.

        Args:
            db: Database instance
            policy: Event to should-notify table (defaults to NOTIFICATION_POLICY)
        """
        self.db = db
        self.policy = NOTIFICATION_POLICY if policy is None else policy

    def should_notify(self, event: str) -> bool:
        return self.policy.get(event, False)

    def emit(self, event: str, user_id: str, title: str, message: str) -> Optional[Notification]:
        """Record a notification for user_id if the policy enables event.

        Returns:
            The created notification, or None for silent events

        Raises:
            NotificationError: If the notification could not be stored
        """
        if not self.should_notify(event):
            logger.debug("Event %s is silent, no notification for %s", event, user_id)
            return None
        try:
            return self.db.insert(
                NOTIFICATIONS,
                {"user_id": user_id, "title": title, "message": message, "type": event},
            )
        except PersistenceError as e:
            raise NotificationError(f"Could not notify user {user_id} of {event}: {e}") from e

    def emit_quietly(self, event: str, user_id: str, title: str, message: str) -> Optional[Notification]:
        """Like emit, but log and drop NotificationError."""
        try:
            return self.emit(event, user_id, title, message)
        except NotificationError as e:
            logger.warning("Notification dropped: %s", e)
            return None


class NotificationService:
    """Inbox operations for the user who owns the notifications."""

    def __init__(self, db: Database, actor: Optional[Actor] = None):
        """Initialize notification service.

        Args:
            db: Database instance
            actor: User the inbox is accessed as
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR

    def _require_notification(self, notification_id: int) -> Notification:
        notification = self.db.get_notification(notification_id)
        if notification is None:
            raise NotFoundError(notification_not_found(notification_id))
        return notification

    def list_notifications(self, user_id: str, unread_only: bool = False) -> list[Notification]:
        """List a user's notifications, newest first."""
        require_owner(self.actor, user_id, "read these notifications")
        filters = {"user_id": user_id}
        if unread_only:
            filters["is_read"] = False
        return self.db.select(NOTIFICATIONS, filters, order_by="created_at", descending=True)

    def unread_count(self, user_id: str) -> int:
        return len(self.list_notifications(user_id, unread_only=True))

    def mark_read(self, notification_id: int) -> Notification:
        """Mark one notification as read. Already-read ones are left alone."""
        notification = self._require_notification(notification_id)
        require_owner(self.actor, notification.user_id, "mark this notification as read")
        if notification.is_read:
            return notification
        return self.db.update(NOTIFICATIONS, notification_id, {"is_read": True})

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of user_id as read.

        Returns:
            Number of notifications changed
        """
        unread = self.list_notifications(user_id, unread_only=True)
        for notification in unread:
            self.db.update(NOTIFICATIONS, notification.id, {"is_read": True})
        return len(unread)

    def delete_notification(self, notification_id: int) -> None:
        """Delete a notification owned by the acting user."""
        notification = self._require_notification(notification_id)
        require_owner(self.actor, notification.user_id, "delete this notification")
        self.db.delete(NOTIFICATIONS, notification_id)
