"""Card lifecycle domain service."""

import logging
import secrets
from datetime import date
from decimal import Decimal
from typing import Optional

from bankledger.database.base import Database, CARDS
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_admin, require_owner_or_admin
from bankledger.domain.entities import Card, CARD_TYPES, DEBIT
from bankledger.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    card_account_mismatch,
    card_not_found,
    invalid_choice,
    user_not_found,
)
from bankledger.domain.notifications import (
    NotificationEmitter,
    CARD_ISSUED,
    CARD_STATUS_CHANGED,
    CARD_DELETED,
    CARD_LIMITS_CHANGED,
    CARD_FREEZE_CHANGED,
    CARD_NOTIFICATIONS_CHANGED,
    card_issued_message,
    card_status_message,
    card_removed_message,
)
from bankledger.logging_config import log_action
from bankledger.utils.amount_parser import positive_amount

logger = logging.getLogger(__name__)

CARD_NUMBER_LENGTH = 16
CVV_LENGTH = 3
VALIDITY_YEARS = 2


def _random_digits(count: int) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(count))


def expiry_for(issued_on: date) -> str:
    """Return the MM/YY expiry for a card issued on issued_on."""
    return f"{issued_on.month:02d}/{(issued_on.year + VALIDITY_YEARS) % 100:02d}"


def generate_card_details(today: Optional[date] = None) -> tuple[str, str, str]:
    """Generate (card_number, expiry_date, cvv) for a new card.

    The number is 16 independent random digits. It is not Luhn-valid and
    is not meant to be routable outside this system.
    """
    issued_on = today or date.today()
    return _random_digits(CARD_NUMBER_LENGTH), expiry_for(issued_on), _random_digits(CVV_LENGTH)


class CardService:
    """Service for issuing and mutating cards."""

    def __init__(
        self,
        db: Database,
        actor: Optional[Actor] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        """Initialize card service.

        Args:
            db: Database instance
            actor: Identity the operations run as (defaults to the system operator)
            emitter: Notification emitter (defaults to one on the same database)
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR
        self.emitter = emitter or NotificationEmitter(db)

    def _require_card(self, card_id: int) -> Card:
        card = self.db.get_card(card_id)
        if card is None:
            raise NotFoundError(card_not_found(card_id))
        return card

    def _log(self, message: str, action: str, card_id: int) -> None:
        log_action(logger, "info", message, user_id=self.actor.user_id,
                   action=action, resource=f"card:{card_id}")

    def issue_card(
        self,
        user_id: str,
        account_id: int,
        card_type: str = DEBIT,
        holder_name: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Card:
        """Issue a new card against one of the user's accounts.

        Args:
            user_id: Card owner
            account_id: Account the card draws on; must belong to user_id
            card_type: debit or credit
            holder_name: Name printed on the card (defaults to the owner's full name)
            today: Issuance date used for the expiry (defaults to today)

        Returns:
            Card entity

        Raises:
            ValidationError: If card type is invalid or the account is someone else's
            NotFoundError: If user or account does not exist
        """
        require_admin(self.actor, "issue cards")
        normalized = (card_type or "").strip().lower()
        if normalized not in CARD_TYPES:
            raise ValidationError(invalid_choice("card type", card_type, CARD_TYPES))
        card_type = normalized

        user = self.db.get_profile(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        if account.user_id != user_id:
            raise ValidationError(card_account_mismatch(account_id, user_id))

        if holder_name is None or not holder_name.strip():
            holder_name = user.full_name

        card_number, expiry_date, cvv = generate_card_details(today)
        card = self.db.insert(
            CARDS,
            {
                "user_id": user_id,
                "account_id": account_id,
                "card_number": card_number,
                "card_type": card_type,
                "expiry_date": expiry_date,
                "cvv": cvv,
                "card_holder_name": holder_name.strip(),
                "is_active": True,
            },
        )
        self._log(f"Issued {card_type} card {card.masked_number} to user {user_id}", "issue_card", card.id)

        title, message = card_issued_message(card)
        self.emitter.emit_quietly(CARD_ISSUED, user_id, title, message)
        return card

    def set_card_status(self, card_id: int, active: bool) -> Card:
        """Activate or deactivate a card and notify its owner."""
        require_admin(self.actor, "change card status")
        self._require_card(card_id)

        card = self.db.update(CARDS, card_id, {"is_active": active})
        self._log(f"Card {card.masked_number} {'activated' if active else 'deactivated'}",
                  "set_card_status", card_id)

        title, message = card_status_message(card, active)
        self.emitter.emit_quietly(CARD_STATUS_CHANGED, card.user_id, title, message)
        return card

    def set_card_limits(
        self,
        card_id: int,
        daily_limit: Optional[Decimal] = None,
        transaction_limit: Optional[Decimal] = None,
    ) -> Card:
        """Set or clear spending limits. None clears a limit.

        Raises:
            ValidationError: If a given limit is not positive
        """
        card = self._require_card(card_id)
        require_owner_or_admin(self.actor, card.user_id, f"change limits of card {card_id}")
        patch = {
            "daily_limit": None if daily_limit is None else positive_amount(daily_limit, "Daily limit"),
            "transaction_limit": (
                None if transaction_limit is None
                else positive_amount(transaction_limit, "Transaction limit")
            ),
        }

        card = self.db.update(CARDS, card_id, patch)
        self._log(f"Limits of card {card.masked_number} set to {patch}", "set_card_limits", card_id)
        self.emitter.emit_quietly(CARD_LIMITS_CHANGED, card.user_id, "Card Limits Updated",
                                  f"Spending limits changed for card ending in {card.last4}.")
        return card

    def set_card_freeze(self, card_id: int, frozen: bool, until: Optional[date] = None) -> Card:
        """Freeze a card, optionally until a date, or unfreeze it.

        Unfreezing always clears freeze_until.
        """
        card = self._require_card(card_id)
        require_owner_or_admin(self.actor, card.user_id, f"freeze card {card_id}")
        if frozen and until is not None and until < date.today():
            raise ValidationError(f"Freeze end date {until.isoformat()} is in the past")

        card = self.db.update(
            CARDS, card_id, {"is_frozen": frozen, "freeze_until": until if frozen else None}
        )
        self._log(f"Card {card.masked_number} {'frozen' if frozen else 'unfrozen'}", "set_card_freeze", card_id)
        self.emitter.emit_quietly(CARD_FREEZE_CHANGED, card.user_id,
                                  "Card Frozen" if frozen else "Card Unfrozen",
                                  f"Your card ending in {card.last4} has been "
                                  f"{'frozen' if frozen else 'unfrozen'}.")
        return card

    def set_card_notifications_enabled(self, card_id: int, enabled: bool) -> Card:
        """Turn per-card notifications on or off."""
        card = self._require_card(card_id)
        require_owner_or_admin(self.actor, card.user_id, f"change notifications of card {card_id}")

        card = self.db.update(CARDS, card_id, {"notifications_enabled": enabled})
        self._log(f"Notifications {'enabled' if enabled else 'disabled'} for card {card.masked_number}",
                  "set_card_notifications_enabled", card_id)
        self.emitter.emit_quietly(CARD_NOTIFICATIONS_CHANGED, card.user_id, "Card Notifications Updated",
                                  f"Notifications {'enabled' if enabled else 'disabled'} for card "
                                  f"ending in {card.last4}.")
        return card

    def delete_card(self, card_id: int) -> Card:
        """Delete a card and notify its owner.

        Returns:
            The deleted card
        """
        require_admin(self.actor, "delete cards")
        card = self._require_card(card_id)

        self.db.delete(CARDS, card_id)
        self._log(f"Deleted card {card.masked_number}", "delete_card", card_id)

        title, message = card_removed_message(card)
        self.emitter.emit_quietly(CARD_DELETED, card.user_id, title, message)
        return card

    def get_card(self, card_id: int) -> Card:
        """Get a card the actor may see.

        Raises:
            NotFoundError: If card not found
        """
        card = self._require_card(card_id)
        require_owner_or_admin(self.actor, card.user_id, f"view card {card_id}")
        return card

    def list_cards(self, user_id: Optional[str] = None) -> list[Card]:
        """List cards, optionally only those of one user.

        Non-admin actors only ever see their own cards.
        """
        if not self.actor.is_admin:
            user_id = self.actor.user_id
        filters = {"user_id": user_id} if user_id is not None else None
        return self.db.select(CARDS, filters)
