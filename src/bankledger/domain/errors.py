"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class AccountFrozenError(DomainError):
    """Mutation attempted against a frozen account."""


class PermissionDeniedError(DomainError):
    """The acting user lacks the capability for this operation."""


class PersistenceError(DomainError):
    """The underlying store failed to read or write a row."""


class NotificationError(DomainError):
    """A notification could not be recorded.

    Never propagated as a failure of the operation that triggered it.
    """


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def user_not_found(user_id: str) -> str:
    """Return message for missing user profile."""
    return f"User {user_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def card_not_found(card_id: int) -> str:
    """Return message for missing card."""
    return f"Card {card_id} not found"


def goal_not_found(goal_id: int) -> str:
    """Return message for missing financial goal."""
    return f"Financial goal {goal_id} not found"


def notification_not_found(notification_id: int) -> str:
    """Return message for missing notification."""
    return f"Notification {notification_id} not found"


def account_frozen(account_id: int) -> str:
    """Return message when a transaction targets a frozen account."""
    return f"Cannot process transactions for frozen account {account_id}"


def amount_not_positive(field: str = "Amount") -> str:
    """Return message for zero, negative or non-numeric amounts."""
    return f"{field} must be a positive number"


def invalid_choice(field: str, value: object, allowed: tuple[str, ...]) -> str:
    """Return message for a value outside an allowed set."""
    return f"Invalid {field} '{value}'. Must be one of: {', '.join(allowed)}"


def immutable_transaction_fields(fields: list[str]) -> str:
    """Return message when an edit touches balance-affecting fields."""
    return (
        f"Cannot change {', '.join(sorted(fields))} after creation "
        "to maintain balance integrity"
    )


def card_account_mismatch(account_id: int, user_id: str) -> str:
    """Return message when a card's account belongs to someone else."""
    return f"Account {account_id} does not belong to user {user_id}"


def stale_balance(account_id: int) -> str:
    """Return message when a balance compare-and-swap misses."""
    return (
        f"Balance of account {account_id} changed while the transaction was "
        "being applied; the transaction was recorded but the balance was not updated"
    )


def amount_too_large(field: str, limit: object) -> str:
    """Return message for amounts the money columns cannot hold."""
    return f"{field} must not exceed {limit}"


def balance_out_of_range(account_id: int, balance: object) -> str:
    """Return message when a balance would leave the storable range."""
    return f"Balance of account {account_id} would become {balance}, outside the supported range"
