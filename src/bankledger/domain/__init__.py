"""Domain layer for bankledger application."""

_SERVICES = {
    "LedgerService": "bankledger.domain.ledger",
    "CardService": "bankledger.domain.cards",
    "GoalService": "bankledger.domain.goals",
    "AccountService": "bankledger.domain.account",
    "UserService": "bankledger.domain.users",
    "NotificationEmitter": "bankledger.domain.notifications",
    "NotificationService": "bankledger.domain.notifications",
    "TransactionImportService": "bankledger.domain.bulk_import",
}

__all__ = list(_SERVICES)


# Import services lazily so the database layer can import entities
# without a circular import through this package
def __getattr__(name):
    if name in _SERVICES:
        import importlib
        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
