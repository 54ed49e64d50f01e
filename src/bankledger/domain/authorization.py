"""Capability checks applied at every service boundary.

Services never trust the caller to have checked roles: each one is built
with the Actor it runs on behalf of and asks these helpers before touching
the store.
"""

from dataclasses import dataclass
from typing import Optional

from bankledger.domain.errors import PermissionDeniedError


@dataclass(frozen=True)
class Actor:
    """Identity an operation runs on behalf of.

    ``user_id`` is None for the system operator (CLI without --as-user,
    batch jobs), which carries admin rights.
    """

    user_id: Optional[str]
    is_admin: bool = False

    @classmethod
    def system(cls) -> "Actor":
        return cls(user_id=None, is_admin=True)

    def describe(self) -> str:
        if self.user_id is None:
            return "system"
        return f"{'admin' if self.is_admin else 'user'} {self.user_id}"


SYSTEM_ACTOR = Actor.system()


def require_admin(actor: Actor, action: str) -> None:
    """Raise PermissionDeniedError unless actor is an administrator."""
    if not actor.is_admin:
        raise PermissionDeniedError(f"Only administrators may {action}")


def require_owner_or_admin(actor: Actor, owner_id: str, action: str) -> None:
    """Raise PermissionDeniedError unless actor owns the resource or is an admin."""
    if actor.is_admin or actor.user_id == owner_id:
        return
    raise PermissionDeniedError(f"{actor.describe()} may not {action}")


def require_owner(actor: Actor, owner_id: str, action: str) -> None:
    """Raise PermissionDeniedError unless actor is exactly the owning user."""
    if actor.user_id != owner_id:
        raise PermissionDeniedError(f"Only the owning user may {action}")
