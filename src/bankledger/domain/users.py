"""User profile domain service."""

from typing import Optional

from bankledger.database.base import Database, PROFILES
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_admin, require_owner_or_admin
from bankledger.domain.entities import Profile
from bankledger.domain.errors import ConflictError, NotFoundError, ValidationError, user_not_found


class UserService:
    """Service for managing portal users."""

    def __init__(self, db: Database, actor: Optional[Actor] = None):
        """Initialize user service.

        Args:
            db: Database instance
            actor: Identity the operations run as (defaults to the system operator)
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR

    def create_user(self, email: str, first_name: str, last_name: str, is_admin: bool = False) -> Profile:
        """Create a user profile.

        Raises:
            ValidationError: If a required field is blank
            ConflictError: If the email is already registered
        """
        require_admin(self.actor, "create users")
        email = (email or "").strip().lower()
        if not email or "@" not in email:
            raise ValidationError(f"Invalid email address '{email}'")
        if not (first_name or "").strip() or not (last_name or "").strip():
            raise ValidationError("First and last name are required")

        if self.db.select(PROFILES, {"email": email}):
            raise ConflictError(f"User with email '{email}' already exists")

        return self.db.insert(
            PROFILES,
            {
                "email": email,
                "first_name": first_name.strip(),
                "last_name": last_name.strip(),
                "is_admin": is_admin,
            },
        )

    def get_user(self, user_id: str) -> Optional[Profile]:
        """Get user by ID, or None if not found."""
        return self.db.get_profile(user_id)

    def require_user(self, user_id: str) -> Profile:
        """Get user by ID.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.db.get_profile(user_id)
        if user is None:
            raise NotFoundError(user_not_found(user_id))
        require_owner_or_admin(self.actor, user.id, "view this user")
        return user

    def list_users(self) -> list[Profile]:
        """List all users ordered by last name."""
        require_admin(self.actor, "list users")
        return self.db.select(PROFILES, order_by="last_name")
