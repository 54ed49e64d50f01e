"""Financial goal domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from bankledger.database.base import Database, FINANCIAL_GOALS
from bankledger.domain.authorization import Actor, SYSTEM_ACTOR, require_owner_or_admin
from bankledger.domain.entities import FinancialGoal
from bankledger.domain.errors import NotFoundError, ValidationError, goal_not_found, user_not_found
from bankledger.domain.notifications import NotificationEmitter, GOAL_CONTRIBUTION
from bankledger.logging_config import log_action
from bankledger.utils.amount_parser import in_money_range, positive_amount

logger = logging.getLogger(__name__)


class GoalService:
    """Service for savings goals."""

    def __init__(
        self,
        db: Database,
        actor: Optional[Actor] = None,
        emitter: Optional[NotificationEmitter] = None,
    ):
        """Initialize goal service.

        Args:
            db: Database instance
            actor: Identity the operations run as (defaults to the system operator)
            emitter: Notification emitter (defaults to one on the same database)
        """
        self.db = db
        self.actor = actor or SYSTEM_ACTOR
        self.emitter = emitter or NotificationEmitter(db)

    def create_goal(
        self,
        user_id: str,
        title: str,
        target_amount: Decimal,
        deadline: Optional[date] = None,
    ) -> FinancialGoal:
        """Create a goal with nothing saved yet.

        Raises:
            ValidationError: If title is blank or target is not positive
            NotFoundError: If the user does not exist
        """
        require_owner_or_admin(self.actor, user_id, "create goals for this user")
        if not title or not title.strip():
            raise ValidationError("Goal title is required")
        target_amount = positive_amount(target_amount, "Target amount")
        if self.db.get_profile(user_id) is None:
            raise NotFoundError(user_not_found(user_id))

        return self.db.insert(
            FINANCIAL_GOALS,
            {
                "user_id": user_id,
                "title": title.strip(),
                "target_amount": target_amount,
                "current_amount": Decimal("0"),
                "deadline": deadline,
            },
        )

    def get_goal(self, goal_id: int) -> FinancialGoal:
        """Get a goal the actor may see.

        Raises:
            NotFoundError: If goal not found
        """
        goal = self.db.get_goal(goal_id)
        if goal is None:
            raise NotFoundError(goal_not_found(goal_id))
        require_owner_or_admin(self.actor, goal.user_id, f"view goal {goal_id}")
        return goal

    def list_goals(self, user_id: str) -> list[FinancialGoal]:
        """List a user's goals, oldest first."""
        require_owner_or_admin(self.actor, user_id, "list goals of this user")
        return self.db.select(FINANCIAL_GOALS, {"user_id": user_id})

    def contribute(self, goal_id: int, amount: Decimal) -> FinancialGoal:
        """Add money to a goal.

        There is no cap at the target; over-funding is recorded as is.

        Raises:
            ValidationError: If amount is not positive or the total would
                not fit the amount column
            NotFoundError: If goal not found
        """
        amount = positive_amount(amount)
        goal = self.get_goal(goal_id)

        new_current = goal.current_amount + amount
        if not in_money_range(new_current):
            raise ValidationError(f"Goal {goal_id} cannot hold {new_current}")
        updated = self.db.update(FINANCIAL_GOALS, goal_id, {"current_amount": new_current})
        log_action(logger, "info", f"Added {amount} to goal {goal_id}; now {new_current}",
                   user_id=self.actor.user_id, action="contribute", resource=f"goal:{goal_id}")
        self.emitter.emit_quietly(GOAL_CONTRIBUTION, goal.user_id, "Goal Updated",
                                  f"Added ${amount:.2f} to {goal.title}.")
        return updated
