"""Financial goal commands."""

import click
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.errors import DomainError
from bankledger.domain.goals import GoalService
from bankledger.utils.date_parser import parse_date


@click.group()
def goal_group():
    """Manage savings goals."""
    pass


def _service(ctx) -> GoalService:
    return GoalService(ctx.obj["db"], actor=ctx.obj["actor"])


@goal_group.command("create")
@click.argument("user_id")
@click.argument("title")
@click.option("--target", required=True, help="Target amount")
@click.option("--deadline", help="Optional deadline date")
@click.pass_context
def create_goal(ctx, user_id: str, title: str, target: str, deadline: str | None):
    """Create a savings goal."""
    try:
        deadline_date = parse_date(deadline) if deadline else None
        goal = _service(ctx).create_goal(user_id, title, target, deadline_date)
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created goal '{goal.title}' (ID: {goal.id}) with target ${goal.target_amount:,.2f}")


@goal_group.command("list")
@click.argument("user_id")
@click.pass_context
def list_goals(ctx, user_id: str):
    """List a user's goals with progress."""
    try:
        goals = _service(ctx).list_goals(user_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not goals:
        click.echo("No goals found.")
        return
    for goal in goals:
        done = " (completed)" if goal.is_completed else ""
        click.echo(
            f"ID: {goal.id:3d} | {goal.title:20s} | ${goal.current_amount:,.2f} of "
            f"${goal.target_amount:,.2f} ({goal.progress_percent:.0f}%){done}"
        )


@goal_group.command("contribute")
@click.argument("goal_id", type=int)
@click.argument("amount")
@click.pass_context
def contribute(ctx, goal_id: int, amount: str):
    """Add money to a goal."""
    try:
        goal = _service(ctx).contribute(goal_id, amount)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Added to {goal.title}: now ${goal.current_amount:,.2f} of ${goal.target_amount:,.2f}")


def register_commands(cli):
    """Register goal commands with main CLI."""
    cli.add_command(goal_group, name="goal")
