"""Card commands."""

import click
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.cards import CardService
from bankledger.domain.entities import CARD_TYPES, DEBIT
from bankledger.domain.errors import DomainError
from bankledger.utils.date_parser import parse_date


@click.group()
def card_group():
    """Issue and manage cards."""
    pass


def _service(ctx) -> CardService:
    return CardService(ctx.obj["db"], actor=ctx.obj["actor"])


def _show(card) -> str:
    state = "active" if card.is_active else "inactive"
    if card.is_frozen:
        state += f", frozen until {card.freeze_until}" if card.freeze_until else ", frozen"
    return (
        f"ID: {card.id:3d} | {card.masked_number} | {card.card_type:6s} | "
        f"exp {card.expiry_date} | {card.card_holder_name} | {state}"
    )


@card_group.command("issue")
@click.argument("user_id")
@click.argument("account_id", type=int)
@click.option("--type", "card_type", type=click.Choice(CARD_TYPES, case_sensitive=False), default=DEBIT, show_default=True)
@click.option("--holder", help="Card holder name (defaults to the user's full name)")
@click.pass_context
def issue_card(ctx, user_id: str, account_id: int, card_type: str, holder: str | None):
    """Issue a card for one of a user's accounts."""
    try:
        card = _service(ctx).issue_card(user_id, account_id, card_type, holder)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Issued {card.card_type} card ending in {card.last4} (ID: {card.id}), expires {card.expiry_date}")


@card_group.command("list")
@click.option("--user", "user_id", help="Only cards of this user")
@click.pass_context
def list_cards(ctx, user_id: str | None):
    """List cards."""
    cards = _service(ctx).list_cards(user_id)
    if not cards:
        click.echo("No cards found.")
        return
    for card in cards:
        click.echo(_show(card))


@card_group.command("activate")
@click.argument("card_id", type=int)
@click.pass_context
def activate_card(ctx, card_id: int):
    """Activate a card."""
    try:
        card = _service(ctx).set_card_status(card_id, True)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Card ending in {card.last4} activated")


@card_group.command("deactivate")
@click.argument("card_id", type=int)
@click.pass_context
def deactivate_card(ctx, card_id: int):
    """Deactivate a card."""
    try:
        card = _service(ctx).set_card_status(card_id, False)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Card ending in {card.last4} deactivated")


@card_group.command("limits")
@click.argument("card_id", type=int)
@click.option("--daily", help="Daily spending limit (omit to clear)")
@click.option("--per-transaction", "per_transaction", help="Per-transaction limit (omit to clear)")
@click.pass_context
def set_limits(ctx, card_id: int, daily: str | None, per_transaction: str | None):
    """Set or clear spending limits."""
    try:
        card = _service(ctx).set_card_limits(card_id, daily, per_transaction)
    except DomainError as e:
        handle_domain_error(ctx, e)
    daily_text = f"${card.daily_limit:,.2f}" if card.daily_limit is not None else "No limit"
    txn_text = f"${card.transaction_limit:,.2f}" if card.transaction_limit is not None else "No limit"
    click.echo(f"Limits for card ending in {card.last4}: daily {daily_text}, per transaction {txn_text}")


@card_group.command("freeze")
@click.argument("card_id", type=int)
@click.option("--until", help="Freeze until this date (default: until unfrozen)")
@click.pass_context
def freeze_card(ctx, card_id: int, until: str | None):
    """Temporarily freeze a card."""
    until_date = None
    if until is not None:
        try:
            until_date = parse_date(until)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    try:
        card = _service(ctx).set_card_freeze(card_id, True, until_date)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Card ending in {card.last4} frozen" + (f" until {card.freeze_until}" if card.freeze_until else ""))


@card_group.command("unfreeze")
@click.argument("card_id", type=int)
@click.pass_context
def unfreeze_card(ctx, card_id: int):
    """Unfreeze a card."""
    try:
        card = _service(ctx).set_card_freeze(card_id, False)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Card ending in {card.last4} unfrozen")


@card_group.command("notifications")
@click.argument("card_id", type=int)
@click.argument("state", type=click.Choice(["on", "off"]))
@click.pass_context
def card_notifications(ctx, card_id: int, state: str):
    """Turn card notifications on or off."""
    try:
        card = _service(ctx).set_card_notifications_enabled(card_id, state == "on")
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Notifications {'enabled' if card.notifications_enabled else 'disabled'} "
               f"for card ending in {card.last4}")


@card_group.command("delete")
@click.argument("card_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_card(ctx, card_id: int, yes: bool):
    """Delete a card."""
    if not yes and not click.confirm(f"Delete card {card_id}?"):
        click.echo("Deletion cancelled.")
        return
    try:
        card = _service(ctx).delete_card(card_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted {card.card_type} card ending in {card.last4}")


def register_commands(cli):
    """Register card commands with main CLI."""
    cli.add_command(card_group, name="card")
