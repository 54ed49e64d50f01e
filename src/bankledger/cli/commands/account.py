"""Account management commands."""

import click
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.account import AccountService, ACCOUNT_TYPES
from bankledger.domain.errors import DomainError
from bankledger.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


def _service(ctx) -> AccountService:
    return AccountService(ctx.obj["db"], actor=ctx.obj["actor"])


@account_group.command("open")
@click.argument("user_id", metavar="USER_ID")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), default="checking", show_default=True)
@click.option("--balance", default="0", help="Opening balance")
@click.pass_context
def open_account(ctx, user_id: str, account_type: str, balance: str):
    """Open an account for a user.

    Examples:
        bankledger account open 6f1c... --type savings --balance 500
    """
    try:
        account = _service(ctx).open_account(user_id, account_type, parse_amount(balance))
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Opened {account.account_type} account {account.account_number} (ID: {account.id})")


@account_group.command("list")
@click.option("--user", "user_id", help="Only accounts of this user")
@click.pass_context
def list_accounts(ctx, user_id: str | None):
    """List accounts."""
    accounts = _service(ctx).list_accounts(user_id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        flags = " [FROZEN]" if acc.is_frozen else ""
        click.echo(
            f"ID: {acc.id:3d} | {acc.account_number} | {acc.account_type:12s} | "
            f"Balance: ${acc.balance:,.2f}{flags}"
        )


@account_group.command("freeze")
@click.argument("account_id", type=int)
@click.pass_context
def freeze_account(ctx, account_id: int):
    """Freeze an account so no transactions can be applied."""
    try:
        _service(ctx).set_frozen(account_id, True)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account {account_id} frozen")


@account_group.command("unfreeze")
@click.argument("account_id", type=int)
@click.pass_context
def unfreeze_account(ctx, account_id: int):
    """Unfreeze an account."""
    try:
        _service(ctx).set_frozen(account_id, False)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Account {account_id} unfrozen")


@account_group.command("set-balance")
@click.argument("account_id", type=int)
@click.argument("balance")
@click.pass_context
def set_balance(ctx, account_id: int, balance: str):
    """Overwrite an account balance directly.

    No transaction is recorded for this edit.
    """
    try:
        account = _service(ctx).set_balance(account_id, parse_amount(balance))
    except (DomainError, ValueError) as e:
        handle_domain_error(ctx, e)
    click.echo(f"Balance of account {account_id} set to ${account.balance:,.2f}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
