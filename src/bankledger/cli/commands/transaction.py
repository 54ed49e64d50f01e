"""Transaction commands."""

from pathlib import Path

import click
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.bulk_import import TransactionImportService, TEMPLATE_CSV
from bankledger.domain.entities import TRANSACTION_TYPES
from bankledger.domain.errors import DomainError
from bankledger.domain.ledger import LedgerService
from bankledger.utils.date_parser import parse_datetime, get_date_range


@click.group()
def transaction_group():
    """Record and manage transactions."""
    pass


def _ledger(ctx) -> LedgerService:
    return LedgerService(ctx.obj["db"], actor=ctx.obj["actor"])


@transaction_group.command("add")
@click.argument("account_id", type=int)
@click.option("--type", "transaction_type", type=click.Choice(TRANSACTION_TYPES, case_sensitive=False), required=True)
@click.option("--amount", required=True, help="Positive amount (e.g., 125.50)")
@click.option("--description", required=True, help="Transaction description")
@click.option("--date", "occurred_at", help="Backdate the transaction (e.g., 2024-01-15 or 'yesterday')")
@click.pass_context
def add_transaction(ctx, account_id: int, transaction_type: str, amount: str, description: str,
                    occurred_at: str | None):
    """Apply a transaction to an account.

    Deposits add to the balance, withdrawals subtract (the balance may go
    negative) and transfers are recorded without changing it. The account
    owner is notified.

    Examples:
        bankledger transaction add 1 --type deposit --amount 125.50 --description "Payroll"
        bankledger transaction add 1 --type withdrawal --amount 40 --description ATM --date yesterday
    """
    when = None
    if occurred_at is not None:
        try:
            when = parse_datetime(occurred_at)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    try:
        applied = _ledger(ctx).apply_transaction(account_id, transaction_type, amount, description, when)
    except DomainError as e:
        handle_domain_error(ctx, e)

    txn = applied.transaction
    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Type: {txn.transaction_type}")
    click.echo(f"  Amount: ${txn.amount:,.2f}")
    click.echo(f"  New balance: ${applied.balance:,.2f}")
    if applied.notification is None:
        click.echo("  Warning: the account owner could not be notified", err=True)


@transaction_group.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--description", help="New description")
@click.option("--amount", help="Rejected: amount cannot change after creation")
@click.option("--type", "transaction_type", help="Rejected: type cannot change after creation")
@click.option("--date", "created_at", help="Rejected: date cannot change after creation")
@click.pass_context
def edit_transaction(ctx, transaction_id: int, description: str | None, amount: str | None,
                     transaction_type: str | None, created_at: str | None):
    """Edit a transaction description. The balance is not affected.

    Examples:
        bankledger transaction edit 3 --description "Payroll March"
    """
    patch = {
        key: value
        for key, value in {
            "description": description,
            "amount": amount,
            "transaction_type": transaction_type,
            "created_at": created_at,
        }.items()
        if value is not None
    }
    if not patch:
        click.echo("Nothing to update.")
        return

    try:
        txn = _ledger(ctx).edit_transaction(transaction_id, patch)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {txn.id}: {txn.description}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction record.

    The account balance is NOT adjusted; correct it with
    'account set-balance' if needed.
    """
    if not yes and not click.confirm(
        f"Delete transaction {transaction_id}? The balance will not be reversed."
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        txn = _ledger(ctx).delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {txn.id} ({txn.transaction_type} ${txn.amount:,.2f})")


@transaction_group.command("list")
@click.option("--account", "account_id", type=int, help="Only this account")
@click.option("--period", help="this-month, this-year, this-week, last-month, last-year, last-week")
@click.pass_context
def list_transactions(ctx, account_id: int | None, period: str | None):
    """List transactions, newest first."""
    start_date = end_date = None
    if period is not None:
        try:
            start_date, end_date = get_date_range(period)
        except ValueError as e:
            handle_domain_error(ctx, e)

    try:
        transactions = _ledger(ctx).list_transactions(account_id, start_date, end_date)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        click.echo(
            f"{txn.id:5d} | {txn.created_at:%Y-%m-%d %H:%M} | Account {txn.account_id:3d} | "
            f"{txn.transaction_type:10s} | ${txn.amount:>12,.2f} | {txn.description}"
        )


@transaction_group.command("import")
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", "account_id", type=int, help="Account for rows without an account_id")
@click.option("--dry-run", is_flag=True, help="Validate only, apply nothing")
@click.pass_context
def import_transactions(ctx, file_path: str, account_id: int | None, dry_run: bool):
    """Apply transactions from a CSV, TXT or JSON file.

    Each row is applied on its own; failures are listed and the rest
    continue. Use 'transaction template' for the expected columns.
    """
    service = TransactionImportService(ctx.obj["db"], actor=ctx.obj["actor"])
    try:
        rows = service.load_file(Path(file_path), default_account_id=account_id)
        if dry_run:
            errors = service.validate_rows(rows)
            for error in errors:
                click.echo(f"  {error}", err=True)
            click.echo(f"Validated {len(rows)} rows, {len(errors)} errors")
            if errors:
                ctx.exit(1)
            return
        result = service.import_rows(rows)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(result.message)
    for error in result.errors:
        click.echo(f"  {error}", err=True)
    if not result.success:
        ctx.exit(1)


@transaction_group.command("template")
def template():
    """Print a CSV template for 'transaction import'."""
    click.echo(TEMPLATE_CSV, nl=False)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
