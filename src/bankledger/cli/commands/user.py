"""User management commands."""

import click
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.errors import DomainError
from bankledger.domain.users import UserService


@click.group()
def user_group():
    """Manage portal users."""
    pass


@user_group.command("create")
@click.argument("email")
@click.option("--first-name", required=True, help="First name")
@click.option("--last-name", required=True, help="Last name")
@click.option("--admin", is_flag=True, help="Grant administrator rights")
@click.pass_context
def create_user(ctx, email: str, first_name: str, last_name: str, admin: bool):
    """Create a user.

    Examples:
        bankledger user create jane@example.com --first-name Jane --last-name Doe
        bankledger user create ops@example.com --first-name Ops --last-name Team --admin
    """
    service = UserService(ctx.obj["db"], actor=ctx.obj["actor"])
    try:
        profile = service.create_user(email, first_name, last_name, is_admin=admin)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created user {profile.full_name} (ID: {profile.id})")


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    service = UserService(ctx.obj["db"], actor=ctx.obj["actor"])
    try:
        users = service.list_users()
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not users:
        click.echo("No users found.")
        return

    click.echo("\nUsers:")
    click.echo("-" * 80)
    for profile in users:
        role = "admin" if profile.is_admin else "customer"
        click.echo(f"{profile.id} | {profile.full_name:25s} | {profile.email:25s} | {role}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
