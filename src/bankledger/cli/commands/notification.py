"""Notification inbox commands. These act as the --as-user user."""

import click
from bankledger.cli.error_handling import handle_domain_error
from bankledger.domain.errors import DomainError
from bankledger.domain.notifications import NotificationService


@click.group()
def notification_group():
    """Read and manage your notifications."""
    pass


def _service(ctx) -> NotificationService:
    return NotificationService(ctx.obj["db"], actor=ctx.obj["actor"])


def _user_id(ctx) -> str:
    user_id = ctx.obj["actor"].user_id
    if user_id is None:
        click.echo("Error: notifications are per user; pass --as-user", err=True)
        ctx.exit(1)
    return user_id


@notification_group.command("list")
@click.option("--unread", is_flag=True, help="Only unread notifications")
@click.pass_context
def list_notifications(ctx, unread: bool):
    """List your notifications, newest first."""
    user_id = _user_id(ctx)
    try:
        notifications = _service(ctx).list_notifications(user_id, unread_only=unread)
    except DomainError as e:
        handle_domain_error(ctx, e)
    if not notifications:
        click.echo("No notifications.")
        return
    for n in notifications:
        marker = " " if n.is_read else "*"
        click.echo(f"{marker} {n.id:4d} | {n.created_at:%Y-%m-%d %H:%M} | {n.title}: {n.message}")


@notification_group.command("read")
@click.argument("notification_id", type=int)
@click.pass_context
def mark_read(ctx, notification_id: int):
    """Mark a notification as read."""
    _user_id(ctx)
    try:
        _service(ctx).mark_read(notification_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Notification marked as read")


@notification_group.command("read-all")
@click.pass_context
def mark_all_read(ctx):
    """Mark all your notifications as read."""
    user_id = _user_id(ctx)
    count = _service(ctx).mark_all_read(user_id)
    click.echo(f"Marked {count} notification{'s' if count != 1 else ''} as read")


@notification_group.command("delete")
@click.argument("notification_id", type=int)
@click.pass_context
def delete_notification(ctx, notification_id: int):
    """Delete one of your notifications."""
    _user_id(ctx)
    try:
        _service(ctx).delete_notification(notification_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo("Notification deleted")


def register_commands(cli):
    """Register notification commands with main CLI."""
    cli.add_command(notification_group, name="notification")
