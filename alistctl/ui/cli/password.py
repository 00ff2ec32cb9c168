"""
CLI commands for admin password reset.
"""

from __future__ import annotations

import click

from alistctl.ui.cli import actions
from alistctl.ui.cli.base import AlistctlGroup, exit_on_error


@click.group(cls=AlistctlGroup)
def password() -> None:
    """Reset the admin password."""


@password.command()
@click.pass_context
@exit_on_error
def random(ctx: click.Context) -> None:
    """Generate a random admin password."""
    actions.do_password(ctx.obj)


@password.command("set")
@click.argument("new_password")
@click.pass_context
@exit_on_error
def set_password(ctx: click.Context, new_password: str) -> None:
    """Set the admin password to NEW_PASSWORD."""
    actions.do_password(ctx.obj, new_password)
