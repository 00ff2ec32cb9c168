"""
CLI commands for day-to-day service control.

Thin wrappers over ``alistctl.ui.cli.actions``.
"""

from __future__ import annotations

import json

import click

from alistctl.core.use_cases.manage import get_status
from alistctl.ui.cli import actions
from alistctl.ui.cli.base import AlistctlCommand, exit_on_error


@click.command(cls=AlistctlCommand)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@exit_on_error
def status(ctx: click.Context, as_json: bool) -> None:
    """Show whether the service is running."""
    if as_json:
        result = get_status(ctx.obj["config"], ctx.obj["registrar"])
        data = result.to_dict()
        data["unit"] = ctx.obj["registrar"].details()
        click.echo(json.dumps(data, indent=2))
        return
    actions.show_status(ctx.obj)


@click.command(cls=AlistctlCommand)
@click.pass_context
@exit_on_error
def start(ctx: click.Context) -> None:
    """Start the service."""
    actions.do_start(ctx.obj)


@click.command(cls=AlistctlCommand)
@click.pass_context
@exit_on_error
def stop(ctx: click.Context) -> None:
    """Stop the service (a failure is only a warning)."""
    actions.do_stop(ctx.obj)


@click.command(cls=AlistctlCommand)
@click.pass_context
@exit_on_error
def restart(ctx: click.Context) -> None:
    """Restart the service."""
    actions.do_restart(ctx.obj)
