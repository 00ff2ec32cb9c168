"""
alistctl — CLI entrypoint.

Usage:
    alistctl                  # interactive menu
    alistctl install [PATH]   # install (default /opt/alist-backup)
    alistctl update
    alistctl uninstall
    alistctl --help
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from alistctl import __version__
from alistctl.core.config.loader import ConfigError, load_config
from alistctl.core.execution.subprocess_runner import run_command
from alistctl.core.observability.logging_config import setup_logging
from alistctl.core.use_cases.manage import registrar_for
from alistctl.ui.cli import actions
from alistctl.ui.cli.base import AlistctlGroup, exit_on_error, proxy_callback
from alistctl.ui.cli.menu import build_menu, run_menu


@click.group(cls=AlistctlGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="alistctl")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: $ALISTCTL_CONFIG or /etc/alistctl/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Alist Backup manager: install, update and run the alist service.

    Without a command, opens the interactive menu.
    """
    ctx.ensure_object(dict)

    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("ALISTCTL_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("ALISTCTL_LOG_FILE", config.log_file),
        log_file_level=os.environ.get("ALISTCTL_LOG_FILE_LEVEL", "DEBUG"),
    )

    ctx.obj["config"] = config
    ctx.obj["run"] = run_command
    ctx.obj["registrar"] = registrar_for(config, run_command)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if ctx.invoked_subcommand is None:
        ctx.exit(run_menu(build_menu(ctx.obj)))


@cli.command()
@click.argument("path", required=False)
@click.option(
    "--proxy",
    default=None,
    callback=proxy_callback,
    help="Download mirror prefix, e.g. https://ghproxy.example.com/",
)
@click.pass_context
@exit_on_error
def install(ctx: click.Context, path: str | None, proxy: str | None) -> None:
    """Install Alist Backup into PATH (default: /opt/alist-backup).

    PATH gets an ``alist-backup`` subdirectory appended unless it
    already ends in one.
    """
    actions.do_install(ctx.obj, path=path, proxy=proxy)


@cli.command()
@click.option(
    "--proxy",
    default=None,
    callback=proxy_callback,
    help="Download mirror prefix, e.g. https://ghproxy.example.com/",
)
@click.pass_context
@exit_on_error
def update(ctx: click.Context, proxy: str | None) -> None:
    """Update the installed binary to the latest release."""
    actions.do_update(ctx.obj, proxy=proxy)


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
@exit_on_error
def uninstall(ctx: click.Context, yes: bool) -> None:
    """Remove the service, install directory and command line tool."""
    actions.do_uninstall(ctx.obj, yes=yes)


# ── Register sub-command groups from alistctl/ui/cli/ ────────────

from alistctl.ui.cli.password import password
from alistctl.ui.cli.service import restart, start, status, stop

cli.add_command(status)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(restart)
cli.add_command(password)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
