"""
Action handlers shared by the subcommands and the interactive menu.

Each handler calls one use case and renders its result.  Fatal
problems propagate as ``AlistctlError``; the caller decides whether
that ends the process (subcommand) or just the current action (menu).
"""

from __future__ import annotations

import logging
from typing import Any

import click

from alistctl.core.errors import EmptyPasswordError, MissingDependency
from alistctl.core.models.install import Credential
from alistctl.core.services.host_probes import (
    lan_address,
    public_address,
    require_commands,
    require_root,
)
from alistctl.core.services.systemd_service import detect_init_system
from alistctl.core.use_cases.installation import (
    InstallResult,
    run_install,
    run_uninstall,
    run_update,
)
from alistctl.core.use_cases.manage import (
    get_status,
    reset_password,
    restart_service,
    start_service,
    stop_service,
)
from alistctl.ui.cli.base import print_warnings

logger = logging.getLogger(__name__)

Obj = dict[str, Any]


def preflight(action: str) -> None:
    """Root and systemd checks for state-changing actions."""
    require_root(action)
    init_system = detect_init_system()
    if init_system != "systemd":
        raise MissingDependency(
            f"systemd is required to manage the service (found: {init_system})"
        )
    require_commands(["systemctl"])


# ── Install / update / uninstall ────────────────────────────────────


def print_install_summary(result: InstallResult, port: int) -> None:
    target = result.target
    click.echo()
    click.secho("✅ Alist Backup installed successfully", fg="green", bold=True)
    click.echo()
    click.secho("   Access URLs:", bold=True)
    click.echo(f"     LAN:  http://{lan_address()}:{port}/")
    click.echo(f"     WAN:  http://{public_address()}:{port}/")
    click.echo(f"   Install dir: {target.install_dir}")
    click.echo(f"   Config file: {result.config_file}")
    click.echo()
    click.secho("   Admin account:", bold=True)
    if result.credential.complete:
        click.echo(f"     Username: {result.credential.username}")
        click.echo(f"     Password: {result.credential.password}")
    else:
        click.echo("     Reset the password via 'alistctl' → option 5")
    click.echo()
    if result.cli_installed:
        click.echo("   Manage with: ", nl=False)
        click.secho("alist-backup", fg="green")
    click.secho(
        f"   Note: if port {port} is unreachable, check the firewall or security groups",
        fg="yellow",
    )
    click.echo()


def do_install(obj: Obj, path: str | None = None, proxy: str | None = None) -> InstallResult:
    preflight("install")
    config = obj["config"]
    click.secho(f"⏳ Installing {config.service_name}...", fg="cyan")
    result = run_install(
        config, obj["registrar"], path=path, proxy=proxy, run=obj["run"]
    )
    print_warnings(result.warnings)
    print_install_summary(result, config.port)
    return result


def do_update(obj: Obj, proxy: str | None = None) -> None:
    preflight("update")
    config = obj["config"]
    click.secho(f"⏳ Updating {config.service_name}...", fg="cyan")
    result = run_update(config, obj["registrar"], proxy=proxy)
    print_warnings(result.warnings)
    click.secho(f"✅ Update completed ({result.target.arch})", fg="green", bold=True)


def do_uninstall(obj: Obj, yes: bool = False) -> bool:
    """Returns False when the user declined."""
    preflight("uninstall")
    config = obj["config"]
    if not yes:
        click.secho(
            "⚠️  This removes the install directory, its database and the command line tool",
            fg="red",
        )
        if not click.confirm("Confirm uninstall?", default=False):
            click.secho("Uninstall cancelled", fg="green")
            logger.info("Uninstall cancelled")
            return False

    result = run_uninstall(config, obj["registrar"])
    print_warnings(result.warnings)
    click.secho(f"✅ {config.service_name} fully uninstalled", fg="green", bold=True)
    return True


# ── Service control ─────────────────────────────────────────────────


def show_status(obj: Obj) -> str:
    result = get_status(obj["config"], obj["registrar"])
    name = obj["config"].service_name
    if result.state == "running":
        click.secho(f"🟢 {name}: running", fg="green")
    else:
        click.secho(f"🔴 {name}: stopped", fg="red")
    return result.state


def do_start(obj: Obj) -> None:
    start_service(obj["config"], obj["registrar"])
    click.secho(f"✅ {obj['config'].service_name} started", fg="green")


def do_stop(obj: Obj) -> None:
    if stop_service(obj["config"], obj["registrar"]):
        click.secho(f"✅ {obj['config'].service_name} stopped", fg="green")
    else:
        click.secho("⚠️  Failed to stop the service", fg="yellow")


def do_restart(obj: Obj) -> None:
    restart_service(obj["config"], obj["registrar"])
    click.secho(f"✅ {obj['config'].service_name} restarted", fg="green")


# ── Password ────────────────────────────────────────────────────────


def print_credential(credential: Credential) -> None:
    if not credential.username and not credential.password:
        click.secho(
            "⚠️  The binary did not report credentials; "
            "reset manually with its 'admin' subcommand",
            fg="yellow",
        )
        return
    click.secho("   Account:", bold=True)
    click.echo(f"     Username: {credential.username}")
    if credential.password:
        click.echo(f"     Password: {credential.password}")


def do_password(obj: Obj, new_password: str | None = None) -> Credential:
    """Random password when ``new_password`` is None."""
    if new_password is not None and not new_password:
        raise EmptyPasswordError()
    credential = reset_password(
        obj["config"], obj["registrar"], new_password, run=obj["run"]
    )
    print_credential(credential)
    return credential
