"""
Interactive numbered menu — what ``alistctl`` with no arguments opens.

Install, update and uninstall are one-shot: once they finish the menu
ends the process.  Every other action returns to the menu after a short
pause, including when it fails.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

import click

from alistctl import __version__
from alistctl.core.errors import AlistctlError
from alistctl.ui.cli import actions
from alistctl.ui.cli.base import report_error, validate_proxy

logger = logging.getLogger(__name__)

PAUSE_OK = 3
PAUSE_ERROR = 5


@dataclass
class MenuAction:
    """One numbered menu entry."""

    label: str
    handler: Callable[[], Any]
    terminal: bool = False


def _separator(echo: Callable[..., None]) -> None:
    echo(click.style("-------------------", fg="green"))


def render_menu(actions_by_key: dict[str, MenuAction], echo: Callable[..., None]) -> None:
    echo()
    echo(click.style(f"Alist Backup Manager v{__version__}", bold=True))
    echo()
    for key in ("1", "2", "3"):
        echo(click.style(f"{key}. {actions_by_key[key].label}", fg="green"))
    _separator(echo)
    for key in ("4", "5"):
        echo(click.style(f"{key}. {actions_by_key[key].label}", fg="green"))
    _separator(echo)
    for key in ("6", "7", "8"):
        echo(click.style(f"{key}. {actions_by_key[key].label}", fg="green"))
    _separator(echo)
    echo(click.style("0. Exit", fg="green"))


def run_menu(
    actions_by_key: dict[str, MenuAction],
    *,
    prompt: Callable[..., str] | None = None,
    echo: Callable[..., None] = click.echo,
    sleep: Callable[[float], None] | None = None,
) -> int:
    """Loop until exit; returns the process exit code.

    Choices are matched exactly against ``actions_by_key`` and ``"0"``.
    """
    if prompt is None:
        prompt = _prompt_choice
    if sleep is None:
        sleep = time.sleep

    while True:
        render_menu(actions_by_key, echo)
        choice = prompt().strip()
        logger.debug("Menu choice: %r", choice)

        if choice == "0":
            return 0

        action = actions_by_key.get(choice)
        if action is None:
            echo(click.style("Invalid option", fg="red"), err=True)
            sleep(PAUSE_ERROR)
            continue

        try:
            action.handler()
        except AlistctlError as e:
            report_error(e)
            if action.terminal:
                return e.exit_code
            sleep(PAUSE_ERROR)
            continue

        if action.terminal:
            return 0
        sleep(PAUSE_OK)


def _prompt_choice() -> str:
    return click.prompt("Select option [0-8]", default="", show_default=False)


def _prompt_proxy() -> str | None:
    click.secho("Use a download proxy? (leave empty for none)", fg="green")
    click.secho("The proxy must start with https:// and end with /", fg="green")
    value = click.prompt(
        "Proxy", default="", show_default=False, value_proc=validate_proxy
    )
    return value or None


def _password_menu(obj: dict) -> None:
    click.echo()
    click.secho("1. Generate a random password", fg="green")
    click.secho("2. Set a new password", fg="green")
    click.secho("0. Back to main menu", fg="green")
    choice = click.prompt("Select option [0-2]", default="", show_default=False).strip()

    if choice == "1":
        actions.do_password(obj)
    elif choice == "2":
        new_password = click.prompt("New password", hide_input=True, default="", show_default=False)
        actions.do_password(obj, new_password)
    elif choice != "0":
        click.secho("Invalid option", fg="red", err=True)


def build_menu(obj: dict) -> dict[str, MenuAction]:
    """Wire the numbered entries to the shared action handlers."""
    return {
        "1": MenuAction(
            "Install Alist Backup",
            lambda: actions.do_install(obj, proxy=_prompt_proxy()),
            terminal=True,
        ),
        "2": MenuAction(
            "Update Alist Backup",
            lambda: actions.do_update(obj, proxy=_prompt_proxy()),
            terminal=True,
        ),
        "3": MenuAction("Uninstall Alist Backup", lambda: actions.do_uninstall(obj), terminal=True),
        "4": MenuAction("Show status", lambda: actions.show_status(obj)),
        "5": MenuAction("Reset password", lambda: _password_menu(obj)),
        "6": MenuAction("Start Alist Backup", lambda: actions.do_start(obj)),
        "7": MenuAction("Stop Alist Backup", lambda: actions.do_stop(obj)),
        "8": MenuAction("Restart Alist Backup", lambda: actions.do_restart(obj)),
    }
