"""
Shared CLI plumbing — usage-error exit codes, error reporting and
the proxy option validator.
"""

from __future__ import annotations

import functools
import logging
import sys
from typing import Any, Callable

import click

from alistctl.core.errors import AlistctlError

logger = logging.getLogger(__name__)


class AlistctlCommand(click.Command):
    """Command whose usage errors exit 1 instead of click's default 2."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


class AlistctlGroup(click.Group):
    """Group counterpart of AlistctlCommand (also covers unknown subcommands)."""

    command_class = AlistctlCommand
    group_class = type

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise

    def resolve_command(self, ctx: click.Context, args: list[str]):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def report_error(err: AlistctlError) -> None:
    """Print a fatal (red) or benign (yellow) error and log it."""
    if err.exit_code == 0:
        click.secho(f"⚠️  {err}", fg="yellow")
        logger.info("%s", err)
        return
    click.secho(f"❌ {err}", fg="red", err=True)
    logger.error("%s", err)


def exit_on_error(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Turn an AlistctlError raised by a command into a clean exit."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except AlistctlError as e:
            report_error(e)
            sys.exit(e.exit_code)

    return wrapper


def validate_proxy(value: str | None) -> str | None:
    """Proxy prefixes must look like ``https://mirror.example.com/``."""
    if not value:
        return None
    if not value.startswith("https://") or not value.endswith("/"):
        raise click.BadParameter(
            "proxy must start with https:// and end with /, "
            "e.g. https://ghproxy.example.com/"
        )
    return value


def proxy_callback(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    return validate_proxy(value)


def print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        click.secho(f"⚠️  {warning}", fg="yellow", err=True)
