# -*- coding: utf-8 -*-
import logging
from pathlib import Path
from typing import Optional

import typer

from tinyrna_setup.console import main_console as console
from tinyrna_setup.constants import (
    CLI_DEBUG_HELP,
    CLI_ENV_NAME_HELP,
    CLI_MAIN_INTRODUCTION,
    CLI_SOURCE_HELP,
    CLI_VERSION_HELP,
    DEFAULT_ENV_NAME,
)
from tinyrna_setup.error_handlers import handle_cmd_exception
from tinyrna_setup.main import run_setup
from tinyrna_setup.meta import get_version
from tinyrna_setup.runner import interrupt_on_sigterm

try:
    from typing import Annotated
except ImportError:
    from typing_extensions import Annotated

LOG = logging.getLogger(__name__)


def configure_logger(debug: bool) -> None:
    level = logging.CRITICAL

    if debug:
        level = logging.DEBUG

    logging.basicConfig(format="%(asctime)s %(name)s => %(message)s", level=level)


def print_version(value: bool) -> None:
    if value:
        console.print(f"tinyrna-setup, version {get_version()}")
        raise typer.Exit()


cli_app = typer.Typer(rich_markup_mode="rich", add_completion=False)


@cli_app.command(help=CLI_MAIN_INTRODUCTION)
@handle_cmd_exception
def setup(
    ctx: typer.Context,
    env_name: Annotated[
        str, typer.Argument(help=CLI_ENV_NAME_HELP, show_default=True)
    ] = DEFAULT_ENV_NAME,
    source: Annotated[
        Path,
        typer.Option(
            "--source",
            exists=True,
            file_okay=False,
            dir_okay=True,
            readable=True,
            resolve_path=True,
            help=CLI_SOURCE_HELP,
        ),
    ] = Path("."),
    debug: Annotated[bool, typer.Option("--debug", help=CLI_DEBUG_HELP)] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version", callback=print_version, is_eager=True, help=CLI_VERSION_HELP
        ),
    ] = None,
):
    """
    Set up the tinyRNA environment.
    """
    configure_logger(debug)
    interrupt_on_sigterm()

    LOG.info("Setting up environment %s from %s", env_name, source)
    run_setup(env_name, source, ctx.obj)


def cli() -> None:
    cli_app()


if __name__ == "__main__":
    cli()
