import logging
import sys
from functools import wraps

import click
from rich.console import Console

from tinyrna_setup.console import fail, main_console
from tinyrna_setup.constants import EXIT_CODE_FAILURE, EXIT_CODE_INTERRUPTED
from tinyrna_setup.errors import ProvisionAborted, SetupError, SetupException
from tinyrna_setup.runner import ProcessSupervisor


LOG = logging.getLogger(__name__)


def output_exception(exception: Exception, console: Console = main_console) -> None:
    """
    Output an exception message to the console and exit.

    Exits:
        Exits the program with the exception's exit code.
    """
    for line in str(exception).splitlines():
        fail(line, console=console)

    log_path = getattr(exception, "log_path", None)
    if log_path:
        console.print(f"Console output has been saved to {log_path}.")

    exit_code = EXIT_CODE_FAILURE
    if hasattr(exception, "get_exit_code"):
        exit_code = exception.get_exit_code()

    sys.exit(exit_code)


def handle_cmd_exception(func):
    """
    Decorator for the command function: every child process is registered
    on a ProcessSupervisor stored in ``ctx.obj``, and any terminal failure
    shuts them all down before the program exits.
    """

    @wraps(func)
    def inner(ctx, *args, **kwargs):
        if not isinstance(ctx.obj, ProcessSupervisor):
            ctx.obj = ProcessSupervisor()
        supervisor: ProcessSupervisor = ctx.obj

        try:
            return func(ctx, *args, **kwargs)
        except (click.ClickException, click.exceptions.Exit):
            supervisor.shutdown()
            raise
        except ProvisionAborted as e:
            LOG.info("Operator declined to recreate the environment")
            supervisor.shutdown()
            output_exception(e)
        except SetupError as e:
            LOG.exception("Expected SetupError happened: %s", e)
            supervisor.shutdown()
            output_exception(e)
        except KeyboardInterrupt:
            LOG.info("Interrupted, shutting down child processes")
            supervisor.shutdown()
            main_console.print()
            fail("Interrupted")
            sys.exit(EXIT_CODE_INTERRUPTED)
        except Exception as e:
            LOG.exception("Unexpected Exception happened: %s", e)
            supervisor.shutdown()
            output_exception(SetupException(info=str(e)))

    return inner
