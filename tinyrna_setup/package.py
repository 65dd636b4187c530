import logging
from typing import Dict

from rich.console import Console

from tinyrna_setup.config import SetupContext
from tinyrna_setup.console import main_console, status, success, warn
from tinyrna_setup.constants import ENV_CONFIG_VARS, LOG_PIP_INSTALL
from tinyrna_setup.errors import PackageInstallError
from tinyrna_setup.models import ToolResult
from tinyrna_setup.runner import ProcessSupervisor
from tinyrna_setup.tool import RuntimeTool

LOG = logging.getLogger(__name__)


def configure_environment(
    tool: RuntimeTool,
    context: SetupContext,
    supervisor: ProcessSupervisor,
    variables: Dict[str, str] = ENV_CONFIG_VARS,
    console: Console = main_console,
) -> bool:
    """
    Store environment variables inside the environment (these can't be set
    by the lockfile). Not fatal when the tool can't do it.

    Returns:
        bool: True if the variables were set.
    """
    command = tool.config_vars_command(context.env_name, variables)
    if command is None:
        LOG.info("%s does not support environment config vars, skipping", tool.name)
        return False

    result = supervisor.run(command, capture_output=True)
    if not result.succeeded:
        LOG.warning("Setting %s on %s failed", variables, context.env_name)
        warn(
            f"Could not set {', '.join(variables)} in the {context.env_name} environment",
            console=console,
        )
        return False

    return True


def install_codebase(
    tool: RuntimeTool,
    context: SetupContext,
    supervisor: ProcessSupervisor,
    console: Console = main_console,
) -> ToolResult:
    """
    pip install the source tree into the environment.

    Raises:
        PackageInstallError: pip exited non-zero, see the log named in the error.
    """
    log_path = context.log_path(LOG_PIP_INSTALL)

    status("Installing tinyRNA codebase via pip...", console=console)
    command = tool.run_in_env_command(
        context.env_name, ["python", "-m", "pip", "install", str(context.source_dir)]
    )
    with console.status("Running pip install"):
        result = supervisor.run(command, log_path=log_path)

    if not result.succeeded:
        raise PackageInstallError(log_path)

    success("tinyRNA codebase installed", console=console)
    return result
