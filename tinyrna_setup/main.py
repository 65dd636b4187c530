"""
The setup run, start to finish.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console

from tinyrna_setup.config import SetupContext, get_config_setting
from tinyrna_setup.console import main_console, status, success, warn
from tinyrna_setup.environment import EnvironmentProvisioner
from tinyrna_setup.environment.provisioner import Prompt
from tinyrna_setup.errors import ToolNotFoundError
from tinyrna_setup.host import (
    check_not_active,
    conda_bin_dirs_from_rcfile,
    detect_platform,
    detect_shell,
    ensure_command_line_tools,
    host_summary,
)
from tinyrna_setup.installer import InstallerAcquirer
from tinyrna_setup.models import ProvisionOutcome, ProvisionRequest
from tinyrna_setup.package import configure_environment, install_codebase
from tinyrna_setup.runner import ProcessSupervisor, format_command
from tinyrna_setup.tool import RuntimeTool, ToolLocator
from tinyrna_setup.tool.definitions import MINICONDA_DEFAULT_PREFIX

LOG = logging.getLogger(__name__)


@dataclass
class SetupReport:
    context: SetupContext
    tool: RuntimeTool
    miniconda_installed: bool
    outcome: ProvisionOutcome


def build_context(
    env_name: str,
    source_dir: Path,
    supervisor: ProcessSupervisor,
    work_dir: Optional[Path] = None,
    console: Console = main_console,
) -> SetupContext:
    """
    Detect the host and shell and freeze everything the run needs.

    Raises:
        UnsupportedPlatform, CommandLineToolsError, UnsupportedShell
    """
    host = detect_platform(
        miniconda_version=get_config_setting("MINICONDA_VERSION"),
        python_version=get_config_setting("MINICONDA_PYTHON_VERSION"),
    )

    if host.is_macos:
        status("Checking for Xcode command line tools...", console=console)
        if ensure_command_line_tools(supervisor):
            success("Command line tools setup complete", console=console)
        else:
            success("Xcode command line tools are already installed", console=console)

    success(f"{host.name} detected", console=console)

    shell = detect_shell(host, supervisor)
    if shell.mismatched:
        warn(
            f"The current shell is {shell.current} but your default is {shell.preferred}",
            console=console,
        )

    context = SetupContext(
        env_name=env_name,
        source_dir=Path(source_dir).resolve(),
        work_dir=Path(work_dir or Path.cwd()),
        host=host,
        shell=shell,
        repo_url=get_config_setting("MINICONDA_REPO_URL"),
    )
    LOG.info("Setup context: %s", host_summary(host, shell))
    return context


def finalize_runtime(tool: RuntimeTool, supervisor: ProcessSupervisor) -> None:
    command = tool.disable_auto_activate_base_command()
    if command is None:
        return

    result = supervisor.run(command, capture_output=True)
    if not result.succeeded:
        LOG.warning("Could not disable auto activation of the base environment")


def ensure_runtime(
    context: SetupContext,
    supervisor: ProcessSupervisor,
    locator: Optional[ToolLocator] = None,
    acquirer: Optional[InstallerAcquirer] = None,
    console: Console = main_console,
) -> Tuple[RuntimeTool, bool]:
    """
    Find a conda-compatible tool, installing Miniconda when there is none.

    Returns:
        Tuple[RuntimeTool, bool]: The tool, and whether Miniconda was just installed.

    Raises:
        AcquireError, ChecksumError: From the installation.
        ToolNotFoundError: Nothing usable after the installation.
    """
    locator = locator or ToolLocator()

    tool = locator.locate()
    if tool is not None:
        success(f"{tool.name} found at {tool.executable}", console=console)
        return tool, False

    acquirer = acquirer or InstallerAcquirer(context, supervisor, console=console)
    acquirer.acquire()

    # A custom install prefix is only recorded in the rcfile by `conda init`
    extra_dirs = conda_bin_dirs_from_rcfile(context.shell.rcfile)
    extra_dirs.append(os.path.join(MINICONDA_DEFAULT_PREFIX, "bin"))

    tool = locator.locate(extra_dirs=extra_dirs)
    if tool is None:
        raise ToolNotFoundError("Miniconda was installed but conda could not be found")

    finalize_runtime(tool, supervisor)
    return tool, True


def report_completion(
    report: SetupReport, console: Console = main_console
) -> None:
    context, tool = report.context, report.tool

    success("Setup complete", console=console)

    if report.miniconda_installed:
        status(
            "First, run this one-time command to finalize the Miniconda installation:",
            console=console,
        )
        console.print()
        console.print(f"  source {context.shell.rcfile}", style="cmd")
        console.print()
        console.print("If conda was not initialized for your shell, use instead:")
        console.print()
        hook = format_command(tool.hook_command(context.shell.current))
        console.print(f'  eval "$({hook})"', style="cmd", markup=False)
        console.print()

    status("To activate the environment, run:", console=console)
    console.print()
    console.print(
        f"  {format_command(tool.activate_command(context.env_name))}", style="cmd"
    )
    console.print()


def run_setup(
    env_name: str,
    source_dir: Path,
    supervisor: ProcessSupervisor,
    work_dir: Optional[Path] = None,
    locator: Optional[ToolLocator] = None,
    prompt: Optional[Prompt] = None,
    console: Console = main_console,
) -> SetupReport:
    """
    Bootstrap the runtime, provision the environment and install the codebase.

    Every failure is raised as a SetupError subclass and ends the run.
    """
    check_not_active(env_name)

    context = build_context(env_name, source_dir, supervisor, work_dir, console=console)
    tool, installed = ensure_runtime(context, supervisor, locator=locator, console=console)

    provisioner = EnvironmentProvisioner(
        tool, context, supervisor, prompt=prompt, console=console
    )
    outcome = provisioner.provision(ProvisionRequest(env_name, context.lockfile))

    configure_environment(tool, context, supervisor, console=console)
    install_codebase(tool, context, supervisor, console=console)

    report = SetupReport(
        context=context, tool=tool, miniconda_installed=installed, outcome=outcome
    )
    report_completion(report, console=console)
    return report
