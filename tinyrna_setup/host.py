import logging
import os
import platform
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional

import psutil

from tinyrna_setup.constants import (
    CONDA_INIT_END,
    CONDA_INIT_START,
    ENV_VAR_ACTIVE_ENV,
    ENV_VAR_OSTYPE,
    ENV_VAR_SHELL,
    LOCKFILE_LINUX,
    LOCKFILE_MACOS,
    Settings,
)
from tinyrna_setup.errors import (
    CommandLineToolsError,
    EnvironmentAlreadyActive,
    ToolInvocationError,
    UnsupportedPlatform,
    UnsupportedShell,
)

if TYPE_CHECKING:
    from tinyrna_setup.runner import ProcessSupervisor

LOG = logging.getLogger(__name__)

MACOS = "macOS"
LINUX = "linux"

SUPPORTED_SHELLS = ("bash", "zsh")


@dataclass(frozen=True)
class HostPlatform:
    name: str
    arch: str
    installer_name: str
    lockfile_name: str

    @property
    def is_macos(self) -> bool:
        return self.name == MACOS


@dataclass(frozen=True)
class ShellInfo:
    current: str
    preferred: str
    rcfile: Path

    @property
    def mismatched(self) -> bool:
        return self.current != self.preferred


def check_not_active(env_name: str, environ: Mapping[str, str] = os.environ) -> None:
    """
    Refuse to run while the target environment is the active one.
    """
    if environ.get(ENV_VAR_ACTIVE_ENV) == env_name:
        raise EnvironmentAlreadyActive(env_name)


def detect_platform(
    os_type: Optional[str] = None,
    machine: Optional[str] = None,
    miniconda_version: str = Settings.MINICONDA_VERSION.value,
    python_version: str = Settings.MINICONDA_PYTHON_VERSION.value,
) -> HostPlatform:
    """
    Work out which Miniconda installer and lockfile fit this host.

    Args:
        os_type: OS indicator, defaults to $OSTYPE and then sys.platform.
        machine: CPU architecture, defaults to platform.machine().
        miniconda_version: Miniconda release to install.
        python_version: Python version of the Miniconda base install, e.g. "310".

    Raises:
        UnsupportedPlatform: Neither macOS nor Linux.
    """
    if os_type is None:
        os_type = os.environ.get(ENV_VAR_OSTYPE) or sys.platform

    prefix = f"Miniconda3-py{python_version}_{miniconda_version}"

    if os_type.startswith("darwin"):
        # Apple Silicon and Intel installers are published separately
        arch = machine or platform.machine()
        return HostPlatform(
            name=MACOS,
            arch=arch,
            installer_name=f"{prefix}-MacOSX-{arch}.sh",
            lockfile_name=LOCKFILE_MACOS,
        )

    if os_type.startswith("linux"):
        return HostPlatform(
            name=LINUX,
            arch="x86_64",
            installer_name=f"{prefix}-Linux-x86_64.sh",
            lockfile_name=LOCKFILE_LINUX,
        )

    raise UnsupportedPlatform(os_type)


def get_shell_rcfile(shell: str, platform_name: str, home: Optional[Path] = None) -> Path:
    """
    Startup file that conda's shell initialization writes to.

    Raises:
        UnsupportedShell: For anything but bash and zsh.
    """
    home = home or Path.home()

    if shell == "bash":
        # see https://github.com/conda/conda/pull/11849
        if platform_name == MACOS:
            return home / ".bash_profile"
        return home / ".bashrc"

    if shell == "zsh":
        return home / f".{shell}rc"

    raise UnsupportedShell(shell)


def get_current_shell() -> str:
    """
    Name of the shell that launched us, taken from the parent process.
    """
    try:
        name = psutil.Process(os.getppid()).name()
    except psutil.Error:
        LOG.exception("Unable to inspect the parent process")
        return ""

    # login shells are reported with a leading dash
    return name.split(" ")[0].lstrip("-")


def get_preferred_shell(
    platform_name: str,
    supervisor: "ProcessSupervisor",
    environ: Mapping[str, str] = os.environ,
) -> str:
    """
    The user's default login shell.
    """
    if platform_name == MACOS:
        try:
            result = supervisor.run(
                ["dscl", ".", "-read", str(Path.home()), "UserShell"],
                capture_output=True,
            )
        except ToolInvocationError:
            LOG.exception("Unable to run dscl")
            return ""

        if not result.succeeded:
            LOG.warning("dscl exited with %s", result.returncode)
            return ""

        # "UserShell: /bin/zsh"
        parts = (result.stdout or "").strip().split(" ")
        return os.path.basename(parts[1]) if len(parts) > 1 else ""

    return os.path.basename(environ.get(ENV_VAR_SHELL, ""))


def detect_shell(
    host: HostPlatform,
    supervisor: "ProcessSupervisor",
    current: Optional[str] = None,
    preferred: Optional[str] = None,
    home: Optional[Path] = None,
) -> ShellInfo:
    current = get_current_shell() if current is None else current
    preferred = get_preferred_shell(host.name, supervisor) if preferred is None else preferred

    rcfile = get_shell_rcfile(current, host.name, home=home)

    return ShellInfo(current=current, preferred=preferred, rcfile=rcfile)


def ensure_command_line_tools(supervisor: "ProcessSupervisor") -> bool:
    """
    Install the Xcode command line tools if they are missing (macOS only).

    Returns:
        bool: True if an installation was started, False if already present.

    Raises:
        CommandLineToolsError: The installation could not be started.
    """
    probe = supervisor.run(["xcode-select", "--print-path"], capture_output=True)
    if probe.succeeded:
        return False

    result = supervisor.run(["xcode-select", "--install"])
    if not result.succeeded:
        raise CommandLineToolsError()

    return True


def host_summary(host: HostPlatform, shell: ShellInfo) -> Dict[str, str]:
    return {
        "platform": host.name,
        "arch": host.arch,
        "shell": shell.current,
        "rcfile": str(shell.rcfile),
    }


# Paths `conda init` writes: '<prefix>/bin/conda', "<prefix>/etc/profile.d/conda.sh"
# and export PATH="<prefix>/bin:$PATH"
CONDA_INIT_PREFIX = re.compile(
    r"""["']?([^"'\s:$]+?)/(?:bin/conda|etc/profile\.d/conda\.sh|bin:\$PATH)\b"""
)


def conda_bin_dirs_from_rcfile(rcfile: Path) -> List[str]:
    """
    The `bin` directories named in the `conda initialize` block of a shell
    startup file, in order of appearance.
    """
    try:
        text = Path(rcfile).read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return []
    except OSError:
        LOG.exception("Unable to read %s", rcfile)
        return []

    start = text.find(CONDA_INIT_START)
    if start < 0:
        return []
    end = text.find(CONDA_INIT_END, start)
    block = text[start:end if end >= 0 else len(text)]

    dirs: List[str] = []
    for prefix in CONDA_INIT_PREFIX.findall(block):
        bin_dir = os.path.join(prefix, "bin")
        if bin_dir not in dirs:
            dirs.append(bin_dir)

    LOG.debug("conda initialize block in %s names %s", rcfile, dirs)
    return dirs
