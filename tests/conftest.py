from io import StringIO
from pathlib import Path

import pytest
from tinyrna_setup.config import SetupContext
from tinyrna_setup.console import build_console
from tinyrna_setup.constants import LOCKFILE_DIR, LOCKFILE_LINUX
from tinyrna_setup.host import LINUX, HostPlatform, ShellInfo
from tinyrna_setup.models import ToolResult
from tinyrna_setup.runner import ProcessSupervisor


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without network access")


class FakeCondaSupervisor(ProcessSupervisor):
    """
    Answers conda commands from an in-memory table of environments instead
    of launching anything.
    """

    def __init__(self, envs=None, prefix="/home/user/miniconda3", fail_remove=False,
                 create_lands=True, create_returncode=0, pip_returncode=0):
        super().__init__()
        self.prefix = prefix
        self.envs = dict(envs or {})
        self.fail_remove = fail_remove
        self.create_lands = create_lands
        self.create_returncode = create_returncode
        self.pip_returncode = pip_returncode
        self.calls = []

    def render_env_list(self):
        lines = ["# conda environments:", "#"]
        lines.append(f"{'base':<23}   {self.prefix}")
        for name, path in self.envs.items():
            lines.append(f"{name:<23}   {path}")
        return "\n".join(lines) + "\n\n"

    def run(self, args, *, log_path=None, capture_output=False, env=None, cwd=None):
        args = [str(arg) for arg in args]
        self.calls.append(args)
        subcommand = args[1:]
        returncode, stdout = 0, None

        if subcommand[:2] == ["env", "list"]:
            stdout = self.render_env_list()
        elif subcommand[:2] == ["env", "remove"]:
            name = subcommand[subcommand.index("-n") + 1]
            if self.fail_remove:
                returncode = 1
            else:
                self.envs.pop(name, None)
        elif subcommand[:1] == ["create"]:
            name = subcommand[subcommand.index("--name") + 1]
            returncode = self.create_returncode
            if self.create_lands:
                self.envs[name] = f"{self.prefix}/envs/{name}"
        elif "pip" in subcommand:
            returncode = self.pip_returncode

        if log_path:
            Path(log_path).write_text(" ".join(args) + "\n")

        return ToolResult(args=args, returncode=returncode, duration_ms=0,
                          log_path=log_path, stdout=stdout)

    def commands(self):
        """
        The tool subcommands issued so far, e.g. ["env", "list"].
        """
        return [call[1:3] if call[1] == "env" else call[1:2] for call in self.calls]


@pytest.fixture
def console():
    return build_console(file=StringIO(), width=200, force_terminal=False)


@pytest.fixture
def linux_host():
    return HostPlatform(
        name=LINUX,
        arch="x86_64",
        installer_name="Miniconda3-py310_23.3.1-0-Linux-x86_64.sh",
        lockfile_name=LOCKFILE_LINUX,
    )


@pytest.fixture
def source_dir(tmp_path):
    source = tmp_path / "tinyRNA"
    (source / LOCKFILE_DIR).mkdir(parents=True)
    (source / LOCKFILE_DIR / LOCKFILE_LINUX).write_text("@EXPLICIT\n")
    return source


@pytest.fixture
def setup_context(tmp_path, source_dir, linux_host):
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return SetupContext(
        env_name="tinyrna",
        source_dir=source_dir,
        work_dir=work_dir,
        host=linux_host,
        shell=ShellInfo(current="bash", preferred="bash", rcfile=tmp_path / ".bashrc"),
        timestamp="2024-01-02_03-04-05",
        repo_url="https://repo.example.org/miniconda/",
        request_timeout=5,
    )


@pytest.fixture
def fake_supervisor_factory():
    return FakeCondaSupervisor
