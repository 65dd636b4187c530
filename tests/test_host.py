import unittest
from pathlib import Path
from unittest.mock import Mock, patch

import psutil
import pytest

from tinyrna_setup.errors import (
    CommandLineToolsError,
    EnvironmentAlreadyActive,
    ToolInvocationError,
    UnsupportedPlatform,
    UnsupportedShell,
)
from tinyrna_setup.host import (
    LINUX,
    MACOS,
    check_not_active,
    conda_bin_dirs_from_rcfile,
    detect_platform,
    detect_shell,
    ensure_command_line_tools,
    get_current_shell,
    get_preferred_shell,
    get_shell_rcfile,
    host_summary,
)
from tinyrna_setup.models import ToolResult


class TestDetectPlatform(unittest.TestCase):
    def test_linux(self):
        host = detect_platform(os_type="linux-gnu")

        self.assertEqual(host.name, LINUX)
        self.assertEqual(host.installer_name, "Miniconda3-py310_23.3.1-0-Linux-x86_64.sh")
        self.assertEqual(host.lockfile_name, "conda-linux-64.lock")
        self.assertFalse(host.is_macos)

    def test_macos_uses_machine_arch(self):
        host = detect_platform(os_type="darwin22", machine="arm64")

        self.assertTrue(host.is_macos)
        self.assertEqual(host.installer_name, "Miniconda3-py310_23.3.1-0-MacOSX-arm64.sh")
        self.assertEqual(host.lockfile_name, "conda-osx-64.lock")

    def test_versions_are_configurable(self):
        host = detect_platform(os_type="linux", miniconda_version="24.1.2-0",
                               python_version="311")

        self.assertEqual(host.installer_name, "Miniconda3-py311_24.1.2-0-Linux-x86_64.sh")

    def test_unsupported(self):
        with self.assertRaises(UnsupportedPlatform) as ctx:
            detect_platform(os_type="msys")

        self.assertEqual(str(ctx.exception), "Unsupported OS: msys")
        self.assertEqual(ctx.exception.get_exit_code(), 65)

    @patch.dict("os.environ", {"OSTYPE": "darwin21"})
    def test_ostype_from_environment(self):
        self.assertEqual(detect_platform(machine="x86_64").name, MACOS)


@pytest.mark.unit
class TestShell:
    @pytest.mark.parametrize("shell, platform_name, expected", [
        ("bash", MACOS, ".bash_profile"),
        ("bash", LINUX, ".bashrc"),
        ("zsh", MACOS, ".zshrc"),
        ("zsh", LINUX, ".zshrc"),
    ])
    def test_rcfile(self, shell, platform_name, expected):
        assert get_shell_rcfile(shell, platform_name, home=Path("/home/u")) == Path(
            "/home/u", expected
        )

    def test_unsupported_shell(self):
        with pytest.raises(UnsupportedShell) as exc_info:
            get_shell_rcfile("fish", LINUX, home=Path("/home/u"))

        assert str(exc_info.value) == 'The shell "fish" is not supported'

    def test_current_shell_strips_login_dash(self):
        with patch("tinyrna_setup.host.psutil.Process") as process:
            process.return_value.name.return_value = "-zsh"
            assert get_current_shell() == "zsh"

    def test_current_shell_unknown(self):
        with patch("tinyrna_setup.host.psutil.Process", side_effect=psutil.AccessDenied()):
            assert get_current_shell() == ""

    def test_preferred_shell_linux(self):
        supervisor = Mock()

        assert get_preferred_shell(LINUX, supervisor, {"SHELL": "/usr/bin/zsh"}) == "zsh"
        assert get_preferred_shell(LINUX, supervisor, {}) == ""
        supervisor.run.assert_not_called()

    def test_preferred_shell_macos_runs_dscl_supervised(self):
        supervisor = Mock()
        supervisor.run.return_value = ToolResult(
            args=[], returncode=0, duration_ms=1, stdout="UserShell: /bin/zsh\n"
        )

        assert get_preferred_shell(MACOS, supervisor) == "zsh"
        command = supervisor.run.call_args.args[0]
        assert command[0] == "dscl"
        assert command[-1] == "UserShell"
        assert supervisor.run.call_args.kwargs == {"capture_output": True}

    def test_preferred_shell_macos_dscl_failure(self):
        supervisor = Mock()
        supervisor.run.return_value = ToolResult(args=[], returncode=1, duration_ms=1)

        assert get_preferred_shell(MACOS, supervisor) == ""

    def test_preferred_shell_macos_dscl_missing(self):
        supervisor = Mock()
        supervisor.run.side_effect = ToolInvocationError("dscl", reason="not found")

        assert get_preferred_shell(MACOS, supervisor) == ""

    def test_detect_shell(self, linux_host, tmp_path):
        shell = detect_shell(linux_host, Mock(), current="bash", preferred="zsh", home=tmp_path)

        assert shell.rcfile == tmp_path / ".bashrc"
        assert shell.mismatched
        assert host_summary(linux_host, shell) == {
            "platform": LINUX,
            "arch": "x86_64",
            "shell": "bash",
            "rcfile": str(tmp_path / ".bashrc"),
        }

    def test_detect_shell_rejects_current_shell(self, linux_host, tmp_path):
        with pytest.raises(UnsupportedShell):
            detect_shell(linux_host, Mock(), current="tcsh", preferred="bash", home=tmp_path)


@pytest.mark.unit
class TestActiveEnvironment:
    def test_active_target_is_refused(self):
        with pytest.raises(EnvironmentAlreadyActive) as exc_info:
            check_not_active("tinyrna", {"CONDA_DEFAULT_ENV": "tinyrna"})

        assert str(exc_info.value) == (
            "You must deactivate the tinyrna environment before running this script."
        )
        assert exc_info.value.get_exit_code() == 64

    def test_other_environment_is_fine(self):
        check_not_active("tinyrna", {"CONDA_DEFAULT_ENV": "base"})
        check_not_active("tinyrna", {})


@pytest.mark.unit
class TestCommandLineTools:
    def result(self, returncode):
        return ToolResult(args=[], returncode=returncode, duration_ms=1)

    def test_already_installed(self):
        supervisor = Mock()
        supervisor.run.return_value = self.result(0)

        assert ensure_command_line_tools(supervisor) is False
        supervisor.run.assert_called_once_with(
            ["xcode-select", "--print-path"], capture_output=True
        )

    def test_installs_when_missing(self):
        supervisor = Mock()
        supervisor.run.side_effect = [self.result(2), self.result(0)]

        assert ensure_command_line_tools(supervisor) is True
        assert supervisor.run.call_args.args[0] == ["xcode-select", "--install"]

    def test_install_failure(self):
        supervisor = Mock()
        supervisor.run.side_effect = [self.result(2), self.result(1)]

        with pytest.raises(CommandLineToolsError):
            ensure_command_line_tools(supervisor)


CONDA_INIT_BLOCK = """\
export EDITOR=vim
# >>> conda initialize >>>
# !! Contents within this block are managed by 'conda init' !!
__conda_setup="$('/opt/mc3/bin/conda' 'shell.bash' 'hook' 2> /dev/null)"
if [ $? -eq 0 ]; then
    eval "$__conda_setup"
else
    if [ -f "/opt/mc3/etc/profile.d/conda.sh" ]; then
        . "/opt/mc3/etc/profile.d/conda.sh"
    else
        export PATH="/opt/mc3/bin:$PATH"
    fi
fi
unset __conda_setup
# <<< conda initialize <<<
export PATH="/home/u/tools/bin:$PATH"
"""


@pytest.mark.unit
class TestCondaInitBlock:
    def test_prefix_from_block(self, tmp_path):
        rcfile = tmp_path / ".bashrc"
        rcfile.write_text(CONDA_INIT_BLOCK)

        assert conda_bin_dirs_from_rcfile(rcfile) == ["/opt/mc3/bin"]

    def test_path_export_only(self, tmp_path):
        rcfile = tmp_path / ".zshrc"
        rcfile.write_text(
            "# >>> conda initialize >>>\n"
            'export PATH="/Users/u/Applications/miniconda/bin:$PATH"\n'
            "# <<< conda initialize <<<\n"
        )

        assert conda_bin_dirs_from_rcfile(rcfile) == ["/Users/u/Applications/miniconda/bin"]

    def test_lines_outside_block_are_ignored(self, tmp_path):
        rcfile = tmp_path / ".bashrc"
        rcfile.write_text('export PATH="/opt/other/bin:$PATH"\n')

        assert conda_bin_dirs_from_rcfile(rcfile) == []

    def test_missing_rcfile(self, tmp_path):
        assert conda_bin_dirs_from_rcfile(tmp_path / ".bashrc") == []
