from pathlib import Path
from types import SimpleNamespace
from unittest.mock import Mock

import click
import pytest

from tinyrna_setup.error_handlers import handle_cmd_exception, output_exception
from tinyrna_setup.errors import (
    ChecksumMismatch,
    CreationVerificationFailed,
    ProvisionAborted,
    SetupError,
)
from tinyrna_setup.runner import ProcessSupervisor


def make_ctx():
    return SimpleNamespace(obj=Mock(spec=ProcessSupervisor))


def raising(exception):
    @handle_cmd_exception
    def command(ctx):
        raise exception

    return command


@pytest.mark.unit
class TestOutputException:
    def test_prints_every_line_and_exits_with_code(self, console):
        error = ChecksumMismatch("X.sh", expected="abc", actual="def")

        with pytest.raises(SystemExit) as exc_info:
            output_exception(error, console=console)

        assert exc_info.value.code == 68
        output = console.file.getvalue()
        assert "SHA256 checksum for X.sh" in output
        assert "Expected: abc" in output
        assert "Actual:   def" in output

    def test_points_at_log_file(self, console):
        error = CreationVerificationFailed("tinyrna", Path("/work/env_create_1.log"))

        with pytest.raises(SystemExit) as exc_info:
            output_exception(error, console=console)

        assert exc_info.value.code == 74
        assert "Console output has been saved to /work/env_create_1.log." in (
            console.file.getvalue()
        )

    def test_plain_exception_exits_1(self, console):
        with pytest.raises(SystemExit) as exc_info:
            output_exception(ValueError("boom"), console=console)

        assert exc_info.value.code == 1


@pytest.mark.unit
class TestHandleCmdException:
    def test_passes_result_through(self):
        ctx = make_ctx()

        @handle_cmd_exception
        def command(ctx):
            return "done"

        assert command(ctx) == "done"
        ctx.obj.shutdown.assert_not_called()

    def test_creates_supervisor(self):
        ctx = SimpleNamespace(obj=None)
        seen = []

        @handle_cmd_exception
        def command(ctx):
            seen.append(ctx.obj)

        command(ctx)

        assert isinstance(seen[0], ProcessSupervisor)

    def test_setup_error_shuts_down_children(self, capsys):
        ctx = make_ctx()

        with pytest.raises(SystemExit) as exc_info:
            raising(SetupError("Something broke"))(ctx)

        assert exc_info.value.code == 1
        ctx.obj.shutdown.assert_called_once()
        assert "Something broke" in capsys.readouterr().out

    def test_abort(self, capsys):
        ctx = make_ctx()

        with pytest.raises(SystemExit) as exc_info:
            raising(ProvisionAborted())(ctx)

        assert exc_info.value.code == 75
        assert "Exiting..." in capsys.readouterr().out

    def test_keyboard_interrupt(self, capsys):
        ctx = make_ctx()

        with pytest.raises(SystemExit) as exc_info:
            raising(KeyboardInterrupt())(ctx)

        assert exc_info.value.code == 130
        ctx.obj.shutdown.assert_called_once()
        assert "Interrupted" in capsys.readouterr().out

    def test_unexpected_exception(self, capsys):
        ctx = make_ctx()

        with pytest.raises(SystemExit) as exc_info:
            raising(RuntimeError("kaput"))(ctx)

        assert exc_info.value.code == 1
        ctx.obj.shutdown.assert_called_once()
        assert "kaput" in capsys.readouterr().out

    def test_click_exceptions_propagate(self):
        ctx = make_ctx()

        with pytest.raises(click.ClickException):
            raising(click.ClickException("bad usage"))(ctx)

        ctx.obj.shutdown.assert_called_once()
