"""
Launching of external commands.

Every child process started during a run goes through a single
``ProcessSupervisor`` so that a fatal error or an interrupt can take the whole
process tree down before the program exits, instead of leaving an installer or
a half-finished ``create`` running in the background.
"""
import logging
import shlex
import signal
import subprocess
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import psutil

from tinyrna_setup.constants import SHUTDOWN_GRACE_SECONDS
from tinyrna_setup.errors import ToolInvocationError
from tinyrna_setup.models import ToolResult

LOG = logging.getLogger(__name__)


def format_command(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(arg)) for arg in args)


class ProcessSupervisor:
    """
    Runs external commands one at a time and keeps track of the ones still alive.
    """

    def __init__(self, grace_seconds: float = SHUTDOWN_GRACE_SECONDS) -> None:
        self.grace_seconds = grace_seconds
        self._children: List[subprocess.Popen] = []

    @property
    def children(self) -> List[subprocess.Popen]:
        return list(self._children)

    def run(
        self,
        args: Sequence[str],
        *,
        log_path: Optional[Path] = None,
        capture_output: bool = False,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> ToolResult:
        """
        Run a command to completion.

        Args:
            args: Command and arguments.
            log_path: When given, stdout and stderr are both written to this file.
            capture_output: Capture stdout (and stderr separately) instead of
                inheriting the terminal. Ignored when ``log_path`` is given.
            env: Environment for the child, defaults to ours.
            cwd: Working directory for the child.

        Returns:
            ToolResult: Exit status, duration and the captured stdout if any.

        Raises:
            ToolInvocationError: The command could not be launched.
        """
        args = [str(arg) for arg in args]
        command = format_command(args)
        LOG.info("Running: %s", command)

        log_file = open(log_path, "w", encoding="utf-8") if log_path else None
        try:
            if log_file:
                stdout, stderr = log_file, subprocess.STDOUT
            elif capture_output:
                stdout, stderr = subprocess.PIPE, subprocess.PIPE
            else:
                stdout = stderr = None

            started_at = time.monotonic()
            try:
                process = subprocess.Popen(
                    args, stdout=stdout, stderr=stderr, env=env, cwd=cwd, text=True
                )
            except OSError as e:
                raise ToolInvocationError(command, reason=str(e)) from e

            self._children.append(process)
            # On interrupt the process stays registered so shutdown() can reap it
            out, err = process.communicate()
            self._children.remove(process)
        finally:
            if log_file:
                log_file.close()

        duration_ms = int((time.monotonic() - started_at) * 1000)
        LOG.info(
            "Finished: %s (exit code %s, %d ms)", command, process.returncode, duration_ms
        )
        if err:
            LOG.debug("stderr of %s: %s", command, err)

        return ToolResult(
            args=args,
            returncode=process.returncode,
            duration_ms=duration_ms,
            log_path=log_path,
            stdout=out,
        )

    def shutdown(self) -> None:
        """
        Terminate every live child together with its descendants, killing the
        ones that outlive the grace period.
        """
        procs: List[psutil.Process] = []

        for child in self._children:
            if child.poll() is not None:
                continue
            try:
                parent = psutil.Process(child.pid)
                procs.extend(parent.children(recursive=True))
                procs.append(parent)
            except psutil.NoSuchProcess:
                continue

        self._children.clear()

        if not procs:
            return

        LOG.info("Terminating %d child process(es)", len(procs))
        for proc in procs:
            try:
                proc.terminate()
            except psutil.NoSuchProcess:
                pass

        _, alive = psutil.wait_procs(procs, timeout=self.grace_seconds)
        for proc in alive:
            LOG.warning("Killing pid %s after %ss", proc.pid, self.grace_seconds)
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                pass


def interrupt_on_sigterm() -> None:
    """
    Treat SIGTERM like Ctrl+C so both go through the same shutdown path.
    """

    def _raise_interrupt(signum, frame):
        raise KeyboardInterrupt()

    signal.signal(signal.SIGTERM, _raise_interrupt)
