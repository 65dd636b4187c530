from pathlib import Path
from typing import Optional

from tinyrna_setup.constants import (
    EXIT_CODE_CHECKSUM_MISMATCH,
    EXIT_CODE_COMMAND_LINE_TOOLS,
    EXIT_CODE_CREATION_FAILED,
    EXIT_CODE_DOWNLOAD,
    EXIT_CODE_ENVIRONMENT_ACTIVE,
    EXIT_CODE_FAILURE,
    EXIT_CODE_INDEX_FETCH,
    EXIT_CODE_INSTALL_FAILED,
    EXIT_CODE_INVALID_CHOICE,
    EXIT_CODE_PACKAGE_INSTALL,
    EXIT_CODE_PROVISION_ABORTED,
    EXIT_CODE_REMOVAL_FAILED,
    EXIT_CODE_TOOL_INVOCATION,
    EXIT_CODE_TOOL_NOT_FOUND,
    EXIT_CODE_UNSUPPORTED_PLATFORM,
    EXIT_CODE_UNSUPPORTED_SHELL,
)


class SetupException(Exception):
    """
    Base exception for unexpected tinyrna-setup failures.

    Args:
        message (str): The error message template.
        info (str): Additional information to include in the error message.
    """
    def __init__(self, message: str = "An unexpected error occurred during setup: {info}",
                 info: str = ""):
        self.message = message.format(info=info)
        super().__init__(self.message)

    def get_exit_code(self) -> int:
        """
        Get the exit code associated with this exception.

        Returns:
            int: The exit code.
        """
        return EXIT_CODE_FAILURE


class SetupError(Exception):
    """
    Generic setup error. Every expected failure of a run is one of these and
    is terminal for the run.

    Args:
        message (str): The error message.
        log_path (Optional[Path]): Log file holding the output of the failed step.
    """
    def __init__(self, message: str = "Setup failed.", log_path: Optional[Path] = None):
        self.message = message
        self.log_path = log_path
        super().__init__(self.message)

    def get_exit_code(self) -> int:
        """
        Get the exit code associated with this error.

        Returns:
            int: The exit code.
        """
        return EXIT_CODE_FAILURE


class EnvironmentAlreadyActive(SetupError):
    def __init__(self, env_name: str):
        self.env_name = env_name
        super().__init__(f"You must deactivate the {env_name} environment before running this script.")

    def get_exit_code(self) -> int:
        return EXIT_CODE_ENVIRONMENT_ACTIVE


class UnsupportedPlatform(SetupError):
    def __init__(self, os_type: str):
        self.os_type = os_type
        super().__init__(f"Unsupported OS: {os_type}")

    def get_exit_code(self) -> int:
        return EXIT_CODE_UNSUPPORTED_PLATFORM


class UnsupportedShell(SetupError):
    def __init__(self, shell: str):
        self.shell = shell
        super().__init__(f'The shell "{shell}" is not supported')

    def get_exit_code(self) -> int:
        return EXIT_CODE_UNSUPPORTED_SHELL


class CommandLineToolsError(SetupError):
    def __init__(self, message: str = "Command line tools installation failed"):
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_COMMAND_LINE_TOOLS


class ChecksumError(SetupError):
    """
    Raised when the downloaded installer cannot be verified.
    """
    def get_exit_code(self) -> int:
        return EXIT_CODE_CHECKSUM_MISMATCH


class IndexFetchError(ChecksumError):
    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        message = f"Failed to download the list of Miniconda installer checksums from {url}"
        if reason:
            message += f"\nDetails: {reason}"
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_INDEX_FETCH


class ChecksumMismatch(ChecksumError):
    def __init__(self, filename: str, expected: Optional[str], actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"SHA256 checksum for {filename}\n"
            f"Expected: {expected or ''}\n"
            f"Actual:   {actual}"
        )


class AcquireError(SetupError):
    """
    Raised when the runtime installer cannot be obtained or run.
    """


class DownloadError(AcquireError):
    def __init__(self, filename: str, reason: Optional[str] = None):
        self.filename = filename
        message = f"Miniconda failed to download ({filename})"
        if reason:
            message += f"\nDetails: {reason}"
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_DOWNLOAD


class InstallFailedError(AcquireError):
    def __init__(self, returncode: int):
        self.returncode = returncode
        super().__init__(f"Miniconda installation failed (exit code {returncode})")

    def get_exit_code(self) -> int:
        return EXIT_CODE_INSTALL_FAILED


class ToolInvocationError(SetupError):
    def __init__(self, command: str, reason: Optional[str] = None):
        self.command = command
        message = f"Failed to run: {command}"
        if reason:
            message += f"\nDetails: {reason}"
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_TOOL_INVOCATION


class ToolNotFoundError(SetupError):
    def __init__(self, message: str = "No conda, mamba or micromamba installation could be found"):
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_TOOL_NOT_FOUND


class ProvisionError(SetupError):
    """
    Raised when the named environment cannot be (re)built.
    """


class RemovalFailed(ProvisionError):
    def __init__(self, env_name: str, log_path: Path):
        self.env_name = env_name
        super().__init__(f"Failed to remove the {env_name} environment", log_path=log_path)

    def get_exit_code(self) -> int:
        return EXIT_CODE_REMOVAL_FAILED


class CreationVerificationFailed(ProvisionError):
    def __init__(self, env_name: str, log_path: Path):
        self.env_name = env_name
        super().__init__(f"{env_name} environment setup failed", log_path=log_path)

    def get_exit_code(self) -> int:
        return EXIT_CODE_CREATION_FAILED


class ProvisionAborted(ProvisionError):
    """
    The operator declined to recreate an existing environment.
    """
    def __init__(self, message: str = "Exiting..."):
        super().__init__(message)

    def get_exit_code(self) -> int:
        return EXIT_CODE_PROVISION_ABORTED


class InvalidRecreateChoice(ProvisionError):
    def __init__(self, reply: str):
        self.reply = reply
        super().__init__(f"Invalid option: {reply}")

    def get_exit_code(self) -> int:
        return EXIT_CODE_INVALID_CHOICE


class PackageInstallError(SetupError):
    def __init__(self, log_path: Path):
        super().__init__("Failed to install tinyRNA codebase", log_path=log_path)

    def get_exit_code(self) -> int:
        return EXIT_CODE_PACKAGE_INSTALL


class LockfileNotFound(ProvisionError):
    def __init__(self, lockfile: Path):
        self.lockfile = lockfile
        super().__init__(f"Platform lockfile not found: {lockfile}")

    def get_exit_code(self) -> int:
        return EXIT_CODE_CREATION_FAILED
