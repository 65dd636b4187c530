# -*- coding: utf-8 -*-
import os
from enum import Enum
from pathlib import Path

DIR_NAME = ".tinyrna-setup"


def get_user_dir() -> Path:
    """
    Get the user directory for the tinyrna-setup configuration.

    Returns:
        Path: The user directory path.
    """
    path = Path("~", DIR_NAME).expanduser()
    return path


USER_CONFIG_DIR = get_user_dir()
CONFIG_FILE_NAME = "config.ini"
CONFIG_FILE_USER = USER_CONFIG_DIR / CONFIG_FILE_NAME

DEFAULT_ENV_NAME = "tinyrna"


class Settings(Enum):
    MINICONDA_REPO_URL = "https://repo.anaconda.com/miniconda/"
    MINICONDA_VERSION = "23.3.1-0"
    # Python used by the base Miniconda install, not by the tinyRNA environment
    MINICONDA_PYTHON_VERSION = "310"


# Fetch the REQUEST_TIMEOUT from the environment variable, defaulting to 30 if not set
REQUEST_TIMEOUT = int(os.getenv("TINYRNA_SETUP_REQUEST_TIMEOUT", 30))
DOWNLOAD_CHUNK_SIZE = 1024 * 64

# Grace period before a terminated child process is killed
SHUTDOWN_GRACE_SECONDS = 5

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
LOG_ENV_REMOVE = "env_remove"
LOG_ENV_CREATE = "env_create"
LOG_PIP_INSTALL = "pip_install"

LOCKFILE_DIR = "conda"
LOCKFILE_LINUX = "conda-linux-64.lock"
LOCKFILE_MACOS = "conda-osx-64.lock"

# Layout of the rows in the published installer index
INDEX_ROW_SEPARATOR = r"</?tr>"
INDEX_FIELD_SEPARATOR = r"</?td\.*>"
INDEX_FIELD_COUNT = 8
INDEX_NAME_FIELD = 2
INDEX_HASH_FIELD = 7

ENV_VAR_ACTIVE_ENV = "CONDA_DEFAULT_ENV"
ENV_VAR_SHELL = "SHELL"
ENV_VAR_OSTYPE = "OSTYPE"
ENV_CONFIG_VARS = {"PYTHONNOUSERSITE": "1"}

RECREATE_YES = "y"
RECREATE_NO = "n"

CONDA_INIT_START = "# >>> conda initialize >>>"
CONDA_INIT_END = "# <<< conda initialize <<<"

# Exit codes
EXIT_CODE_FAILURE = 1
EXIT_CODE_ENVIRONMENT_ACTIVE = 64
EXIT_CODE_UNSUPPORTED_PLATFORM = 65
EXIT_CODE_UNSUPPORTED_SHELL = 66
EXIT_CODE_INDEX_FETCH = 67
EXIT_CODE_CHECKSUM_MISMATCH = 68
EXIT_CODE_DOWNLOAD = 69
EXIT_CODE_INSTALL_FAILED = 70
EXIT_CODE_TOOL_INVOCATION = 71
EXIT_CODE_TOOL_NOT_FOUND = 72
EXIT_CODE_REMOVAL_FAILED = 73
EXIT_CODE_CREATION_FAILED = 74
EXIT_CODE_PROVISION_ABORTED = 75
EXIT_CODE_INVALID_CHOICE = 76
EXIT_CODE_PACKAGE_INSTALL = 77
EXIT_CODE_COMMAND_LINE_TOOLS = 78
EXIT_CODE_INTERRUPTED = 130

CLI_MAIN_INTRODUCTION = (
    "Install Miniconda if needed, then create the tinyRNA environment from the "
    "platform lockfile and install the tinyRNA codebase into it."
)
CLI_ENV_NAME_HELP = "Name of the environment to create."
CLI_SOURCE_HELP = "Directory holding the conda lockfiles and the codebase to install."
CLI_DEBUG_HELP = "Enable debug logging."
CLI_VERSION_HELP = "Show the version and exit."
