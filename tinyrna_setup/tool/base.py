from abc import ABC, abstractmethod
from enum import Enum
import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


class ToolType(Enum):
    CONDA = "conda"
    MAMBA = "mamba"
    MICROMAMBA = "micromamba"


class RuntimeTool(ABC):
    """
    Abstract base class for the conda-compatible package managers.

    Subclasses only describe how each operation is spelled for their tool;
    running the commands is left to the caller.
    """

    def __init__(self, executable: Optional[str] = None) -> None:
        """
        Initialize the tool.

        Args:
            executable: Resolved path of the tool, defaults to the bare command name.
        """
        self._executable = executable or self.get_command_name()[0]

    @abstractmethod
    def get_tool_type(self) -> ToolType:
        """
        Get the tool type for this command type.
        Must be implemented by subclasses.

        Returns:
            ToolType: Tool type
        """
        pass

    def get_command_name(self) -> List[str]:
        """
        Get the command name for this tool.

        Returns:
            List[str]: Command name as a list (e.g. ["conda"])
        """
        return [self.get_tool_type().value]

    @property
    def name(self) -> str:
        return self.get_tool_type().value

    @property
    def executable(self) -> str:
        return self._executable

    @classmethod
    def which(cls, search_path: Optional[str] = None) -> Optional[str]:
        """
        Locate the tool executable.

        Args:
            search_path: os.pathsep separated directories, defaults to $PATH.

        Returns:
            Optional[str]: Absolute path of the executable, None if not found.
        """
        found = shutil.which(cls().get_command_name()[0], path=search_path)
        return os.path.abspath(found) if found else None

    def _cmd(self, *args: str) -> List[str]:
        return [self._executable, *args]

    def env_list_command(self) -> List[str]:
        return self._cmd("env", "list")

    def env_remove_command(self, env_name: str) -> List[str]:
        return self._cmd("env", "remove", "-n", env_name, "-y")

    def env_create_command(self, env_name: str, lockfile: Path) -> List[str]:
        # The lockfile is an @EXPLICIT package list, it pins every package exactly
        return self._cmd("create", "--file", str(lockfile), "--name", env_name, "--yes")

    def run_in_env_command(self, env_name: str, args: Sequence[str]) -> List[str]:
        return self._cmd("run", "-n", env_name, *args)

    def activate_command(self, env_name: str) -> List[str]:
        return [self.name, "activate", env_name]

    @abstractmethod
    def hook_command(self, shell: str) -> List[str]:
        """
        Command printing the shell code that makes `activate` available.
        """
        pass

    def config_vars_command(
        self, env_name: str, variables: Dict[str, str]
    ) -> Optional[List[str]]:
        """
        Command storing environment variables in the environment itself.

        Returns:
            Optional[List[str]]: None when the tool has no such feature.
        """
        assignments = [f"{key}={value}" for key, value in variables.items()]
        return self._cmd("env", "config", "vars", "set", "-n", env_name, *assignments)

    def disable_auto_activate_base_command(self) -> Optional[List[str]]:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._executable!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuntimeTool):
            return NotImplemented
        return (
            self.get_tool_type() is other.get_tool_type()
            and self._executable == other._executable
        )

    def __hash__(self) -> int:
        return hash((self.get_tool_type(), self._executable))
