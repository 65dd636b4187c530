from typing import List, Optional

from .base import RuntimeTool, ToolType


class Conda(RuntimeTool):
    def get_tool_type(self) -> ToolType:
        return ToolType.CONDA

    def hook_command(self, shell: str) -> List[str]:
        return self._cmd(f"shell.{shell}", "hook")

    def disable_auto_activate_base_command(self) -> Optional[List[str]]:
        return self._cmd("config", "--set", "auto_activate_base", "false")
