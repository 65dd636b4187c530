from typing import List

from .base import RuntimeTool, ToolType


class Mamba(RuntimeTool):
    def get_tool_type(self) -> ToolType:
        return ToolType.MAMBA

    def hook_command(self, shell: str) -> List[str]:
        return self._cmd("shell", "hook", "--shell", shell)
