from typing import Dict, List, Optional

from .base import RuntimeTool, ToolType


class Micromamba(RuntimeTool):
    def get_tool_type(self) -> ToolType:
        return ToolType.MICROMAMBA

    def hook_command(self, shell: str) -> List[str]:
        return self._cmd("shell", "hook", "--shell", shell)

    def config_vars_command(
        self, env_name: str, variables: Dict[str, str]
    ) -> Optional[List[str]]:
        # micromamba has no `env config vars`
        return None
