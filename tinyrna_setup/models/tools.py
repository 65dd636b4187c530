from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class ToolResult:
    args: List[str]
    returncode: int
    duration_ms: int
    log_path: Optional[Path] = None
    stdout: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0
