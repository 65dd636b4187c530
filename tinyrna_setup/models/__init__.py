from .environments import (
    EnvironmentRecord,
    ProvisionOutcome,
    ProvisionRequest,
    ProvisionState,
)
from .installer import ChecksumIndexEntry, InstallerArtifact
from .tools import ToolResult

__all__ = [
    "ChecksumIndexEntry",
    "EnvironmentRecord",
    "InstallerArtifact",
    "ProvisionOutcome",
    "ProvisionRequest",
    "ProvisionState",
    "ToolResult",
]
