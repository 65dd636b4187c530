from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class EnvironmentRecord:
    """
    One row of an `env list` listing. Environments created by prefix have an empty name.
    """

    name: str
    path: str


@dataclass(frozen=True)
class ProvisionRequest:
    env_name: str
    lockfile: Path


class ProvisionState(Enum):
    CHECK_EXISTING = "check_existing"
    CONFIRM_RECREATE = "confirm_recreate"
    REMOVE = "remove"
    CREATE = "create"
    VERIFY_CREATE = "verify_create"
    PROVISIONED = "provisioned"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            ProvisionState.PROVISIONED,
            ProvisionState.ABORTED,
            ProvisionState.FAILED,
        )


@dataclass
class ProvisionOutcome:
    request: ProvisionRequest
    record: Optional[EnvironmentRecord] = None
    recreated: bool = False
    states: List[ProvisionState] = field(default_factory=list)
    log_paths: List[Path] = field(default_factory=list)
