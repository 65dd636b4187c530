from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ChecksumIndexEntry:
    filename: str
    sha256: str


@dataclass
class InstallerArtifact:
    path: Path
    computed_hash: Optional[str] = None
    expected_hash: Optional[str] = None
    verified_by_fallback: bool = False

    @property
    def filename(self) -> str:
        return self.path.name
