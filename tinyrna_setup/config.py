import configparser
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from tinyrna_setup.constants import (
    CONFIG_FILE_USER,
    LOCKFILE_DIR,
    REQUEST_TIMEOUT,
    TIMESTAMP_FORMAT,
    Settings,
)
from tinyrna_setup.host import HostPlatform, ShellInfo

LOG = logging.getLogger(__name__)


def get_config_setting(name: str, config_file: Path = CONFIG_FILE_USER) -> Optional[str]:
    """
    Get the configuration setting from the config file or defaults.

    Args:
        name (str): The name of the setting to retrieve.
        config_file (Path): The ini file to read overrides from.

    Returns:
        Optional[str]: The value of the setting if found, otherwise None.
    """
    config = configparser.ConfigParser()
    config.read(config_file)

    default = Settings[name] if name in Settings.__members__ else None

    if "settings" in config.sections() and name in config["settings"]:
        value = config["settings"][name]
        if value:
            LOG.debug("Setting %s overridden by %s", name, config_file)
            return value

    return default.value if default else None


def new_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class SetupContext:
    """
    Everything a run needs to know, resolved once and passed explicitly to each step.
    """

    env_name: str
    source_dir: Path
    work_dir: Path
    host: HostPlatform
    shell: ShellInfo
    timestamp: str = field(default_factory=new_timestamp)
    repo_url: str = Settings.MINICONDA_REPO_URL.value
    request_timeout: int = REQUEST_TIMEOUT

    @property
    def lockfile(self) -> Path:
        return self.source_dir / LOCKFILE_DIR / self.host.lockfile_name

    def log_path(self, tag: str) -> Path:
        """
        Path of the log file for one operation of this run.
        """
        return self.work_dir / f"{tag}_{self.timestamp}.log"
