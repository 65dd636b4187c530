from .provisioner import EnvironmentProvisioner, prompt_recreate
from .registry import EnvironmentRegistry, find_path_column, parse_env_list

__all__ = [
    "EnvironmentProvisioner",
    "EnvironmentRegistry",
    "find_path_column",
    "parse_env_list",
    "prompt_recreate",
]
