"""
Known runtime tools, in the order they are probed.
"""
from typing import List, Type

from .base import RuntimeTool
from .conda import Conda
from .mamba import Mamba
from .micromamba import Micromamba

TOOLS: List[Type[RuntimeTool]] = [Conda, Mamba, Micromamba]

# Where installers put the tools by default, checked after $PATH
COMMON_LOCATIONS = [
    "~/miniconda3/bin",
    "~/anaconda3/bin",
    "~/miniforge3/bin",
    "~/mambaforge/bin",
    "~/micromamba/bin",
    "~/.local/bin",
    "/opt/conda/bin",
    "/opt/miniconda3/bin",
]

# Prefix the Miniconda installer proposes by default
MINICONDA_DEFAULT_PREFIX = "~/miniconda3"
