from .base import RuntimeTool, ToolType
from .conda import Conda
from .locator import ToolLocator
from .mamba import Mamba
from .micromamba import Micromamba

__all__ = ["Conda", "Mamba", "Micromamba", "RuntimeTool", "ToolLocator", "ToolType"]
