import logging
import os
from typing import Iterable, List, Optional, Sequence, Type

from .base import RuntimeTool
from .definitions import COMMON_LOCATIONS, TOOLS

logger = logging.getLogger(__name__)


class ToolLocator:
    """
    Finds which conda-compatible tool is available on this host.
    """

    def __init__(
        self,
        tools: Sequence[Type[RuntimeTool]] = TOOLS,
        common_locations: Sequence[str] = COMMON_LOCATIONS,
    ) -> None:
        self.tools = list(tools)
        self.common_locations = list(common_locations)

    def _fallback_dirs(self, extra_dirs: Iterable[str]) -> List[str]:
        dirs = []
        for location in [*extra_dirs, *self.common_locations]:
            location = os.path.expandvars(os.path.expanduser(str(location)))
            if location not in dirs and os.path.isdir(location):
                dirs.append(location)
        return dirs

    def locate(self, extra_dirs: Iterable[str] = ()) -> Optional[RuntimeTool]:
        """
        Probe for conda, mamba and micromamba, in that order.

        The execution path is searched first for every tool; only if none is
        found there are ``extra_dirs`` and the usual install prefixes checked.

        Returns:
            Optional[RuntimeTool]: The first tool found, bound to its executable.
        """
        for tool_cls in self.tools:
            path = tool_cls.which()
            if path:
                logger.info("Found %s on PATH at %s", tool_cls.__name__, path)
                return tool_cls(path)

        fallback = os.pathsep.join(self._fallback_dirs(extra_dirs))
        if not fallback:
            return None

        for tool_cls in self.tools:
            path = tool_cls.which(search_path=fallback)
            if path:
                logger.info("Found %s outside PATH at %s", tool_cls.__name__, path)
                return tool_cls(path)

        logger.info("No runtime tool found")
        return None
