"""
Normalized view of `<tool> env list`.

The listing is meant for humans: conda, mamba and micromamba all print a
name column followed by a path column, but the column width, the header,
the active-environment marker and the indentation differ between tools and
versions. The parser below does not rely on any of those. It infers where
the path column starts from the output itself and reads every line that has
a path at that column.
"""
import logging
import re
from collections import Counter
from typing import Iterable, List, Optional

from tinyrna_setup.errors import ToolInvocationError
from tinyrna_setup.models import EnvironmentRecord
from tinyrna_setup.runner import ProcessSupervisor, format_command
from tinyrna_setup.tool import RuntimeTool

LOG = logging.getLogger(__name__)

PATH_SEPARATOR = "/"
NAME_NOISE = re.compile(r"[\s*]+")


def find_path_column(lines: Iterable[str]) -> Optional[int]:
    """
    Offset at which paths start: the most common position of the first path
    separator across all lines. Ties go to the leftmost offset.
    """
    counts = Counter()
    for line in lines:
        offset = line.find(PATH_SEPARATOR)
        if offset >= 0:
            counts[offset] += 1

    if not counts:
        return None

    most = max(counts.values())
    return min(offset for offset, count in counts.items() if count == most)


def parse_env_list(output: str) -> List[EnvironmentRecord]:
    """
    Parse the text printed by `env list` into (name, path) records.

    Header, separator and blank lines are skipped. Names have the active
    marker and all whitespace removed; prefix-only environments get an
    empty name.
    """
    lines = output.splitlines()
    column = find_path_column(lines)
    if column is None:
        return []

    LOG.debug("env list path column inferred at offset %s", column)

    records = []
    for line in lines:
        if line[column:column + 1] != PATH_SEPARATOR:
            continue

        name = NAME_NOISE.sub("", line[:column])
        path = line[column:].rstrip()
        records.append(EnvironmentRecord(name=name, path=path))

    return records


class EnvironmentRegistry:
    """
    Queries the tool for its environments. Nothing is cached: each call
    reflects the state of the host at that moment.
    """

    def __init__(self, supervisor: ProcessSupervisor) -> None:
        self.supervisor = supervisor

    def list(self, tool: RuntimeTool) -> List[EnvironmentRecord]:
        """
        Raises:
            ToolInvocationError: The listing command failed to run or exited non-zero.
        """
        command = tool.env_list_command()
        result = self.supervisor.run(command, capture_output=True)

        if not result.succeeded:
            raise ToolInvocationError(
                format_command(command), reason=f"exit code {result.returncode}"
            )

        records = parse_env_list(result.stdout or "")
        LOG.info("%s lists %d environment(s)", tool.name, len(records))
        return records

    def find(self, tool: RuntimeTool, env_name: str) -> Optional[EnvironmentRecord]:
        """
        First listed environment named ``env_name``, if any.
        """
        for record in self.list(tool):
            if record.name == env_name:
                return record
        return None

    def exists(self, tool: RuntimeTool, env_name: str) -> bool:
        return self.find(tool, env_name) is not None
