"""
Status icons used in console messages, written as ``:icon_<name>:`` in markup.
"""
import re
from typing import Dict, Match, NamedTuple


class Icon(NamedTuple):
    glyph: str
    ascii: str


ICONS: Dict[str, Icon] = {
    "check": Icon("✓", "+"),
    "fail": Icon("⃠", "X"),
    "warning": Icon("⚠️", "!"),
    "info": Icon("ℹ️", "i"),
}

ICON_PATTERN = re.compile(r":icon_(\w+):")


def load_emoji(text: str, use_ascii: bool = False) -> str:
    """
    Swap icon codes for their glyph, or for plain ASCII when the terminal
    can't encode it. Unknown codes are left alone for Rich to handle.
    """
    if not isinstance(text, str) or ":icon_" not in text:
        return text

    def replace(match: Match[str]) -> str:
        icon = ICONS.get(match.group(1))
        if icon is None:
            return match.group(0)
        return icon.ascii if use_ascii else icon.glyph

    return ICON_PATTERN.sub(replace, text)
