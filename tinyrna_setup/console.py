from functools import lru_cache
import logging
import os
import sys
from typing import TYPE_CHECKING, Any, Dict, Optional, Union
from rich.console import Console
from rich.markup import escape
from rich.theme import Theme
from tinyrna_setup.emoji import load_emoji


if TYPE_CHECKING:
    from rich.console import HighlighterType, JustifyMethod, OverflowMethod
    from rich.style import Style
    from rich.text import Text


LOG = logging.getLogger(__name__)


UTF8_ENCODINGS = {"utf-8", "utf8", "cp65001", "utf-8-sig"}


@lru_cache()
def should_use_ascii() -> bool:
    """
    True when stdout can't encode the status icons.
    """
    encoding = (getattr(sys.stdout, "encoding", "") or "").lower()
    return encoding not in UTF8_ENCODINGS


class SafeConsole(Console):
    """
    Console subclass that swaps our custom emoji codes for ASCII alternatives
    when the output encoding can't render them.
    """

    def render_str(
        self,
        text: str,
        *,
        style: Union[str, "Style"] = "",
        justify: Optional["JustifyMethod"] = None,
        overflow: Optional["OverflowMethod"] = None,
        emoji: Optional[bool] = None,
        markup: Optional[bool] = None,
        highlight: Optional[bool] = None,
        highlighter: Optional["HighlighterType"] = None,
    ) -> "Text":
        text = load_emoji(text, use_ascii=should_use_ascii())

        return super().render_str(
            text,
            style=style,
            justify=justify,
            overflow=overflow,
            emoji=emoji,
            markup=markup,
            highlight=highlight,
            highlighter=highlighter,
        )


SETUP_THEME = {
    "success": "bold green",
    "status": "bold blue",
    "fail": "bold red",
    "warn": "bold yellow",
    "cmd": "bold cyan",
    "progress.download": "green",
}


def build_console(**overrides: Any) -> SafeConsole:
    """
    Console with the setup theme. With NON_INTERACTIVE=1 output stays styled
    but spinners and progress bars are not animated.
    """
    kwargs: Dict[str, Any] = {
        "theme": Theme(SETUP_THEME),
        "emoji": not should_use_ascii(),
        "highlight": False,
    }

    if os.getenv("NON_INTERACTIVE") == "1":
        LOG.info("NON_INTERACTIVE is set, forcing non-interactive mode")
        kwargs.update(force_terminal=True, force_interactive=False)

    kwargs.update(overrides)
    return SafeConsole(**kwargs)


main_console = build_console()


def success(message: str, console: Console = main_console) -> None:
    console.print(f"[success]:icon_check: {escape(message)}[/success]")


def status(message: str, console: Console = main_console) -> None:
    console.print(f"[status]{escape(message)}[/status]")


def warn(message: str, console: Console = main_console) -> None:
    console.print(f"[warn]:icon_warning: {escape(message)}[/warn]")


def fail(message: str, console: Console = main_console) -> None:
    console.print(f"[fail]:icon_fail: {escape(message)}[/fail]")
