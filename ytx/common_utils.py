import logging
from typing import Optional

from colorama import Fore, Style
from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from . import terminal
from .constants import PREVIEW_LINES
from .defaults import INFO_PREFIX

logger = logging.getLogger(__name__)

BANNER_ART = r"""
      _
_   _| |___  __
| | | | __\ \/ /
| |_| | |_ >  <
 \__, |\__/_/\_\
 |___/"""

BANNER_TAGLINE = "YouTube downloader + transcriber"


def ui_console() -> Console:
    """rich console bound to the current UI target"""
    return Console(file=terminal.ui_target(), highlight=False, soft_wrap=True)


def print_info(message: str) -> None:
    prefix = terminal.style(INFO_PREFIX, Style.BRIGHT, Fore.BLUE)
    terminal.write_ui(f"{prefix} {message}\n")


def print_banner() -> None:
    """Display the welcome banner (terminal only)"""
    if not terminal.is_ui_interactive():
        return
    art = "\n".join("  " + line for line in BANNER_ART.splitlines())
    terminal.write_ui(
        f"{Style.BRIGHT}{Fore.BLUE}{art}{Style.RESET_ALL}\n"
        f"  {Style.DIM}{BANNER_TAGLINE}{Style.RESET_ALL}\n\n"
    )


def print_preview(text: str, max_lines: int = PREVIEW_LINES, console: Optional[Console] = None) -> None:
    """Show the first ``max_lines`` lines of a transcript between two rules"""
    console = console or ui_console()
    console.print()
    console.print(Rule(f"Preview (first {max_lines} lines)", style="dim"))
    for line in text.splitlines()[:max_lines]:
        console.print(Text(line))
    console.print(Rule(style="dim"))
    console.print()


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"
