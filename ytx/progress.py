"""
Spinner and progress bar widgets.

Both render to ``terminal.ui_target()``, looked up on every write. When the
target is not a terminal they degrade to plain static lines: the spinner prints
its message once and the progress bar stays silent until ``finish``.
"""

import logging
import threading
from typing import List, Optional

from colorama import Fore, Style
from wcwidth import wcwidth

from . import terminal
from .defaults import (
    BAR_EMPTY,
    BAR_FILLED,
    BAR_WIDTH,
    ELLIPSIS,
    SPINNER_FRAMES,
    SPINNER_INTERVAL,
    SUCCESS_GLYPH,
    WARNING_GLYPH,
)

logger = logging.getLogger(__name__)

CLEAR_LINE = "\r\x1b[K"
INDENT = "  "


class Spinner:
    """Indeterminate progress spinner running on its own thread"""

    def __init__(self, message: str = "", frames: Optional[List[str]] = None,
                 interval: float = SPINNER_INTERVAL):
        self.message = message
        self.frames = frames or SPINNER_FRAMES
        self.interval = interval
        self.thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._lock = threading.Lock()
        self._started = False

    @property
    def running(self) -> bool:
        thread = self.thread
        return thread is not None and thread.is_alive()

    def start(self, message: Optional[str] = None) -> "Spinner":
        """Start the spinner animation in a separate thread"""
        with self._lock:
            if message is not None:
                self.message = message
            if self._started:
                return self
            self._started = True
            self._stop_event.clear()

            if not terminal.is_ui_interactive():
                terminal.write_ui(f"{INDENT}{self.message}\n")
                return self

            self.thread = threading.Thread(target=self._spin, name="ytx-spinner", daemon=True)
            self.thread.start()
        return self

    def _spin(self) -> None:
        index = 0
        while not self._stop_event.is_set():
            frame = self.frames[index % len(self.frames)]
            terminal.write_ui(
                f"{CLEAR_LINE}{INDENT}{Style.BRIGHT}{Fore.BLUE}{frame}{Style.RESET_ALL} "
                f"{Style.DIM}{self.message}{Style.RESET_ALL}"
            )
            index += 1
            self._stop_event.wait(self.interval)

    def _halt(self) -> None:
        self._stop_event.set()
        with self._lock:
            thread, self.thread = self.thread, None
            self._started = False
        if thread is not None:
            thread.join()

    def stop(self, result: Optional[str] = None) -> None:
        """Stop the animation; print ``result`` as a success line or clear the line"""
        self._halt()
        if not terminal.is_ui_interactive():
            if result:
                terminal.write_ui(f"{INDENT}{result}\n")
            return
        if result:
            terminal.write_ui(
                f"{CLEAR_LINE}{INDENT}{Style.BRIGHT}{Fore.GREEN}{SUCCESS_GLYPH}{Style.RESET_ALL} {result}\n"
            )
        else:
            terminal.write_ui(CLEAR_LINE)

    def fail(self, result: str) -> None:
        """Stop the animation and print ``result`` as a warning line"""
        self._halt()
        if not terminal.is_ui_interactive():
            terminal.write_ui(f"{INDENT}{result}\n")
            return
        terminal.write_ui(
            f"{CLEAR_LINE}{INDENT}{Style.BRIGHT}{Fore.YELLOW}{WARNING_GLYPH}{Style.RESET_ALL} "
            f"{Style.DIM}{result}{Style.RESET_ALL}\n"
        )

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.stop()
        else:
            self.fail(self.message)


def cell_width(text: str) -> int:
    """Number of terminal cells ``text`` occupies"""
    return sum(max(wcwidth(ch), 0) for ch in text)


def truncate_label(label: str, max_cells: int) -> str:
    """Cut ``label`` to ``max_cells`` cells, ending in a single ellipsis when cut"""
    if cell_width(label) <= max_cells:
        return label
    budget = max_cells - cell_width(ELLIPSIS)
    out = []
    used = 0
    for ch in label:
        w = max(wcwidth(ch), 0)
        if used + w > budget:
            break
        out.append(ch)
        used += w
    return "".join(out) + ELLIPSIS


def clamp_percent(percent) -> int:
    return min(max(int(percent), 0), 100)


def format_progress_line(percent, bar_width: int = BAR_WIDTH, label: str = "",
                         term_width: Optional[int] = None) -> str:
    """Build the in-place progress line (leading carriage return and clear included).

    The visible part is ``"  " + bar + " " + "NNN%"`` followed, when the
    terminal leaves room, by two spaces and the label truncated to fit.
    """
    pct = clamp_percent(percent)
    filled = int(pct / 100 * bar_width)
    bar = BAR_FILLED * filled + BAR_EMPTY * (bar_width - filled)
    line = f"{CLEAR_LINE}{INDENT}{Fore.GREEN}{bar}{Style.RESET_ALL} {pct:3d}%"

    if label:
        term_width = terminal.terminal_width() if term_width is None else term_width
        fixed_width = len(INDENT) + bar_width + 1 + 4
        max_label = term_width - fixed_width - 2
        if max_label > 3:
            line += f"  {Style.DIM}{truncate_label(label, max_label)}{Style.RESET_ALL}"
    return line


class ProgressBar:
    """Determinate progress bar that overwrites the current line"""

    def __init__(self, width: int = BAR_WIDTH):
        self.width = width
        self.percent = 0
        self.label = ""

    def render(self, percent, label: str = "", width: Optional[int] = None) -> None:
        self.percent = clamp_percent(percent)
        self.label = label
        if not terminal.is_ui_interactive():
            return
        terminal.write_ui(format_progress_line(self.percent, self.width if width is None else width, label))

    def finish(self, message: str) -> None:
        if not terminal.is_ui_interactive():
            terminal.write_ui(f"{INDENT}{message}\n")
            return
        terminal.write_ui(
            f"{CLEAR_LINE}{INDENT}{Style.BRIGHT}{Fore.GREEN}{SUCCESS_GLYPH}{Style.RESET_ALL} {message}\n"
        )
