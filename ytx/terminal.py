"""
Terminal capability queries and the UI output target.

Every human-facing writer (spinners, progress bars, status lines) asks
``ui_target()`` for the stream to write to on each call. The CLI switches the
target to stderr when stdout carries transcript data, so data and UI never
interleave on one stream.
"""

import shutil
import sys
import threading
from dataclasses import dataclass
from typing import Optional, TextIO

from colorama import Style

from .defaults import FALLBACK_TERMINAL_WIDTH

_ui_lock = threading.Lock()
_ui_stream: Optional[TextIO] = None


@dataclass(frozen=True)
class StreamDescriptor:
    """Identity of a standard stream and whether it is attached to a terminal"""
    name: str
    is_terminal: bool


def _isatty(stream) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError, OSError):
        # closed, detached or replaced streams
        return False


def describe(stream) -> StreamDescriptor:
    if stream is sys.stdin:
        name = "input"
    elif stream is sys.stderr:
        name = "error"
    elif stream is sys.stdout:
        name = "output"
    else:
        name = getattr(stream, "name", repr(stream))
    return StreamDescriptor(name=str(name), is_terminal=_isatty(stream))


def is_input_interactive() -> bool:
    return _isatty(sys.stdin)


def is_output_interactive(stream=None) -> bool:
    """Whether ``stream`` (stdout by default) is attached to a terminal"""
    return _isatty(sys.stdout if stream is None else stream)


def terminal_width() -> int:
    """Get terminal width with fallback"""
    try:
        columns = shutil.get_terminal_size((FALLBACK_TERMINAL_WIDTH, 24)).columns
    except (AttributeError, ValueError, OSError):
        return FALLBACK_TERMINAL_WIDTH
    return columns if columns > 0 else FALLBACK_TERMINAL_WIDTH


def ui_target() -> TextIO:
    with _ui_lock:
        return _ui_stream if _ui_stream is not None else sys.stdout


def set_ui_target(stream: Optional[TextIO]) -> None:
    """Redirect UI output; ``None`` restores the default (stdout)."""
    global _ui_stream
    with _ui_lock:
        _ui_stream = stream


def is_ui_interactive() -> bool:
    return _isatty(ui_target())


def style(text: str, *codes: str, stream=None) -> str:
    """Wrap ``text`` in ANSI codes only when ``stream`` is a terminal"""
    if not codes or not _isatty(ui_target() if stream is None else stream):
        return text
    return "".join(codes) + text + Style.RESET_ALL


def write_ui(text: str) -> None:
    """Write to the current UI target and flush"""
    stream = ui_target()
    stream.write(text)
    stream.flush()
