"""
Raw-mode terminal input and the process-wide interrupt handler.

The interrupt handler is the only way out of a running ``ytx`` besides normal
completion. It restores the terminal, deletes registered partial files, shows
the cursor again and exits with ``128 + signum``. It sticks to ``termios``,
``os.unlink``, ``os.write`` and ``os._exit``; every byte it writes is encoded
when the handler is installed.
"""

import logging
import os
import signal
import sys
import termios
import threading
from typing import List, Optional

from colorama import Style

from . import terminal
from .cleanup import get_registry

logger = logging.getLogger(__name__)

SHOW_CURSOR = b"\x1b[?25h"
INTERRUPT_NOTICE = "=> Interrupted, cleaned up partial files."
HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class RawModeState:
    """Saved terminal attributes plus whether raw mode is currently on"""

    def __init__(self):
        self.lock = threading.RLock()
        self.saved_attributes: Optional[List] = None
        self.active = False
        self.fd: Optional[int] = None


_state = RawModeState()
_handler_lock = threading.Lock()
_handler_installed = False
_interrupted = False
_notice_bytes = b""
_cursor_fd: Optional[int] = None


def _input_fd() -> int:
    return sys.stdin.fileno()


def is_raw_mode_active() -> bool:
    with _state.lock:
        return _state.active


def enter_raw_mode() -> None:
    """Switch stdin to character-at-a-time input without echo"""
    if not terminal.is_input_interactive():
        return
    fd = _input_fd()
    with _state.lock:
        if _state.active:
            return
        saved = termios.tcgetattr(fd)
        raw = termios.tcgetattr(fd)
        raw[3] &= ~(termios.ECHO | termios.ICANON)
        raw[6][termios.VMIN] = 1
        raw[6][termios.VTIME] = 0
        termios.tcsetattr(fd, termios.TCSAFLUSH, raw)
        _state.saved_attributes = saved
        _state.fd = fd
        _state.active = True
    install_interrupt_handler()


def exit_raw_mode() -> None:
    """Restore the attributes captured by ``enter_raw_mode``; no-op when inactive"""
    with _state.lock:
        if not _state.active:
            return
        termios.tcsetattr(_state.fd, termios.TCSAFLUSH, _state.saved_attributes)
        _state.active = False
        _state.saved_attributes = None
        _state.fd = None


def register_interrupt_cleanup(path) -> None:
    get_registry().register(path)


def unregister_interrupt_cleanup(path) -> None:
    get_registry().unregister(path)


def _prepare_messages() -> None:
    global _notice_bytes, _cursor_fd
    if os.isatty(2):
        notice = f"\n{Style.DIM}{INTERRUPT_NOTICE}{Style.RESET_ALL}\n"
    else:
        notice = f"\n{INTERRUPT_NOTICE}\n"
    _notice_bytes = notice.encode("utf-8")
    # only emit the cursor escape on a terminal, never into piped data
    _cursor_fd = next((fd for fd in (1, 2) if os.isatty(fd)), None)


def install_interrupt_handler() -> bool:
    """Install the interrupt handler once; returns whether it is installed.

    Signal handlers can only be set from the main thread; calls from other
    threads are ignored.
    """
    global _handler_installed
    with _handler_lock:
        if _handler_installed:
            return True
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Interrupt handler not installed from %s", threading.current_thread().name)
            return False
        _prepare_messages()
        for signum in HANDLED_SIGNALS:
            signal.signal(signum, _on_interrupt)
        _handler_installed = True
    logger.debug("Interrupt handler installed")
    return True


def _on_interrupt(signum, frame=None) -> None:
    global _interrupted
    if _interrupted:
        return
    _interrupted = True
    try:
        exit_raw_mode()
    except termios.error:
        pass
    get_registry().drain_and_delete_all()
    try:
        if _cursor_fd is not None:
            os.write(_cursor_fd, SHOW_CURSOR)
        os.write(2, _notice_bytes)
    except OSError:
        pass
    os._exit(128 + signum)


def trigger_interrupt() -> None:
    """Run the interrupt path as if SIGINT had been delivered (Ctrl-C read in raw mode)"""
    if not _notice_bytes:
        _prepare_messages()
    _on_interrupt(signal.SIGINT)


def _reset_state() -> None:
    """Forget raw-mode and handler bookkeeping without touching the terminal"""
    global _handler_installed, _interrupted
    with _state.lock:
        _state.active = False
        _state.saved_attributes = None
        _state.fd = None
    _handler_installed = False
    _interrupted = False
