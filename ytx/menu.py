"""
Arrow-key single-select menu for the guided flow.

Layout of one render (the cursor is left at the end of the hint line)::

      Title:
    <blank>
      > 1. First   description
        2. Second  description
    <blank>
      ↑↓ Navigate  Enter Select  q Quit
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from colorama import Fore, Style

from . import terminal
from .rawmode import enter_raw_mode, exit_raw_mode, trigger_interrupt

KEY_UP = "up"
KEY_DOWN = "down"
KEY_ENTER = "enter"
KEY_INTERRUPT = "interrupt"

HINT = "↑↓ Navigate  Enter Select  q Quit"


@dataclass(frozen=True)
class MenuItem:
    label: str
    description: str = ""


class MenuAction(Enum):
    IGNORE = "ignore"
    REDRAW = "redraw"
    CONFIRM = "confirm"
    CANCEL = "cancel"


def decode_key(data: bytes) -> str:
    """Map up to three raw bytes from stdin to a key name or literal character"""
    if not data:
        return KEY_ENTER
    if len(data) == 1:
        if data in (b"\n", b"\r"):
            return KEY_ENTER
        if data == b"\x03":
            return KEY_INTERRUPT
        return chr(data[0])
    if len(data) == 3 and data[:2] == b"\x1b[":
        if data[2:] == b"A":
            return KEY_UP
        if data[2:] == b"B":
            return KEY_DOWN
    return chr(data[0])


def read_key(fd: Optional[int] = None) -> str:
    """Block until one key arrives. Ctrl-C takes the interrupt path and never returns."""
    key = decode_key(os.read(sys.stdin.fileno() if fd is None else fd, 3))
    if key == KEY_INTERRUPT:
        trigger_interrupt()
    return key


class Menu:
    """Selection state plus rendering for a single ``pick``"""

    def __init__(self, title: str, items: Sequence[MenuItem], stream=None):
        if not items:
            raise ValueError("Menu needs at least one item")
        self.title = title
        self.items = list(items)
        self.selected = 0
        self.stream = stream
        self._drawn = False

    @property
    def line_count(self) -> int:
        # title, blank, items, blank, hint
        return len(self.items) + 4

    def move(self, delta: int) -> None:
        self.selected = (self.selected + delta) % len(self.items)

    def handle_key(self, key: str) -> MenuAction:
        if key in (KEY_UP, "k"):
            self.move(-1)
            return MenuAction.REDRAW
        if key in (KEY_DOWN, "j"):
            self.move(1)
            return MenuAction.REDRAW
        if key == "q":
            return MenuAction.CANCEL
        if key == KEY_ENTER:
            return MenuAction.CONFIRM
        if len(key) == 1 and key.isdigit():
            number = int(key)
            if 1 <= number <= len(self.items):
                self.selected = number - 1
                return MenuAction.CONFIRM
        return MenuAction.IGNORE

    def _write(self, text: str) -> None:
        stream = self.stream or sys.stdout
        stream.write(text)
        stream.flush()

    def render(self) -> None:
        buf = []
        if self._drawn:
            buf.append(f"\x1b[{self.line_count - 1}A\r")
        buf.append(f"  {Style.BRIGHT}{self.title}:{Style.RESET_ALL}\x1b[K\n")
        buf.append("\x1b[K\n")
        for i, item in enumerate(self.items):
            is_selected = i == self.selected
            marker = ">" if is_selected else " "
            label = f"{Style.BRIGHT}{Fore.GREEN}{item.label}{Style.RESET_ALL}" if is_selected else item.label
            desc = f"{Style.DIM}{item.description}{Style.RESET_ALL}"
            buf.append(f"  {marker} {i + 1}. {label}  {desc}\x1b[K\n")
        buf.append(f"\x1b[K\n  {Style.DIM}{HINT}{Style.RESET_ALL}\x1b[K")
        self._write("".join(buf))
        self._drawn = True

    def erase_hint(self) -> None:
        """Erase the blank and hint lines, leaving the cursor right after the items"""
        self._write("\x1b[1A\r\x1b[J")


def pick(title: str, items: Sequence[MenuItem],
         key_reader: Callable[[], str] = read_key, stream=None) -> Optional[int]:
    """Let the user choose one of ``items``; returns its index or ``None`` on cancel.

    Without a terminal on both stdin and stdout the first item is returned
    straight away.
    """
    if not (terminal.is_input_interactive() and terminal.is_output_interactive()):
        return 0

    menu = Menu(title, items, stream=stream)
    enter_raw_mode()
    try:
        menu.render()
        while True:
            action = menu.handle_key(key_reader())
            if action is MenuAction.REDRAW:
                menu.render()
            elif action is MenuAction.CONFIRM:
                menu.render()
                menu.erase_hint()
                return menu.selected
            elif action is MenuAction.CANCEL:
                menu.erase_hint()
                return None
    finally:
        exit_raw_mode()
