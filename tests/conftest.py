import io
import logging
import os
import sys

import pytest

# Add the parent directory to sys.path to make ytx importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ytx import rawmode, terminal
from ytx.cleanup import get_registry

from helpers.common_helpers import FakeTerminal


@pytest.fixture(autouse=True)
def reset_process_state():
    """Reset the UI target, raw-mode bookkeeping and cleanup registry around each test."""
    terminal.set_ui_target(None)
    rawmode._reset_state()
    get_registry().clear()
    yield
    terminal.set_ui_target(None)
    rawmode._reset_state()
    get_registry().clear()


@pytest.fixture
def tty_stream():
    """UI target that looks like a terminal."""
    stream = FakeTerminal()
    terminal.set_ui_target(stream)
    return stream


@pytest.fixture
def pipe_stream():
    """UI target that looks like a pipe."""
    stream = io.StringIO()
    terminal.set_ui_target(stream)
    return stream


@pytest.fixture
def restore_root_logger():
    """Drop handlers a test added to the root logger and restore its level."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
    root.setLevel(level)
