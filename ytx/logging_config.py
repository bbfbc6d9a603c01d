#setup human vs JSON logging
import logging
import sys

from colorama import Fore, Style
from pythonjsonlogger import jsonlogger


class ColoramaFormatter(logging.Formatter):
    def __init__(self, fmt=None, datefmt=None, use_color=True):
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def format(self, record):
        msg = super().format(record)
        if not self.use_color:
            return msg
        if record.levelno >= logging.ERROR:
            return f"{Fore.RED}{msg}{Style.RESET_ALL}"
        if record.levelno >= logging.WARNING:
            return f"{Fore.YELLOW}{msg}{Style.RESET_ALL}"
        return msg


def setup_logging(json_format: bool = False, level: int = logging.WARNING, stream=None):
    """Configure the root logger once for the whole app."""
    root = logging.getLogger()
    root.setLevel(level)
    # remove any default handlers
    for h in list(root.handlers):
        root.removeHandler(h)

    stream = stream or sys.stderr
    handler = logging.StreamHandler(stream)
    if json_format:
        fmt = jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s'
        )
    else:
        try:
            use_color = stream.isatty()
        except (AttributeError, ValueError):
            use_color = False
        fmt = ColoramaFormatter('%(levelname)s %(name)s: %(message)s', use_color=use_color)
    handler.setFormatter(fmt)
    root.addHandler(handler)
    return handler
