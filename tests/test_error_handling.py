import io
import json
import logging

from ytx.error_handler import (
    CapabilityUnavailable,
    DependencyMissing,
    ErrorCategory,
    ErrorReporter,
    InvalidInput,
    ProcessExitedNonZero,
    UserCancelledMenu,
)
from ytx.logging_config import ColoramaFormatter, setup_logging

from helpers.common_helpers import FakeTerminal


def test_dependency_missing_has_install_hint():
    error = DependencyMissing("ffmpeg")
    assert error.message == "ffmpeg not found."
    assert "ffmpeg" in error.suggested_action
    assert error.category is ErrorCategory.DEPENDENCY
    assert error.exit_code == 1


def test_process_exit_message_includes_stderr():
    error = ProcessExitedNonZero("yt-dlp", 2, "ERROR: Unsupported URL")
    assert error.message == "yt-dlp exited with status 2:\nERROR: Unsupported URL"
    assert ProcessExitedNonZero("yt-dlp", 2).message == "yt-dlp exited with status 2."


def test_cancelled_menu_is_not_a_failure():
    assert UserCancelledMenu().exit_code == 0


def test_reporter_prints_plain_text_to_pipe():
    stream = io.StringIO()
    reporter = ErrorReporter(stream=stream)
    info = reporter.log_error(DependencyMissing("yt-dlp"), {"url": "https://youtu.be/x"})

    lines = stream.getvalue().splitlines()
    assert lines[0] == "Error: yt-dlp not found."
    assert lines[1].strip().startswith("Install with:")
    assert "\x1b[" not in stream.getvalue()
    assert info.category is ErrorCategory.DEPENDENCY
    assert info.context == {"url": "https://youtu.be/x"}


def test_reporter_colors_on_terminal():
    stream = FakeTerminal()
    ErrorReporter(stream=stream).log_error(InvalidInput("bad"))
    assert "\x1b[" in stream.getvalue()
    assert "bad" in stream.getvalue()


def test_reporter_handles_plain_exceptions():
    stream = io.StringIO()
    info = ErrorReporter(stream=stream).log_error(OSError("No space left on device"))
    assert info.category is ErrorCategory.UNKNOWN
    assert "No space left on device" in stream.getvalue()


def test_error_summary_counts_categories():
    reporter = ErrorReporter(stream=io.StringIO(), max_error_history=2)
    reporter.log_error(CapabilityUnavailable())
    reporter.log_error(CapabilityUnavailable())
    reporter.log_error(InvalidInput("x"))

    summary = reporter.get_error_summary()
    assert summary["total_errors"] == 2
    assert summary["category_breakdown"] == {"transcription": 1, "user_input": 1}


def test_colorama_formatter_colors_warnings():
    formatter = ColoramaFormatter("%(message)s")
    record = logging.LogRecord("ytx", logging.WARNING, __file__, 1, "careful", None, None)
    assert formatter.format(record).startswith("\x1b[33m")
    plain = ColoramaFormatter("%(message)s", use_color=False)
    assert plain.format(record) == "careful"


def test_setup_logging_single_handler(restore_root_logger):
    stream = io.StringIO()
    setup_logging(level=logging.INFO, stream=stream)
    setup_logging(level=logging.INFO, stream=stream)

    assert len(restore_root_logger.handlers) == 1
    logging.getLogger("ytx.test").warning("disk almost full")
    assert "WARNING ytx.test: disk almost full" in stream.getvalue()


def test_setup_logging_json(restore_root_logger):
    stream = io.StringIO()
    setup_logging(json_format=True, level=logging.DEBUG, stream=stream)
    logging.getLogger("ytx.test").info("hello")

    record = json.loads(stream.getvalue().splitlines()[-1])
    assert record["message"] == "hello"
    assert record["levelname"] == "INFO"
