"""
Error taxonomy and user-facing error reporting for ytx.

Every failure the driver can show to a user is a ``YtxError`` subclass carrying
a category and, where there is one, a suggested action. ``ErrorReporter``
prints them to stderr (colored only on a terminal), logs them and keeps a
history for the end-of-run summary.
"""

import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, TextIO

from colorama import Fore, Style

from .constants import EXIT_FAILURE, EXIT_OK, INSTALL_HINTS
from .terminal import style

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Error categories for better classification"""
    DEPENDENCY = "dependency"
    PROCESS = "process"
    DOWNLOAD = "download"
    FILE_SYSTEM = "file_system"
    TRANSCRIPTION = "transcription"
    USER_INPUT = "user_input"
    UNKNOWN = "unknown"


class YtxError(Exception):
    """Base class for errors reported to the user"""

    category = ErrorCategory.UNKNOWN
    exit_code = EXIT_FAILURE

    def __init__(self, message: str, suggested_action: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.suggested_action = suggested_action


class DependencyMissing(YtxError):
    """A required external tool is not on PATH"""

    category = ErrorCategory.DEPENDENCY

    def __init__(self, tool: str, suggested_action: Optional[str] = None):
        super().__init__(f"{tool} not found.", suggested_action or INSTALL_HINTS.get(tool))
        self.tool = tool


class ProcessExitedNonZero(YtxError):
    category = ErrorCategory.PROCESS

    def __init__(self, tool: str, exit_code: int, stderr: str = ""):
        if stderr:
            message = f"{tool} exited with status {exit_code}:\n{stderr}"
        else:
            message = f"{tool} exited with status {exit_code}."
        super().__init__(message)
        self.tool = tool
        self.returncode = exit_code
        self.stderr = stderr


class NoStructuredOutput(YtxError):
    category = ErrorCategory.DOWNLOAD

    def __init__(self, tool: str = "yt-dlp"):
        super().__init__(f"{tool} did not return a file path.")
        self.tool = tool


class ReferencedFileMissing(YtxError):
    category = ErrorCategory.FILE_SYSTEM

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Downloaded file not found: {path}")
        self.path = path


class DependentToolFailed(YtxError):
    category = ErrorCategory.PROCESS

    def __init__(self, tool: str, detail: str = ""):
        message = f"{tool} failed to extract audio from video."
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message, INSTALL_HINTS.get(tool))
        self.tool = tool
        self.detail = detail


class CapabilityUnavailable(YtxError):
    category = ErrorCategory.TRANSCRIPTION

    def __init__(self, message: str = "Speech transcription is not available on this system.",
                 suggested_action: Optional[str] = "Install with: pip install faster-whisper"):
        super().__init__(message, suggested_action)


class UnsupportedLocale(YtxError):
    category = ErrorCategory.TRANSCRIPTION

    def __init__(self, locale: str):
        super().__init__(f'Locale "{locale}" is not supported for speech transcription.')
        self.locale = locale


class UserCancelledMenu(YtxError):
    """Not a failure: the user backed out of the guided flow"""

    category = ErrorCategory.USER_INPUT
    exit_code = EXIT_OK

    def __init__(self, message: str = "Cancelled."):
        super().__init__(message)


class InvalidInput(YtxError):
    category = ErrorCategory.USER_INPUT


@dataclass
class ErrorInfo:
    """Structured error information"""
    message: str
    category: ErrorCategory
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, Any] = field(default_factory=dict)
    suggested_action: Optional[str] = None
    exit_code: int = EXIT_FAILURE


class ErrorReporter:
    """Prints errors for the user and remembers them for the final summary"""

    def __init__(self, stream: Optional[TextIO] = None, max_error_history: int = 1000):
        self.stream = stream
        self.max_error_history = max_error_history
        self.error_history: List[ErrorInfo] = []

    def _stream(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stderr

    def log_error(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> ErrorInfo:
        """Log an error with structured information and print it"""
        if isinstance(error, YtxError):
            info = ErrorInfo(
                message=error.message,
                category=error.category,
                context=context or {},
                suggested_action=error.suggested_action,
                exit_code=error.exit_code,
            )
        else:
            info = ErrorInfo(message=str(error) or type(error).__name__,
                             category=ErrorCategory.UNKNOWN, context=context or {})

        self._add_to_history(info)
        logger.debug(self._format_error_message(info), exc_info=error)
        self.print_error(info.message, info.suggested_action)
        return info

    def _format_error_message(self, info: ErrorInfo) -> str:
        parts = [f"[{info.category.value.upper()}] {info.message}"]
        if info.context:
            parts.append("Context: " + ", ".join(f"{k}={v}" for k, v in info.context.items()))
        if info.suggested_action:
            parts.append(f"Suggested action: {info.suggested_action}")
        return " | ".join(parts)

    def _add_to_history(self, info: ErrorInfo) -> None:
        self.error_history.append(info)
        if len(self.error_history) > self.max_error_history:
            self.error_history = self.error_history[-self.max_error_history:]

    def print_error(self, message: str, suggested_action: Optional[str] = None) -> None:
        stream = self._stream()
        prefix = style("Error:", Style.BRIGHT, Fore.RED, stream=stream)
        stream.write(f"{prefix} {message}\n")
        if suggested_action:
            stream.write(f"  {style(suggested_action, Style.DIM, stream=stream)}\n")
        stream.flush()

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of recorded errors"""
        category_counts: Dict[str, int] = {}
        for info in self.error_history:
            category_counts[info.category.value] = category_counts.get(info.category.value, 0) + 1
        return {
            "total_errors": len(self.error_history),
            "category_breakdown": category_counts,
        }
