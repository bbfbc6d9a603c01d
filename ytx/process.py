"""
Subprocess orchestration with concurrent pipe draining.

A child process writing more than a pipe buffer's worth of output blocks until
somebody reads it. ``run_process`` therefore starts one drainer thread per
output pipe before waiting on the child. Each drainer reads whatever bytes are
available, appends them to its own buffer and hands the decoded text to the
live-text callback.

``run`` layers the structured-output convention on top: the external tool
prints the absolute paths of the files it produced on stdout, one per line,
in between its other output. Only this module ever looks at raw process text.
"""

import codecs
import logging
import os
import shlex
import shutil
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from .defaults import DRAIN_TIMEOUT, READ_CHUNK_SIZE
from .error_handler import (
    DependencyMissing,
    DependentToolFailed,
    NoStructuredOutput,
    ProcessExitedNonZero,
    ReferencedFileMissing,
    YtxError,
)

logger = logging.getLogger(__name__)

TextCallback = Callable[[str], None]


@dataclass(frozen=True)
class SubprocessSpec:
    """What to launch: executable, ordered arguments and optional cwd/env"""
    executable: str
    arguments: Tuple[str, ...] = ()
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None

    def __post_init__(self):
        object.__setattr__(self, "arguments", tuple(str(a) for a in self.arguments))

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.arguments]

    @property
    def name(self) -> str:
        return os.path.basename(self.executable)

    def command_line(self) -> str:
        return " ".join(shlex.quote(part) for part in self.argv)


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str
    stderr: str


class FailureKind(Enum):
    PROCESS_EXITED_NON_ZERO = "process_exited_non_zero"
    NO_STRUCTURED_OUTPUT = "no_structured_output"
    REFERENCED_FILE_MISSING = "referenced_file_missing"
    DEPENDENT_TOOL_FAILED = "dependent_tool_failed"


@dataclass(frozen=True)
class Success:
    paths: Tuple[str, ...]
    ok = True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    tool: str = ""
    exit_code: Optional[int] = None
    detail: str = ""
    path: Optional[str] = None
    ok = False

    def to_error(self) -> YtxError:
        """The exception the driver reports for this failure"""
        if self.kind is FailureKind.PROCESS_EXITED_NON_ZERO:
            return ProcessExitedNonZero(self.tool, self.exit_code, self.detail)
        if self.kind is FailureKind.NO_STRUCTURED_OUTPUT:
            return NoStructuredOutput(self.tool)
        if self.kind is FailureKind.REFERENCED_FILE_MISSING:
            return ReferencedFileMissing(self.path)
        return DependentToolFailed(self.tool, self.detail)


SubprocessOutcome = Union[Success, Failure]


class _StreamDrainer(threading.Thread):
    """Reads one pipe until EOF, accumulating bytes and forwarding decoded chunks"""

    def __init__(self, pipe, label: str, callbacks: List[Tuple[TextCallback, str]]):
        super().__init__(name=f"ytx-drain-{label}", daemon=True)
        self._fd = pipe.fileno()
        self._pipe = pipe
        self._callbacks = callbacks
        self._lock = threading.Lock()
        self._buffer = bytearray()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def run(self) -> None:
        try:
            while True:
                chunk = os.read(self._fd, READ_CHUNK_SIZE)
                if not chunk:
                    break
                with self._lock:
                    self._buffer.extend(chunk)
                self._forward(self._decoder.decode(chunk))
            self._forward(self._decoder.decode(b"", final=True))
        except OSError as e:
            logger.debug("Reading %s stopped: %s", self.name, e)
        finally:
            self._pipe.close()

    def _forward(self, text: str) -> None:
        if not text:
            return
        for callback, prefix in self._callbacks:
            try:
                callback(prefix + text)
            except Exception:
                # a broken progress parser must not stop the pipe from draining
                logger.debug("Live-text callback failed", exc_info=True)

    def text(self) -> str:
        with self._lock:
            data = bytes(self._buffer)
        return data.decode("utf-8", errors="replace")


def is_command_available(command: str) -> bool:
    """Check if a command is available in PATH"""
    return shutil.which(command) is not None


def run_process(spec: SubprocessSpec,
                on_live_text: Optional[TextCallback] = None,
                on_verbose_text: Optional[TextCallback] = None,
                drain_timeout: float = DRAIN_TIMEOUT) -> ProcessResult:
    """Run ``spec`` to completion while draining both output pipes concurrently.

    Live text from stdout and stderr may arrive interleaved, in any order.
    The returned output is complete once both drainers reached EOF. A drainer
    that is still blocked ``drain_timeout`` seconds after the child exited
    (a grandchild keeping the pipe open) is abandoned and the text captured so
    far is used.
    """
    if on_verbose_text:
        on_verbose_text(f"Running: {spec.command_line()}")
    logger.debug("Launching %s", spec.argv)

    try:
        process = subprocess.Popen(
            spec.argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=spec.cwd,
            env=spec.env,
        )
    except FileNotFoundError as e:
        raise DependencyMissing(spec.name) from e

    stdout_callbacks = [(on_live_text, "")] if on_live_text else []
    stderr_callbacks = [(on_live_text, "")] if on_live_text else []
    if on_verbose_text:
        stderr_callbacks.append((on_verbose_text, f"[{spec.name} stderr] "))

    drainers = (
        _StreamDrainer(process.stdout, "stdout", stdout_callbacks),
        _StreamDrainer(process.stderr, "stderr", stderr_callbacks),
    )
    for drainer in drainers:
        drainer.start()

    exit_code = process.wait()
    for drainer in drainers:
        drainer.join(drain_timeout)
        if drainer.is_alive():
            logger.warning("%s output still open after exit; using what was captured", spec.name)

    logger.debug("%s exited with status %s", spec.name, exit_code)
    return ProcessResult(exit_code=exit_code, stdout=drainers[0].text(), stderr=drainers[1].text())


def extract_paths(output: str) -> List[str]:
    """Lines of ``output`` that are absolute filesystem paths, in emitted order"""
    return [line.strip() for line in output.splitlines()
            if line.strip() and os.path.isabs(line.strip())]


def outcome_from_result(result: ProcessResult, tool: str) -> SubprocessOutcome:
    if result.exit_code != 0:
        return Failure(FailureKind.PROCESS_EXITED_NON_ZERO, tool=tool,
                       exit_code=result.exit_code, detail=result.stderr.strip())

    paths = extract_paths(result.stdout)
    if not paths:
        return Failure(FailureKind.NO_STRUCTURED_OUTPUT, tool=tool, exit_code=0)
    for path in paths:
        if not os.path.exists(path):
            return Failure(FailureKind.REFERENCED_FILE_MISSING, tool=tool, exit_code=0, path=path)
    return Success(tuple(paths))


def run(spec: SubprocessSpec,
        on_live_text: Optional[TextCallback] = None,
        on_verbose_text: Optional[TextCallback] = None) -> SubprocessOutcome:
    """Run ``spec`` and resolve the files it reported on stdout. Never retries."""
    result = run_process(spec, on_live_text, on_verbose_text)
    return outcome_from_result(result, spec.name)
