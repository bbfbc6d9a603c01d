import sys
import threading

import pytest

from ytx.error_handler import (
    DependencyMissing,
    DependentToolFailed,
    NoStructuredOutput,
    ProcessExitedNonZero,
    ReferencedFileMissing,
)
from ytx.process import (
    Failure,
    FailureKind,
    ProcessResult,
    Success,
    SubprocessSpec,
    extract_paths,
    outcome_from_result,
    run,
    run_process,
)


def python_spec(code, *args):
    return SubprocessSpec(sys.executable, ("-c", code, *args))


def test_success_with_single_existing_path(tmp_path):
    target = tmp_path / "song.m4a"
    target.write_bytes(b"audio")
    spec = python_spec("import sys; print('[download] 100%'); print(sys.argv[1])", str(target))

    outcome = run(spec)

    assert isinstance(outcome, Success)
    assert outcome.ok
    assert outcome.paths == (str(target),)


def test_no_absolute_path_is_no_structured_output():
    outcome = run(python_spec("print('downloaded something'); print('relative/path.m4a')"))

    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.NO_STRUCTURED_OUTPUT
    assert isinstance(outcome.to_error(), NoStructuredOutput)


def test_nonzero_exit_carries_code_and_stderr():
    outcome = run(python_spec("import sys; sys.stderr.write('disk full'); sys.exit(7)"))

    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.PROCESS_EXITED_NON_ZERO
    assert outcome.exit_code == 7
    assert outcome.detail == "disk full"
    error = outcome.to_error()
    assert isinstance(error, ProcessExitedNonZero)
    assert error.returncode == 7
    assert error.stderr == "disk full"


def test_reported_path_missing_on_disk(tmp_path):
    missing = tmp_path / "gone.m4a"
    outcome = run(python_spec("import sys; print(sys.argv[1])", str(missing)))

    assert outcome.kind is FailureKind.REFERENCED_FILE_MISSING
    assert outcome.path == str(missing)
    assert isinstance(outcome.to_error(), ReferencedFileMissing)


def test_large_output_on_both_pipes_does_not_deadlock():
    """Each pipe gets far more than a pipe buffer; neither may block the child."""
    code = (
        "import sys\n"
        "for i in range(2000):\n"
        "    sys.stdout.write('o' * 500 + '\\n')\n"
        "    sys.stderr.write('e' * 500 + '\\n')\n"
    )
    result = run_process(python_spec(code))

    assert result.exit_code == 0
    assert result.stdout.count("\n") == 2000
    assert result.stderr.count("\n") == 2000


def test_live_text_receives_both_streams():
    chunks = []
    lock = threading.Lock()

    def collect(text):
        with lock:
            chunks.append(text)

    run_process(python_spec("import sys; print('out'); sys.stderr.write('err\\n')"), on_live_text=collect)

    joined = "".join(chunks)
    assert "out" in joined
    assert "err" in joined


def test_verbose_gets_command_and_prefixed_stderr():
    lines = []
    run_process(python_spec("import sys; sys.stderr.write('warn\\n')"), on_verbose_text=lines.append)

    assert lines[0].startswith("Running: ")
    assert any(line.startswith(f"[{SubprocessSpec(sys.executable).name} stderr] ") for line in lines[1:])


def test_failing_callback_does_not_stop_draining():
    def broken(text):
        raise ValueError("parser bug")

    result = run_process(python_spec("print('x' * 100000)"), on_live_text=broken)
    assert len(result.stdout.strip()) == 100000


def test_utf8_split_across_reads_decodes_cleanly():
    result = run_process(python_spec("import sys; sys.stdout.buffer.write('ü'.encode() * 5000)"))
    assert result.stdout == "ü" * 5000


def test_missing_executable_is_dependency_missing():
    with pytest.raises(DependencyMissing) as excinfo:
        run(SubprocessSpec("ytx-definitely-not-installed"))
    assert excinfo.value.tool == "ytx-definitely-not-installed"


def test_extract_paths_keeps_order_and_drops_noise():
    output = "[download] Destination: x\n/tmp/a.m4a\n  /tmp/b.m4a  \nrelative.m4a\n\n"
    assert extract_paths(output) == ["/tmp/a.m4a", "/tmp/b.m4a"]


def test_nonzero_exit_wins_over_paths(tmp_path):
    target = tmp_path / "a"
    target.write_text("")
    outcome = outcome_from_result(ProcessResult(2, f"{target}\n", "boom\n"), "yt-dlp")
    assert outcome.kind is FailureKind.PROCESS_EXITED_NON_ZERO
    assert outcome.detail == "boom"


def test_dependent_tool_failure_maps_to_error():
    failure = Failure(FailureKind.DEPENDENT_TOOL_FAILED, tool="ffmpeg", detail="bad codec")
    error = failure.to_error()
    assert isinstance(error, DependentToolFailed)
    assert "bad codec" in error.message


def test_spec_coerces_arguments_to_strings(tmp_path):
    spec = SubprocessSpec("echo", (tmp_path, 3))
    assert spec.arguments == (str(tmp_path), "3")
    assert spec.argv == ["echo", str(tmp_path), "3"]
    assert spec.command_line().startswith("echo ")
