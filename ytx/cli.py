"""
ytx command line: download with yt-dlp, transcribe, write .txt/.srt.

Run without a URL on a terminal for the guided flow.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import typer
from rich.prompt import Prompt

from . import terminal
from .cleanup import tracked_write
from .common_utils import plural, print_banner, print_info, print_preview, ui_console
from .config import load_config, merge_overrides
from .constants import (
    APP_DESCRIPTION,
    APP_NAME,
    EXAMPLES,
    EXIT_FAILURE,
    EXIT_OK,
    STDOUT_MARKER,
    VERSION,
)
from .defaults import DEFAULT_LOCALE
from .downloader import DownloadProgressTracker, download, ensure_dependencies, fetch_language
from .error_handler import ErrorReporter, InvalidInput, UserCancelledMenu, YtxError
from .formats import OutputFormat, parse_output_format
from .logging_config import setup_logging
from .menu import MenuItem, pick
from .progress import ProgressBar, Spinner
from .rawmode import install_interrupt_handler, register_interrupt_cleanup, unregister_interrupt_cleanup
from .transcription import TranscriptionOptions, WhisperTranscriber, transcribe

logger = logging.getLogger(__name__)

VERBOSE_PREFIX = "[verbose] "

FORMAT_ITEMS = [
    MenuItem("txt", "Plain text, one line per segment"),
    MenuItem("srt", "Subtitles with timestamps"),
]
MEDIA_ITEMS = [
    MenuItem("Audio only", "Fastest, nothing kept but the transcript"),
    MenuItem("Video + audio", "Also saves the mp4 (needs ffmpeg)"),
]
KEEP_AUDIO_ITEMS = [
    MenuItem("No", "Delete the audio after transcribing"),
    MenuItem("Yes", "Keep the downloaded audio file"),
]

app = typer.Typer(
    name=APP_NAME,
    help=APP_DESCRIPTION,
    epilog=EXAMPLES,
    add_completion=False,
)


def make_verbose_log(enabled: bool) -> Optional[Callable[[str], None]]:
    """Echo external tool output to stderr, one prefixed line at a time"""
    if not enabled:
        return None
    lock = threading.Lock()

    def log(text: str) -> None:
        with lock:
            for line in text.splitlines():
                if line.strip():
                    sys.stderr.write(f"{VERBOSE_PREFIX}{line}\n")
            sys.stderr.flush()

    return log


def _pick_or_cancel(title: str, items: List[MenuItem]) -> int:
    index = pick(title, items)
    if index is None:
        raise UserCancelledMenu()
    return index


def guided_flow(settings: Dict[str, Any]) -> str:
    """Ask for the URL and the main options; updates ``settings`` in place"""
    print_banner()
    url = Prompt.ask("  Video URL", console=ui_console()).strip()
    if not url:
        raise InvalidInput("No URL given.")
    terminal.write_ui("\n")

    settings["format"] = FORMAT_ITEMS[_pick_or_cancel("Output format", FORMAT_ITEMS)].label
    terminal.write_ui("\n")
    settings["video"] = _pick_or_cancel("Download", MEDIA_ITEMS) == 1
    terminal.write_ui("\n")
    settings["keep_audio"] = _pick_or_cancel("Keep audio", KEEP_AUDIO_ITEMS) == 1
    terminal.write_ui("\n")
    return url


def detect_locale(url: str) -> str:
    spinner = Spinner("Detecting language...").start()
    try:
        language = fetch_language(url)
    except YtxError:
        spinner.fail(f"Language detection failed, using {DEFAULT_LOCALE}")
        return DEFAULT_LOCALE
    if language:
        spinner.stop(f"Detected language: {language}")
        return language
    spinner.fail(f"Could not detect language, using {DEFAULT_LOCALE}")
    return DEFAULT_LOCALE


def load_model(backend: WhisperTranscriber) -> None:
    spinner = Spinner(f"Loading speech model '{backend.model_name}'...").start()
    try:
        backend.load()
    except YtxError:
        spinner.fail("Speech model unavailable")
        raise
    spinner.stop("Speech model ready")


def transcribe_file(audio_file: Path, options: TranscriptionOptions, backend,
                    output_dir: Optional[Path], keep_audio: bool) -> None:
    """Transcribe one downloaded file and write its transcript.

    ``output_dir`` of ``None`` writes the transcript to stdout.
    """
    print_info(f"Transcribing with locale={options.locale} ...")
    bar = ProgressBar()
    text = transcribe(audio_file, options, backend, bar)
    bar.finish("Transcription complete")

    if output_dir is None:
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        output_file = output_dir / f"{audio_file.stem}.{options.output_format.extension}"
        with tracked_write(output_file) as target:
            target.write_text(text, encoding="utf-8")
        print_info(f"Transcription saved to: {output_file}")

    if not keep_audio:
        try:
            audio_file.unlink()
        except FileNotFoundError:
            pass

    if output_dir is not None:
        print_preview(text)


def run_pipeline(url: str, settings: Dict[str, Any], reporter: ErrorReporter,
                 verbose: bool = False) -> int:
    """Download ``url`` and transcribe every file it produced; returns the exit status"""
    output_format: OutputFormat = parse_output_format(settings["format"])
    video = bool(settings["video"])
    keep_audio = bool(settings["keep_audio"])
    verbose_log = make_verbose_log(verbose)
    logger.debug("Running with settings %s", settings)

    ensure_dependencies(video)

    to_stdout = settings["output_dir"] == STDOUT_MARKER
    output_dir = None if to_stdout else Path(settings["output_dir"]).expanduser()
    # with transcripts on stdout the media lands in the working directory
    download_dir = Path.cwd() if output_dir is None else output_dir
    download_dir.mkdir(parents=True, exist_ok=True)

    locale = settings["locale"] or detect_locale(url)

    print_info(f"Downloading {'video' if video else 'audio'} from: {url}")
    tracker = DownloadProgressTracker()
    results = download(url, download_dir, video=video, on_progress=tracker, verbose_log=verbose_log)
    if not keep_audio:
        # removed on interrupt until its transcript is done
        for result in results:
            register_interrupt_cleanup(result.audio_file)
    tracker.bar.finish(f"Downloaded {plural(len(results), 'file')}")

    backend = WhisperTranscriber(settings["model"], settings["device"], settings["compute_type"])
    load_model(backend)

    options = TranscriptionOptions(
        locale=locale,
        output_format=output_format,
        max_length=settings["max_line_length"],
    )

    errors_before = reporter.get_error_summary()["category_breakdown"]
    for index, result in enumerate(results, 1):
        if len(results) > 1:
            print_info(f"[{index}/{len(results)}] {result.audio_file.name}")
        try:
            transcribe_file(result.audio_file, options, backend, output_dir, keep_audio)
        except (YtxError, OSError) as e:
            reporter.log_error(e, {"file": str(result.audio_file)})
        finally:
            unregister_interrupt_cleanup(result.audio_file)

    return report_batch(len(results), errors_before, reporter.get_error_summary()["category_breakdown"])


def report_batch(total: int, before: Dict[str, int], after: Dict[str, int]) -> int:
    """Print the end-of-batch summary from the reporter's category counts"""
    breakdown = {category: count - before.get(category, 0) for category, count in after.items()}
    breakdown = {category: count for category, count in breakdown.items() if count > 0}
    failed = sum(breakdown.values())
    if failed:
        details = ", ".join(f"{category.replace('_', ' ')}: {count}"
                            for category, count in sorted(breakdown.items()))
        print_info(f"Transcribed {total - failed} of {plural(total, 'file')} ({details}).")
        return EXIT_FAILURE
    if total > 1:
        print_info(f"Transcribed {plural(total, 'file')}.")
    return EXIT_OK


def _version_callback(value: bool):
    if value:
        typer.echo(f"{APP_NAME} {VERSION}")
        raise typer.Exit()


@app.command()
def run(
    url: Optional[str] = typer.Argument(None, help="YouTube or any yt-dlp supported URL."),
    locale: Optional[str] = typer.Option(None, "--locale", "-l", help="Speech recognition locale (default: detected, else en-US)."),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: txt or srt (default: txt)."),
    output_dir: Optional[str] = typer.Option(None, "--output-dir", "-o", help="Directory to save output files, '-' for stdout (default: ./output)."),
    keep_audio: bool = typer.Option(False, "--keep-audio", help="Keep the downloaded audio file (deleted by default)."),
    video: bool = typer.Option(False, "--video", help="Download the video too and extract its audio."),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="faster-whisper model name (default: small)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show yt-dlp and ffmpeg output and debug logs."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
    config_file: Optional[str] = typer.Option(None, "--config", help="Path to a JSON config file."),
    version: Optional[bool] = typer.Option(None, "--version", callback=_version_callback, is_eager=True,
                                           help="Show version and exit."),
):
    """Download and transcribe audio from YouTube (or any yt-dlp URL)."""
    setup_logging(json_format=json_logs, level=logging.DEBUG if verbose else logging.WARNING)
    install_interrupt_handler()

    reporter = ErrorReporter()
    try:
        config = load_config(config_file)
        settings = merge_overrides(
            config,
            locale=locale,
            format=output_format,
            output_dir=output_dir,
            model=model,
            keep_audio=True if keep_audio else None,
            video=True if video else None,
        )
        if settings["output_dir"] == STDOUT_MARKER:
            terminal.set_ui_target(sys.stderr)
        logger.debug("UI target: %s", terminal.describe(terminal.ui_target()))

        if url is None:
            if terminal.is_input_interactive() and terminal.is_output_interactive():
                url = guided_flow(settings)
            else:
                raise InvalidInput("Missing URL. Run 'ytx --help' for usage.")

        code = run_pipeline(url, settings, reporter, verbose=verbose)
    except UserCancelledMenu as e:
        print_info(e.message)
        code = e.exit_code
    except YtxError as e:
        reporter.log_error(e)
        code = e.exit_code
    except OSError as e:
        reporter.log_error(e)
        code = EXIT_FAILURE
    raise typer.Exit(code)


def main():
    """Main entry point for the CLI application"""
    app()


if __name__ == "__main__":
    main()
