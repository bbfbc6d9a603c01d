"""
yt-dlp and ffmpeg boundary.

yt-dlp is driven as an external process. With ``--print after_move:filepath``
it prints the final path of every file it wrote on stdout; the orchestrator
picks those lines out of the rest of its output.
"""

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from .cleanup import get_registry
from .constants import (
    AUDIO_FORMAT_SELECTOR,
    FFMPEG,
    OUTPUT_TEMPLATE,
    VIDEO_FORMAT_SELECTOR,
    YT_DLP,
)
from .error_handler import DependencyMissing, DependentToolFailed
from .process import SubprocessSpec, is_command_available, run, run_process
from .progress import ProgressBar
from .ytdlp_parser import parse_line

logger = logging.getLogger(__name__)

TextCallback = Callable[[str], None]


@dataclass(frozen=True)
class DownloadResult:
    """Audio file to transcribe and, in video mode, the video it came from"""
    audio_file: Path
    video_file: Optional[Path] = None


def is_available() -> bool:
    """Check if yt-dlp is available in PATH"""
    return is_command_available(YT_DLP)


def is_ffmpeg_available() -> bool:
    """Check if ffmpeg is available in PATH"""
    return is_command_available(FFMPEG)


def ensure_dependencies(video: bool = False) -> None:
    """Raise ``DependencyMissing`` for the first required tool not on PATH"""
    if not is_available():
        raise DependencyMissing(YT_DLP)
    if video and not is_ffmpeg_available():
        raise DependencyMissing(FFMPEG)


def fetch_language(url: str) -> Optional[str]:
    """Fetch the video's language metadata (no download).

    Returns a language code such as ``"en"`` or ``None`` when yt-dlp does not
    know it.
    """
    spec = SubprocessSpec(YT_DLP, ("--print", "%(language)s", "--no-download", url))
    result = run_process(spec)
    if result.exit_code != 0:
        logger.debug("Language lookup failed with status %s", result.exit_code)
        return None
    output = result.stdout.strip()
    if not output or output.lower() in ("na", "none"):
        return None
    return output.splitlines()[0].strip()


def build_download_args(url: str, output_dir: Union[str, Path], video: bool = False) -> List[str]:
    args = [
        "--format", VIDEO_FORMAT_SELECTOR if video else AUDIO_FORMAT_SELECTOR,
        "--output", os.path.join(os.fspath(output_dir), OUTPUT_TEMPLATE),
        "--print", "after_move:filepath",
        "--no-simulate",
        "--newline",
        "--progress",
    ]
    if video:
        args += ["--merge-output-format", "mp4"]
    args.append(url)
    return args


class DownloadProgressTracker:
    """Turns yt-dlp live text into progress bar updates.

    Fed concurrently by both pipe drainers, so line assembly is locked.
    """

    def __init__(self, bar: Optional[ProgressBar] = None):
        self.bar = bar or ProgressBar()
        self.current_file = ""
        self.percent = 0.0
        self.errors: List[str] = []
        self._partial = ""
        self._lock = threading.Lock()

    def feed(self, text: str) -> None:
        with self._lock:
            data = (self._partial + text).replace("\r", "\n")
            *lines, self._partial = data.split("\n")
            for line in lines:
                self._handle_line(line)

    def _handle_line(self, line: str) -> None:
        event = parse_line(line)
        if event is None:
            return
        kind = event["event"]
        if kind in ("destination", "merge"):
            self.current_file = os.path.basename(event["path"])
        elif kind == "progress":
            self.percent = event["percent"]
            self.bar.render(self.percent, self.current_file)
        elif kind == "complete":
            self.percent = 100.0
            self.bar.render(100, self.current_file)
        elif kind == "error":
            self.errors.append(event["message"])

    __call__ = feed


def extract_audio(video_file: Path, verbose_log: Optional[TextCallback] = None) -> Path:
    """Copy the audio track of ``video_file`` into an ``.m4a`` next to it"""
    audio_file = video_file.with_suffix(".m4a")
    spec = SubprocessSpec(FFMPEG, ("-i", str(video_file), "-vn", "-acodec", "copy", "-y", str(audio_file)))
    registry = get_registry()
    registry.register(audio_file)
    try:
        result = run_process(spec, on_verbose_text=verbose_log)
    except DependencyMissing as e:
        registry.unregister(audio_file)
        raise DependentToolFailed(FFMPEG, e.message) from e
    if result.exit_code != 0:
        registry.unregister(audio_file)
        if audio_file.exists():
            audio_file.unlink()
        raise DependentToolFailed(FFMPEG, result.stderr.strip().splitlines()[-1] if result.stderr.strip() else "")
    registry.unregister(audio_file)
    return audio_file


def download(url: str, output_dir: Union[str, Path], video: bool = False,
             on_progress: Optional[TextCallback] = None,
             verbose_log: Optional[TextCallback] = None) -> List[DownloadResult]:
    """Download audio (and optionally video) from ``url`` using yt-dlp.

    When ``video`` is true, video and audio are merged into an mp4 and the
    audio track is then extracted for transcription.
    """
    spec = SubprocessSpec(YT_DLP, build_download_args(url, output_dir, video))
    outcome = run(spec, on_live_text=on_progress, on_verbose_text=verbose_log)
    if not outcome.ok:
        raise outcome.to_error()

    results = []
    for file_path in outcome.paths:
        path = Path(file_path)
        if video:
            results.append(DownloadResult(audio_file=extract_audio(path, verbose_log), video_file=path))
        else:
            results.append(DownloadResult(audio_file=path))
    logger.info("Downloaded %d file(s) from %s", len(results), url)
    return results
