"""
Speech-to-text boundary.

The recognizer itself is faster-whisper. Everything outside this module only
sees ``Segment`` objects and formatted transcript text.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence, Tuple, Union

from .defaults import DEFAULT_LOCALE, DEFAULT_MAX_LINE_LENGTH, PREVIEW_LABEL_LENGTH
from .error_handler import CapabilityUnavailable, ReferencedFileMissing, UnsupportedLocale
from .formats import OutputFormat
from .progress import ProgressBar

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    start: float
    end: float
    text: str


@dataclass
class TranscriptionOptions:
    locale: str = DEFAULT_LOCALE
    output_format: OutputFormat = OutputFormat.TXT
    max_length: int = DEFAULT_MAX_LINE_LENGTH


def language_for_locale(locale: str) -> str:
    """Primary language subtag of a locale: ``en-US`` and ``en_US`` give ``en``"""
    return locale.replace("_", "-").split("-")[0].strip().lower()


class WhisperTranscriber:
    """faster-whisper model, loaded on first use"""

    def __init__(self, model: str = "small", device: str = "auto", compute_type: str = "default"):
        self.model_name = model
        self.device = device
        self.compute_type = compute_type
        self._model = None

    def load(self):
        if self._model is not None:
            return self._model
        try:
            from faster_whisper import WhisperModel
        except ImportError as e:
            raise CapabilityUnavailable(f"faster-whisper is not installed: {e}") from e
        try:
            self._model = WhisperModel(self.model_name, device=self.device, compute_type=self.compute_type)
        except (RuntimeError, OSError, ValueError) as e:
            raise CapabilityUnavailable(
                f"Could not load speech model '{self.model_name}': {e}",
                "Check the --model name and your network connection.",
            ) from e
        logger.debug("Loaded whisper model %s on %s", self.model_name, self.device)
        return self._model

    def supported_languages(self) -> Sequence[str]:
        return list(self.load().supported_languages)

    def segments(self, path: Union[str, Path], language: str) -> Tuple[Iterator[Segment], float]:
        raw_segments, info = self.load().transcribe(os.fspath(path), language=language)
        converted = (Segment(start=s.start, end=s.end, text=s.text) for s in raw_segments)
        return converted, float(info.duration or 0.0)


def transcribe(file: Union[str, Path], options: TranscriptionOptions, backend,
               bar: Optional[ProgressBar] = None) -> str:
    """Transcribe ``file`` and return the transcript in ``options.output_format``.

    Progress is rendered as the end of the latest segment over the audio
    duration, labelled with the segment text.
    """
    path = Path(file)
    if not path.exists():
        raise ReferencedFileMissing(str(path), f"File not found: {path}")

    language = language_for_locale(options.locale)
    if language not in backend.supported_languages():
        raise UnsupportedLocale(options.locale)

    bar = bar or ProgressBar()
    collected = []
    try:
        segments, duration = backend.segments(path, language)
        for segment in segments:
            collected.append(segment)
            percent = segment.end / duration * 100 if duration > 0 else 0
            bar.render(percent, segment.text.strip()[:PREVIEW_LABEL_LENGTH])
    except (RuntimeError, OSError, ValueError) as e:
        raise CapabilityUnavailable(f"Transcription failed for {path.name}: {e}", None) from e

    logger.debug("Transcribed %d segments from %s", len(collected), path)
    return options.output_format.render(collected, options.max_length)
