"""Transcript output formats"""

import textwrap
from enum import Enum
from typing import Iterable

from .defaults import DEFAULT_MAX_LINE_LENGTH
from .error_handler import InvalidInput


def format_timestamp(seconds: float) -> str:
    """SRT timestamp ``HH:MM:SS,mmm``"""
    total_ms = max(int(round(seconds * 1000)), 0)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


class OutputFormat(Enum):
    TXT = "txt"
    SRT = "srt"

    @property
    def extension(self) -> str:
        return self.value

    def render(self, segments: Iterable, max_length: int = DEFAULT_MAX_LINE_LENGTH) -> str:
        """Render segments (objects with ``start``, ``end`` and ``text``) as a transcript"""
        if self is OutputFormat.TXT:
            lines = [seg.text.strip() for seg in segments]
            return "\n".join(line for line in lines if line) + "\n"

        cues = []
        for seg in segments:
            text = seg.text.strip()
            if not text:
                continue
            wrapped = "\n".join(textwrap.wrap(text, width=max_length)) or text
            cues.append(
                f"{len(cues) + 1}\n"
                f"{format_timestamp(seg.start)} --> {format_timestamp(seg.end)}\n"
                f"{wrapped}\n"
            )
        return "\n".join(cues)


def parse_output_format(value) -> OutputFormat:
    if isinstance(value, OutputFormat):
        return value
    try:
        return OutputFormat(str(value).strip().lower())
    except ValueError:
        raise InvalidInput(f"Invalid format '{value}'. Use 'txt' or 'srt'.") from None
