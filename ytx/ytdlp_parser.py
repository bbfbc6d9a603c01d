#!/usr/bin/env python3
"""
Lightweight parser for yt-dlp console output (run with --newline --progress).

Recognized events (returned as dicts; keys present depend on event):

- "destination":
    [download] Destination: <full/path/or/title.ext>
    keys: path

- "progress":
    [download]  23.4% of 50.00MiB at 3.21MiB/s ETA 00:16
    [download]  23.4% of ~50.00MiB at 3.21MiB/s ETA 00:16
    keys: percent, total, speed, eta

- "complete":
    [download] 100% of 1.23GiB in 00:45
    keys: none

- "merge":
    [Merger] Merging formats into "<path>"
    keys: path

- "error":
    ERROR: <message>
    keys: message
"""

import re
from typing import Dict, Optional

__all__ = [
    "parse_line",
    "parse_destination",
    "parse_progress",
    "parse_complete",
    "parse_merge",
    "parse_error",
]

_RE_DEST = re.compile(r'^\[download\]\s+Destination:\s+(?P<path>.+?)\s*$')
_RE_PROGRESS = re.compile(
    r'^\[download\]\s+'
    r'(?P<pct>\d{1,3}(?:\.\d+)?)%\s+of\s+~?\s*(?P<total>[\d\.,]+\s*[KMGT]?i?B|Unknown)\s*'
    r'(?:at\s+(?P<speed>[\d\.,]+\s*[KMGT]?i?B/s|Unknown\s+B/s)\s*)?'
    r'(?:ETA\s+(?P<eta>(?:\d{1,2}:)?\d{2}:\d{2}|N/A|Unknown))?'
)
_RE_COMPLETE = re.compile(r'^\[download\]\s+100(?:\.0+)?%\s+of\s+.*?\s+in\s+')
_RE_MERGE = re.compile(r'^\[Merger\]\s+Merging formats into\s+"(?P<path>.+)"\s*$')
_RE_ERROR = re.compile(r'^\s*ERROR:\s*(?P<msg>.+?)\s*$')


def parse_destination(line: str) -> Optional[Dict]:
    m = _RE_DEST.match(line)
    if m:
        return {"event": "destination", "path": m.group("path")}
    return None


def parse_progress(line: str) -> Optional[Dict]:
    m = _RE_PROGRESS.match(line)
    if not m:
        return None
    return {
        "event": "progress",
        "percent": float(m.group("pct")),
        "total": m.group("total"),
        "speed": m.group("speed"),
        "eta": m.group("eta"),
    }


def parse_complete(line: str) -> Optional[Dict]:
    if _RE_COMPLETE.match(line):
        return {"event": "complete"}
    return None


def parse_merge(line: str) -> Optional[Dict]:
    m = _RE_MERGE.match(line)
    if m:
        return {"event": "merge", "path": m.group("path")}
    return None


def parse_error(line: str) -> Optional[Dict]:
    m = _RE_ERROR.match(line)
    if m:
        return {"event": "error", "message": m.group("msg")}
    return None


def parse_line(line: str) -> Optional[Dict]:
    # Order matters: complete lines also look like progress lines
    return (
        parse_destination(line)
        or parse_complete(line)
        or parse_progress(line)
        or parse_merge(line)
        or parse_error(line)
    )
