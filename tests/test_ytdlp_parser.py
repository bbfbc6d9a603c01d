import pytest

from ytx.ytdlp_parser import (
    parse_complete,
    parse_destination,
    parse_error,
    parse_line,
    parse_merge,
    parse_progress,
)


def test_destination():
    event = parse_destination("[download] Destination: /tmp/out/My Song.m4a")
    assert event == {"event": "destination", "path": "/tmp/out/My Song.m4a"}


@pytest.mark.parametrize("line, percent, total, speed, eta", [
    ("[download]  23.4% of 50.00MiB at 3.21MiB/s ETA 00:16", 23.4, "50.00MiB", "3.21MiB/s", "00:16"),
    ("[download]  23.4% of ~50.00MiB at 3.21MiB/s ETA 00:16", 23.4, "50.00MiB", "3.21MiB/s", "00:16"),
    ("[download]   0.0% of ~  5.00MiB at  Unknown B/s ETA Unknown", 0.0, "5.00MiB", "Unknown B/s", "Unknown"),
    ("[download]  99.9% of 1.20GiB at 10.00MiB/s ETA 01:02:03", 99.9, "1.20GiB", "10.00MiB/s", "01:02:03"),
])
def test_progress(line, percent, total, speed, eta):
    event = parse_progress(line)
    assert event["percent"] == percent
    assert event["total"] == total
    assert event["speed"] == speed
    assert event["eta"] == eta


def test_complete_preferred_over_progress():
    line = "[download] 100% of 1.23GiB in 00:45"
    assert parse_complete(line) == {"event": "complete"}
    assert parse_line(line) == {"event": "complete"}


def test_merge():
    event = parse_merge('[Merger] Merging formats into "/tmp/out/clip.mp4"')
    assert event == {"event": "merge", "path": "/tmp/out/clip.mp4"}


def test_error():
    assert parse_error("ERROR: [youtube] abc: Video unavailable") == {
        "event": "error", "message": "[youtube] abc: Video unavailable"}


@pytest.mark.parametrize("line", [
    "",
    "[youtube] Extracting URL: https://youtu.be/x",
    "/tmp/out/song.m4a",
    "[info] Downloading 1 format(s): 140",
])
def test_noise_is_ignored(line):
    assert parse_line(line) is None
