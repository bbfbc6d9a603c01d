import pytest

from ytx.error_handler import InvalidInput
from ytx.formats import OutputFormat, format_timestamp, parse_output_format

from helpers.common_helpers import FakeSegment


@pytest.mark.parametrize("seconds, expected", [
    (0, "00:00:00,000"),
    (1.5, "00:00:01,500"),
    (61.25, "00:01:01,250"),
    (3723.004, "01:02:03,004"),
    (-1, "00:00:00,000"),
])
def test_format_timestamp(seconds, expected):
    assert format_timestamp(seconds) == expected


def test_txt_one_line_per_segment():
    segments = [FakeSegment(0, 1, " Hello there. "), FakeSegment(1, 2, "   "), FakeSegment(2, 3, "General Kenobi.")]
    assert OutputFormat.TXT.render(segments) == "Hello there.\nGeneral Kenobi.\n"


def test_srt_cues_numbered_and_wrapped():
    segments = [
        FakeSegment(0.0, 2.5, "Short line"),
        FakeSegment(2.5, 7.0, "This sentence is definitely longer than forty characters in total"),
    ]
    srt = OutputFormat.SRT.render(segments, max_length=40)

    cues = srt.split("\n\n")
    assert cues[0] == "1\n00:00:00,000 --> 00:00:02,500\nShort line"
    number, timing, *text = cues[1].rstrip("\n").split("\n")
    assert number == "2"
    assert timing == "00:00:02,500 --> 00:00:07,000"
    assert len(text) == 2
    assert all(len(line) <= 40 for line in text)


def test_format_properties():
    assert OutputFormat.SRT.extension == "srt"


@pytest.mark.parametrize("value, expected", [
    ("txt", OutputFormat.TXT),
    ("SRT", OutputFormat.SRT),
    (" srt ", OutputFormat.SRT),
    (OutputFormat.TXT, OutputFormat.TXT),
])
def test_parse_output_format(value, expected):
    assert parse_output_format(value) is expected


def test_parse_output_format_rejects_unknown():
    with pytest.raises(InvalidInput) as excinfo:
        parse_output_format("docx")
    assert "Invalid format 'docx'" in excinfo.value.message
