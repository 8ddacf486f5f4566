"""
Plain-text transcript extraction.

Two sources are supported: the transcript HTML page (text of the
``<div id="transcript">`` container) and SRT caption files downloaded from
the Data API.
"""

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")
_SEQUENCE_LINE = re.compile(r"^\d+$")
_TIMECODE_LINE = re.compile(r"^\d{2}:\d{2}:\d{2},\d{3}\s*-->\s*\d{2}:\d{2}:\d{2},\d{3}")
_CUE_SEPARATOR = re.compile(r"\n\s*\n")


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to one space and trim both ends."""
    return _WHITESPACE.sub(" ", text).strip()


def extract_transcript(html: str) -> str:
    """Return the whitespace-normalised text of the transcript container.

    An empty string is returned when the page has no such container.
    """
    soup = BeautifulSoup(html, "html.parser")
    container = soup.find("div", id="transcript")
    if container is None:
        return ""
    return collapse_whitespace(container.get_text())


def srt_to_text(srt: str) -> str:
    """Join the text lines of an SRT file, dropping each cue's index and timecode.

    Cues are blank-line separated blocks; only their leading index and
    timecode lines are discarded, so caption text that is all digits survives.
    """
    text_lines = []
    for block in _CUE_SEPARATOR.split(srt.lstrip("\ufeff")):
        lines = [line.strip() for line in block.strip().splitlines()]
        if len(lines) > 1 and _SEQUENCE_LINE.match(lines[0]) and _TIMECODE_LINE.match(lines[1]):
            lines = lines[2:]
        elif lines and _TIMECODE_LINE.match(lines[0]):
            lines = lines[1:]
        text_lines.extend(line for line in lines if line)
    return collapse_whitespace(" ".join(text_lines))
