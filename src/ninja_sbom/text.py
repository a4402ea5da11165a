# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Line handling shared by the report parsers.

Both ninja report formats are line oriented. Lines end with "\\n" or "\\r\\n";
the last line of a report may be unterminated. A carriage return anywhere else
makes the report malformed.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Union

from ninja_sbom.errors import EncodingError, ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Line:
    """Location of one line within a report string."""

    start: int  # first character of the line
    end: int  # one past the last content character (terminator excluded)
    next_start: int  # first character after the terminator
    number: int  # 1-based line number

    @property
    def terminated(self) -> bool:
        return self.next_start > self.end

    def content(self, text: str) -> str:
        return text[self.start : self.end]


def iter_lines(text: str) -> Iterator[Line]:
    """Split report text into lines without copying it.

    Args:
        text: Full report text.

    Yields:
        Line spans in order. Empty text yields nothing; a trailing terminator
        does not produce an extra empty line.

    Raises:
        ParseError: If a carriage return appears outside a "\\r\\n" terminator.
    """
    pos = 0
    number = 1
    length = len(text)
    while pos < length:
        newline = text.find("\n", pos)
        if newline == -1:
            end = next_start = length
        else:
            end = newline
            next_start = newline + 1
            if end > pos and text[end - 1] == "\r":
                end -= 1

        stray_cr = text.find("\r", pos, end)
        if stray_cr != -1:
            raise ParseError("carriage return outside a line terminator", text[stray_cr:], number)

        yield Line(start=pos, end=end, next_start=next_start, number=number)
        pos = next_start
        number += 1


def decode_report(data: Union[str, bytes]) -> str:
    """Return report text, decoding bytes as UTF-8.

    Args:
        data: Report as captured from ninja, either already text or raw bytes.

    Returns:
        Report text.

    Raises:
        EncodingError: If data is bytes and not valid UTF-8.
    """
    if isinstance(data, str):
        return data

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.warning(f"Report is not valid UTF-8 at byte {e.start}: {e.reason}")
        raise EncodingError(
            f"report is not valid UTF-8 at byte {e.start}: {e.reason}", position=e.start
        ) from e
