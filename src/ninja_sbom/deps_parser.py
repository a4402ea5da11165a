# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Parser for `ninja -t deps` output.

The report is a sequence of stanzas, one per build output:

    out/foo.o: #deps 3, deps mtime 123 (VALID)
        src/foo.c
        include/foo.h
        include/common.h

The header names the output (everything before ": #deps"); the counters and
status word after the marker are discarded. Each dependency line is indented
by exactly four spaces. ninja separates stanzas with a blank line; blank lines
between stanzas are skipped unless the caller asks for the strict grammar.

Any line that is neither a header, a dependency line in a stanza, nor an
allowed blank line fails the whole document with ParseError.
"""

import logging
from typing import Iterator, List, Optional

from ninja_sbom.errors import ParseError
from ninja_sbom.models import DepsView, Span
from ninja_sbom.text import Line, iter_lines

logger = logging.getLogger(__name__)

DEPS_MARKER = ": #deps"
DEP_INDENT = "    "


def _header_span(text: str, line: Line) -> Optional[Span]:
    """Span of the output path if the line is a header, else None."""
    marker = text.find(DEPS_MARKER, line.start, line.end)
    if marker == -1:
        return None
    return (line.start, marker)


def _dep_span(text: str, line: Line) -> Optional[Span]:
    """Span of the dependency path if the line is a dependency line, else None."""
    path_start = line.start + len(DEP_INDENT)
    if path_start >= line.end:
        return None
    if not text.startswith(DEP_INDENT, line.start, line.end):
        return None
    # A fifth leading space would otherwise become part of the path
    if text[path_start] == " ":
        return None
    return (path_start, line.end)


def _single_line(line: str) -> Line:
    if "\n" in line or "\r" in line:
        raise ParseError("expected a single line without terminator", line, 1)
    return Line(start=0, end=len(line), next_start=len(line), number=1)


def parse_deps_header(line: str) -> str:
    """Extract the output path from one header line.

    Args:
        line: Header line without its terminator.

    Returns:
        Output path, verbatim (may be empty).

    Raises:
        ParseError: If the ": #deps" marker is missing.
    """
    span = _header_span(line, _single_line(line))
    if span is None:
        raise ParseError(f"missing {DEPS_MARKER!r} marker in header line", line, 1)
    return line[span[0] : span[1]]


def parse_dep_line(line: str) -> str:
    """Extract the path from one dependency line.

    Args:
        line: Dependency line without its terminator.

    Returns:
        Dependency path, verbatim.

    Raises:
        ParseError: If the line is not four spaces followed by a path that
            does not start with a space.
    """
    span = _dep_span(line, _single_line(line))
    if span is None:
        raise ParseError("expected four-space indented dependency path", line, 1)
    return line[span[0] : span[1]]


def iter_deps_report(text: str, skip_blank_lines: bool = True) -> Iterator[DepsView]:
    """Lazily parse a deps report into per-output stanzas.

    Stanzas are yielded as they complete, so a malformed line raises only
    after the preceding stanzas have been yielded. Use parse_deps_report()
    when all-or-nothing results are needed.

    Args:
        text: Full report text.
        skip_blank_lines: Accept blank lines between stanzas.

    Yields:
        DepsView per stanza, in report order.

    Raises:
        ParseError: On the first line that does not fit the grammar.
    """
    output_span: Optional[Span] = None
    input_spans: List[Span] = []

    for line in iter_lines(text):
        if output_span is not None:
            dep = _dep_span(text, line)
            if dep is not None:
                input_spans.append(dep)
                continue
            yield DepsView(text, output_span, input_spans)
            output_span = None
            input_spans = []

        if skip_blank_lines and line.start == line.end:
            continue

        header = _header_span(text, line)
        if header is None:
            raise ParseError(
                f"expected '<output>{DEPS_MARKER} ...' header line",
                text[line.start :],
                line.number,
            )
        output_span = header

    if output_span is not None:
        yield DepsView(text, output_span, input_spans)


def parse_deps_report(text: str, skip_blank_lines: bool = True) -> List[DepsView]:
    """Parse a complete deps report.

    Args:
        text: Full report text.
        skip_blank_lines: Accept blank lines between stanzas.

    Returns:
        One DepsView per stanza, in report order. Empty for an empty report.

    Raises:
        ParseError: If any line does not fit the grammar. No partial results
            are returned.
    """
    stanzas = list(iter_deps_report(text, skip_blank_lines=skip_blank_lines))
    logger.debug(
        f"Parsed deps report: {len(stanzas)} outputs, "
        f"{sum(len(s) for s in stanzas)} dependency lines"
    )
    return stanzas
