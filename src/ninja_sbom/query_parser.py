# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Parser for `ninja -t query <target>` output.

Expected shape for a single target:

    out/foo.o:
      input: cc
        src/foo.c
        | include/config.h
        || generated_headers
      outputs:
        out/foo.o

The first line must echo the queried target exactly. Input lines carry an
optional "| " (implicit) or "|| " (order-only) prefix. The whole document must
be consumed; only a single terminator after the last line is tolerated.
"""

import logging
from typing import List, Optional

from ninja_sbom.errors import ParseError
from ninja_sbom.models import QueryInput, QueryInputKind, QueryResult
from ninja_sbom.text import Line, iter_lines

logger = logging.getLogger(__name__)

INPUT_DESC_PREFIX = "  input: "
OUTPUTS_HEADER = "  outputs:"
ITEM_INDENT = "    "
ORDER_ONLY_PREFIX = "|| "
IMPLICIT_PREFIX = "| "


def parse_input_line(payload: str, collapse_implicit: bool = False) -> QueryInput:
    """Classify one input line with its four-space indent already removed.

    Args:
        payload: Line content after the indent.
        collapse_implicit: Report implicit inputs as order-only, matching
            older tooling that did not distinguish the two.

    Returns:
        QueryInput with the prefix stripped from the path.
    """
    if payload.startswith(ORDER_ONLY_PREFIX):
        return QueryInput(QueryInputKind.ORDER_ONLY, payload[len(ORDER_ONLY_PREFIX) :])
    if payload.startswith(IMPLICIT_PREFIX):
        kind = QueryInputKind.ORDER_ONLY if collapse_implicit else QueryInputKind.IMPLICIT
        return QueryInput(kind, payload[len(IMPLICIT_PREFIX) :])
    return QueryInput(QueryInputKind.NORMAL, payload)


class _LineCursor:
    """Walks the lines of a report, producing ParseErrors with context."""

    def __init__(self, text: str):
        self.text = text
        self.lines: List[Line] = list(iter_lines(text))
        self.index = 0

    def peek(self) -> Optional[str]:
        if self.index >= len(self.lines):
            return None
        return self.lines[self.index].content(self.text)

    def advance(self) -> None:
        self.index += 1

    def fail(self, message: str) -> ParseError:
        if self.index >= len(self.lines):
            return ParseError(message, "", len(self.lines) + 1)
        line = self.lines[self.index]
        return ParseError(message, self.text[line.start :], line.number)


def parse_query_report(text: str, target: str, collapse_implicit: bool = False) -> QueryResult:
    """Parse the query report for one target.

    Args:
        text: Full report text.
        target: Target name the report was requested for; the report's first
            line must echo it exactly.
        collapse_implicit: See parse_input_line().

    Returns:
        QueryResult with inputs and outputs in report order.

    Raises:
        ParseError: If the text does not match the grammar or is not fully
            consumed.
    """
    cursor = _LineCursor(text)

    if cursor.peek() != f"{target}:":
        raise cursor.fail(f"expected target line {target + ':'!r}")
    cursor.advance()

    desc_line = cursor.peek()
    if desc_line is None or not desc_line.startswith(INPUT_DESC_PREFIX):
        raise cursor.fail(f"expected {INPUT_DESC_PREFIX!r} line")
    input_desc = desc_line[len(INPUT_DESC_PREFIX) :]
    cursor.advance()

    inputs: List[QueryInput] = []
    while True:
        line = cursor.peek()
        if line is None:
            raise cursor.fail(f"expected input line or {OUTPUTS_HEADER!r}")
        if line == OUTPUTS_HEADER:
            cursor.advance()
            break
        if not line.startswith(ITEM_INDENT):
            raise cursor.fail(f"expected input line or {OUTPUTS_HEADER!r}")
        inputs.append(parse_input_line(line[len(ITEM_INDENT) :], collapse_implicit))
        cursor.advance()

    outputs: List[str] = []
    while True:
        line = cursor.peek()
        if line is None:
            break
        if not line.startswith(ITEM_INDENT):
            raise cursor.fail("unexpected trailing text after outputs")
        outputs.append(line[len(ITEM_INDENT) :])
        cursor.advance()

    logger.debug(
        f"Parsed query for {target}: input={input_desc!r}, "
        f"{len(inputs)} inputs, {len(outputs)} outputs"
    )
    return QueryResult(input_desc=input_desc, inputs=inputs, outputs=outputs)
