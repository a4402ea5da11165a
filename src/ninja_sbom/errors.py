# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Exception types raised while reading ninja reports."""

from typing import Optional

# Characters of remaining input shown in error messages
_PREVIEW_LENGTH = 60


class NinjaSbomError(Exception):
    """Base class for all errors raised by ninja_sbom."""

    pass


class ParseError(NinjaSbomError):
    """Raised when report text does not match the expected grammar.

    Parsing never recovers: a ParseError aborts the whole document.

    Attributes:
        message: What was expected at the failure point.
        remaining: Unconsumed input starting at the failure point.
        line_number: 1-based line number of the failure point, if known.
    """

    def __init__(self, message: str, remaining: str = "", line_number: Optional[int] = None):
        self.message = message
        self.remaining = remaining
        self.line_number = line_number
        super().__init__(self._format())

    def _format(self) -> str:
        location = f"line {self.line_number}: " if self.line_number is not None else ""
        preview = self.remaining[:_PREVIEW_LENGTH]
        if len(self.remaining) > _PREVIEW_LENGTH:
            preview += "..."
        return f"{location}{self.message} (at {preview!r})"


class EncodingError(NinjaSbomError):
    """Raised when report bytes are not valid UTF-8."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        super().__init__(message)


class SelfDependencyError(NinjaSbomError, ValueError):
    """Raised when a file is recorded as its own dependency under the error policy."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File depends on itself: {path}")
