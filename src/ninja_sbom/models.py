# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Core data models for ninja build graph extraction.

This module defines the data structures shared by the parsers and the registry:
- FileType: Ranked classification of a file (source < generated < artifact)
- FileId: Small integer handle for a registered path
- FileData: Per-path record holding the current classification
- DepsView / DepsForOneFile: One stanza of `ninja -t deps` output
- QueryInputKind / QueryInput / QueryResult: Parsed `ninja -t query` output

Parse results come in two shapes. DepsView slices the report text lazily and
keeps the text alive; DepsForOneFile owns plain string copies. Convert with
DepsView.to_owned() when results must outlive the report text.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Tuple

logger = logging.getLogger(__name__)

# Literal input description ninja prints for phony targets
PHONY_INPUT_DESC = "phony"

# Type alias for file identities (index into the registry's insertion order)
FileId = int

# Character span (start, end) into a report string
Span = Tuple[int, int]


class FileType(IntEnum):
    """Classification of a file touched by the build.

    Ordering is significant: a path observed under two classifications keeps
    the higher one (see promote()).
    """

    SOURCE_FILE = 0  # consumed by the build, not produced by it
    GENERATED_FILE = 1  # produced by a build step
    OUTPUT_ARTIFACT = 2  # final deliverable of the build

    @property
    def label(self) -> str:
        """JSON-compatible name, e.g. "generated_file"."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "FileType":
        """Look up a FileType by its label."""
        return cls[label.upper()]

    @classmethod
    def default(cls) -> "FileType":
        """Classification assumed on first sight of a path."""
        return cls.SOURCE_FILE


def promote(current: FileType, new_type: FileType) -> FileType:
    """Return the higher of two classifications.

    Args:
        current: Classification currently stored.
        new_type: Classification just observed.

    Returns:
        max(current, new_type) under the FileType order.
    """
    return max(current, new_type)


@dataclass
class FileData:
    """Record stored for each distinct path in the registry."""

    file_type: FileType = field(default_factory=FileType.default)

    def promote_to(self, new_type: FileType) -> bool:
        """Promote this record in place.

        Returns:
            True if the stored classification changed.
        """
        promoted = promote(self.file_type, new_type)
        changed = promoted != self.file_type
        self.file_type = promoted
        return changed

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {"file_type": self.file_type.label}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileData":
        """Deserialize from JSON-compatible dict."""
        return cls(file_type=FileType.from_label(data["file_type"]))


@dataclass
class DepsForOneFile:
    """One output and its recorded inputs, owning its strings."""

    output: str
    inputs: List[str] = field(default_factory=list)

    def to_owned(self) -> "DepsForOneFile":
        """Already owned; returned unchanged."""
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {"output": self.output, "inputs": list(self.inputs)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DepsForOneFile":
        """Deserialize from JSON-compatible dict."""
        return cls(output=data["output"], inputs=list(data.get("inputs", [])))


class DepsView:
    """One stanza of a deps report, as spans into the report text.

    Paths are sliced out of the source text on access. A view keeps the whole
    report string alive; call to_owned() before accumulating many views
    across reports.
    """

    __slots__ = ("_source", "_output_span", "_input_spans")

    def __init__(self, source: str, output_span: Span, input_spans: List[Span]):
        self._source = source
        self._output_span = output_span
        self._input_spans = input_spans

    @property
    def output(self) -> str:
        start, end = self._output_span
        return self._source[start:end]

    @property
    def inputs(self) -> List[str]:
        return [self._source[start:end] for start, end in self._input_spans]

    @property
    def output_span(self) -> Span:
        return self._output_span

    @property
    def input_spans(self) -> List[Span]:
        return list(self._input_spans)

    def __len__(self) -> int:
        return len(self._input_spans)

    def to_owned(self) -> DepsForOneFile:
        """Copy the paths out of the source text."""
        return DepsForOneFile(output=self.output, inputs=self.inputs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (DepsView, DepsForOneFile)):
            return self.output == other.output and self.inputs == other.inputs
        return NotImplemented

    def __repr__(self) -> str:
        return f"DepsView(output={self.output!r}, inputs={len(self._input_spans)})"


class QueryInputKind(IntEnum):
    """How a query input participates in the build edge."""

    NORMAL = 0  # explicit input
    IMPLICIT = 1  # "| " prefix
    ORDER_ONLY = 2  # "|| " prefix

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class QueryInput:
    """One input line of a query report with its raw payload."""

    kind: QueryInputKind
    path: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {"kind": self.kind.label, "path": self.path}


@dataclass
class QueryResult:
    """Parsed `ninja -t query <target>` output for a single target."""

    input_desc: str
    inputs: List[QueryInput] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)

    def phony(self) -> bool:
        """True if the target is a phony (no-op aggregation) target."""
        return self.input_desc == PHONY_INPUT_DESC

    def inputs_of_kind(self, kind: QueryInputKind) -> List[str]:
        """Payloads of all inputs with the given kind, in report order."""
        return [inp.path for inp in self.inputs if inp.kind == kind]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        return {
            "input_desc": self.input_desc,
            "inputs": [inp.to_dict() for inp in self.inputs],
            "outputs": list(self.outputs),
        }
