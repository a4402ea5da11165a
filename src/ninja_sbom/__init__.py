# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Build dependency graph extraction from ninja reports for SBOM generation."""

from .config import Config, ConfigurationError
from .deps_parser import iter_deps_report, parse_dep_line, parse_deps_header, parse_deps_report
from .errors import EncodingError, NinjaSbomError, ParseError, SelfDependencyError
from .graph import DependencyGraph
from .logging_setup import configure_logging, setup_logging
from .models import (
    DepsForOneFile,
    DepsView,
    FileData,
    FileId,
    FileType,
    QueryInput,
    QueryInputKind,
    QueryResult,
    promote,
)
from .query_parser import parse_query_report
from .registry import FileRegistry, GraphExport, SelfDependencyPolicy
from .service import BuildGraphService
from .text import decode_report

__version__ = "0.1.0"

__all__ = [
    "BuildGraphService",
    "Config",
    "ConfigurationError",
    "DependencyGraph",
    "DepsForOneFile",
    "DepsView",
    "EncodingError",
    "FileData",
    "FileId",
    "FileRegistry",
    "FileType",
    "GraphExport",
    "NinjaSbomError",
    "ParseError",
    "QueryInput",
    "QueryInputKind",
    "QueryResult",
    "SelfDependencyError",
    "SelfDependencyPolicy",
    "configure_logging",
    "decode_report",
    "iter_deps_report",
    "parse_dep_line",
    "parse_deps_header",
    "parse_deps_report",
    "parse_query_report",
    "promote",
    "setup_logging",
]
