# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""BuildGraphService - coordinates report parsing and graph assembly.

Key Responsibilities:
- Decode raw report bytes captured from ninja
- Run the deps and query parsers with configured options
- Fold parsed records into a FileRegistry
- Provide graph export and statistics for the SBOM emitter

Running ninja and reading report files stay with the caller; this layer only
receives their output.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from ninja_sbom.config import Config
from ninja_sbom.deps_parser import parse_deps_report
from ninja_sbom.errors import NinjaSbomError
from ninja_sbom.logging_setup import configure_logging
from ninja_sbom.models import QueryResult
from ninja_sbom.query_parser import parse_query_report
from ninja_sbom.registry import FileRegistry, GraphExport
from ninja_sbom.text import decode_report

logger = logging.getLogger(__name__)

Report = Union[str, bytes]


class BuildGraphService:
    """Business logic coordinator for build graph extraction.

    Owned Components:
    - Config: parser, registry and logging options
    - FileRegistry: accumulated files and edges for this run

    A report is accepted or rejected as a whole: decoding, parsing and the
    self dependency check all run before the registry is touched.

    Usage:
        service = BuildGraphService.from_config(Config())
        service.ingest_deps_report(deps_output)
        service.ingest_query_report(query_output, "all")
        export = service.export_graph()
    """

    def __init__(self, config: Config, registry: Optional[FileRegistry] = None):
        """Initialize the service.

        Args:
            config: Configuration values.
            registry: Registry to accumulate into. A new one using the
                configured self dependency policy is created if None.
        """
        self.config = config
        if registry is None:
            registry = FileRegistry(self_dependency_policy=config.self_dependency_policy)
        self.registry = registry

        self._deps_reports = 0
        self._query_reports = 0
        self._failed_reports = 0

    @classmethod
    def from_config(
        cls,
        config: Config,
        console_output: bool = True,
        base_dir: Optional[Path] = None,
    ) -> "BuildGraphService":
        """Create a service and route logging as the config requests.

        Args:
            config: Configuration values, including log_level and log_dir.
            console_output: Also log to stderr.
            base_dir: Directory a relative log_dir resolves against.
        """
        log_file = configure_logging(config, console_output=console_output, base_dir=base_dir)
        logger.info(f"Starting build graph run '{config.document_name}', logging to {log_file}")
        return cls(config)

    def _reject(self, description: str, error: NinjaSbomError) -> None:
        self._failed_reports += 1
        logger.warning(
            f"Rejected {description}: {error}",
            extra={"extra_fields": {"error_type": type(error).__name__}},
        )

    def ingest_deps_report(self, report: Report) -> int:
        """Parse a `ninja -t deps` report and ingest every stanza.

        Args:
            report: Report text or raw UTF-8 bytes.

        Returns:
            Number of stanzas ingested.

        Raises:
            EncodingError: If report bytes are not UTF-8.
            ParseError: If the report does not match the grammar.
            SelfDependencyError: If the registry's policy is ERROR and a
                stanza lists its own output.
        """
        try:
            text = decode_report(report)
            stanzas = parse_deps_report(text, skip_blank_lines=self.config.skip_blank_lines)
            self.registry.check_stanzas(stanzas)
        except NinjaSbomError as e:
            self._reject("deps report", e)
            raise

        added = self.registry.ingest_all(stanzas)
        self._deps_reports += 1
        logger.info(
            f"Ingested deps report: {len(stanzas)} outputs, {added} new edges, "
            f"{len(self.registry)} files total",
            extra={
                "extra_fields": {
                    "report": "deps",
                    "outputs": len(stanzas),
                    "new_edges": added,
                }
            },
        )
        return len(stanzas)

    def ingest_query_report(self, report: Report, target: str) -> QueryResult:
        """Parse a `ninja -t query <target>` report and ingest it.

        Args:
            report: Report text or raw UTF-8 bytes.
            target: Target name the query was run for.

        Returns:
            The parsed QueryResult.

        Raises:
            EncodingError: If report bytes are not UTF-8.
            ParseError: If the report does not match the grammar.
            SelfDependencyError: If the registry's policy is ERROR and an
                output is also one of the target's inputs.
        """
        try:
            text = decode_report(report)
            result = parse_query_report(
                text, target, collapse_implicit=self.config.collapse_implicit_inputs
            )
            self.registry.check_query_result(result)
        except NinjaSbomError as e:
            self._reject(f"query report for {target}", e)
            raise

        added = self.registry.ingest_query_result(result)
        self._query_reports += 1
        kind = "phony" if result.phony() else result.input_desc
        logger.info(
            f"Ingested query for {target} ({kind}): {added} new edges",
            extra={"extra_fields": {"report": "query", "target": target, "new_edges": added}},
        )
        return result

    def mark_output_artifacts(self, paths: Iterable[str]) -> int:
        """Promote the given paths to OUTPUT_ARTIFACT. Returns how many."""
        count = 0
        for path in paths:
            self.registry.mark_output_artifact(path)
            count += 1
        return count

    def export_graph(self) -> GraphExport:
        """Export the accumulated graph under the configured document name."""
        return self.registry.export_graph(document_name=self.config.document_name)

    def get_statistics(self) -> Dict[str, Any]:
        """Counters for reports processed and the current graph size."""
        return {
            "deps_reports": self._deps_reports,
            "query_reports": self._query_reports,
            "failed_reports": self._failed_reports,
            "total_files": len(self.registry),
            "total_edges": self.registry.graph.edge_count,
            "files_by_type": self.registry.count_by_type(),
        }
