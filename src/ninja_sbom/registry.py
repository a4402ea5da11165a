# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""File registry and dependency graph for one generation run.

The registry assigns a stable FileId to every distinct path string, keeps the
most downstream FileType observed for it, and records "output depends on
input" edges between ids.

Flow: deps/query report text -> parsers -> FileRegistry -> SBOM emitter

Paths are compared by exact string equality. Any normalization (relative vs.
absolute, build root prefix) is the caller's policy and must happen before
paths reach the registry.

The registry is caller-owned state: create one per run, or one per shard
and combine them with merge().
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from ninja_sbom.errors import SelfDependencyError
from ninja_sbom.graph import DependencyGraph
from ninja_sbom.models import (
    DepsForOneFile,
    DepsView,
    FileData,
    FileId,
    FileType,
    QueryInputKind,
    QueryResult,
)

logger = logging.getLogger(__name__)

# Type alias for graph export format
GraphExport = Dict[str, Any]

EXPORT_FORMAT_VERSION = "1.0"


class SelfDependencyPolicy:
    """What record_dependency(p, p) does.

    Design: Using class constants (not Enum) so config values map directly.
    """

    IGNORE = "ignore"  # register the file, add no edge
    ALLOW = "allow"  # store a self-loop edge
    ERROR = "error"  # raise SelfDependencyError

    ALL = (IGNORE, ALLOW, ERROR)


class FileRegistry:
    """Accumulating store of file records and dependency edges.

    Invariants:
    - FileIds are assigned 0, 1, 2, ... in first-insertion order
    - Every FileId referenced by an edge has a FileData record
    - A record's FileType never decreases

    Usage:
        registry = FileRegistry()
        for stanza in parse_deps_report(text):
            registry.ingest(stanza)
        export = registry.export_graph()
    """

    def __init__(self, self_dependency_policy: str = SelfDependencyPolicy.IGNORE) -> None:
        """Initialize an empty registry.

        Args:
            self_dependency_policy: One of SelfDependencyPolicy.ALL.

        Raises:
            ValueError: If the policy is unknown.
        """
        if self_dependency_policy not in SelfDependencyPolicy.ALL:
            raise ValueError(f"Unknown self dependency policy: {self_dependency_policy}")
        self.self_dependency_policy = self_dependency_policy

        self._ids: Dict[str, FileId] = {}
        self._paths: List[str] = []
        self._records: List[FileData] = []
        self._graph = DependencyGraph()
        self._phony_targets: Set[str] = set()

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    def assign_or_promote(self, path: str, file_type: FileType = FileType.SOURCE_FILE) -> FileId:
        """Return the FileId for path, registering or promoting it.

        Args:
            path: Path string, used verbatim as the lookup key.
            file_type: Classification observed for path in this call.

        Returns:
            Existing FileId if path was seen before, else the next sequential id.
        """
        file_id = self._ids.get(path)
        if file_id is None:
            file_id = len(self._paths)
            record = FileData()
            record.promote_to(file_type)
            self._ids[path] = file_id
            self._paths.append(path)
            self._records.append(record)
            self._graph.add_node(file_id)
            return file_id

        record = self._records[file_id]
        previous = record.file_type
        if record.promote_to(file_type):
            logger.debug(f"Promoted {path} from {previous.label} to {record.file_type.label}")
        return file_id

    def _link(self, producer_id: FileId, input_id: FileId) -> bool:
        if producer_id == input_id:
            path = self._paths[producer_id]
            if self.self_dependency_policy == SelfDependencyPolicy.ERROR:
                raise SelfDependencyError(path)
            if self.self_dependency_policy == SelfDependencyPolicy.IGNORE:
                logger.debug(f"Ignoring self dependency of {path}")
                return False
        return self._graph.add_edge(producer_id, input_id)

    def record_dependency(self, producer_path: str, input_path: str) -> bool:
        """Record that building producer_path consumes input_path.

        Args:
            producer_path: Output of the build step (at least GENERATED_FILE).
            input_path: Input of the build step (at least SOURCE_FILE).

        Returns:
            True if a new edge was added.

        Raises:
            SelfDependencyError: If both paths are equal and the registry's
                policy is SelfDependencyPolicy.ERROR. Both paths are
                registered before the error is raised.
        """
        producer_id = self.assign_or_promote(producer_path, FileType.GENERATED_FILE)
        input_id = self.assign_or_promote(input_path, FileType.SOURCE_FILE)
        return self._link(producer_id, input_id)

    def ingest(self, deps: Union[DepsView, DepsForOneFile]) -> int:
        """Record every input of one deps stanza.

        The output is registered even when the stanza lists no inputs.

        Args:
            deps: Parsed stanza, borrowed or owned.

        Returns:
            Number of new edges added.

        Raises:
            SelfDependencyError: See record_dependency(). Call
                check_stanzas() first to reject a report without mutating
                the registry.
        """
        producer_id = self.assign_or_promote(deps.output, FileType.GENERATED_FILE)
        added = 0
        for input_path in deps.inputs:
            input_id = self.assign_or_promote(input_path, FileType.SOURCE_FILE)
            if self._link(producer_id, input_id):
                added += 1
        return added

    def ingest_all(self, stanzas: Iterable[Union[DepsView, DepsForOneFile]]) -> int:
        """Ingest stanzas in order. Returns number of new edges."""
        return sum(self.ingest(deps) for deps in stanzas)

    def check_stanzas(self, stanzas: Iterable[Union[DepsView, DepsForOneFile]]) -> None:
        """Validate stanzas against the self dependency policy without ingesting.

        Raises:
            SelfDependencyError: If the policy is ERROR and a stanza lists
                its own output as an input.
        """
        if self.self_dependency_policy != SelfDependencyPolicy.ERROR:
            return
        for deps in stanzas:
            output = deps.output
            if output in deps.inputs:
                raise SelfDependencyError(output)

    def _query_edge_inputs(self, result: QueryResult) -> List[str]:
        # Order-only inputs only sequence the build; the step does not read them
        return [
            query_input.path
            for query_input in result.inputs
            if query_input.kind != QueryInputKind.ORDER_ONLY
        ]

    def check_query_result(self, result: QueryResult) -> None:
        """Query counterpart of check_stanzas().

        Raises:
            SelfDependencyError: If the policy is ERROR and an output of a
                non-phony target is also one of its edge inputs.
        """
        if self.self_dependency_policy != SelfDependencyPolicy.ERROR or result.phony():
            return
        inputs = self._query_edge_inputs(result)
        for output in result.outputs:
            if output in inputs:
                raise SelfDependencyError(output)

    def ingest_query_result(self, result: QueryResult) -> int:
        """Fold one query result into the registry.

        For a real build edge every output depends on every normal and
        implicit input. Order-only inputs are skipped: they only sequence the
        build (CMake emits `cmake_object_order_depends_target_*` phonies
        there) and are not consumed.

        For a phony target the normal and implicit inputs are the
        deliverables it aggregates and are promoted to OUTPUT_ARTIFACT; no
        edges are added. The target's own outputs are remembered as phony
        names, and later phony queries do not promote them. Inputs naming
        phony targets that have not been queried yet cannot be told apart
        from files, so query nested phony targets (e.g. per-directory `all`)
        before the aggregates that list them.

        Args:
            result: Parsed query report.

        Returns:
            Number of new edges added.

        Raises:
            SelfDependencyError: See record_dependency().
        """
        inputs = self._query_edge_inputs(result)

        if result.phony():
            self._phony_targets.update(result.outputs)
            for path in inputs:
                if path in self._phony_targets:
                    logger.debug(f"Not promoting phony target {path}")
                    continue
                self.mark_output_artifact(path)
            return 0

        added = 0
        for output in result.outputs:
            producer_id = self.assign_or_promote(output, FileType.GENERATED_FILE)
            for path in inputs:
                input_id = self.assign_or_promote(path, FileType.SOURCE_FILE)
                if self._link(producer_id, input_id):
                    added += 1
        return added

    def is_phony_target(self, name: str) -> bool:
        """True if name was the target of an ingested phony query."""
        return name in self._phony_targets

    def mark_output_artifact(self, path: str) -> FileId:
        """Promote path to OUTPUT_ARTIFACT, registering it if needed."""
        return self.assign_or_promote(path, FileType.OUTPUT_ARTIFACT)

    def merge(self, other: "FileRegistry") -> None:
        """Replay another registry's records and edges into this one.

        Records are replayed in the other registry's id order, then edges in
        its insertion order, so merging shards in a fixed order is
        deterministic.
        """
        translated: List[FileId] = [
            self.assign_or_promote(path, record.file_type)
            for path, record in zip(other._paths, other._records)
        ]
        for producer_id, input_id in other.graph.edges():
            self._link(translated[producer_id], translated[input_id])
        self._phony_targets.update(other._phony_targets)

    def get_file_id(self, path: str) -> Optional[FileId]:
        return self._ids.get(path)

    def get_path(self, file_id: FileId) -> str:
        """Path registered under file_id.

        Raises:
            KeyError: If file_id was never assigned.
        """
        if not 0 <= file_id < len(self._paths):
            raise KeyError(file_id)
        return self._paths[file_id]

    def get_file_data(self, path: str) -> Optional[FileData]:
        file_id = self._ids.get(path)
        if file_id is None:
            return None
        return self._records[file_id]

    def get_file_type(self, path: str) -> Optional[FileType]:
        record = self.get_file_data(path)
        return record.file_type if record else None

    def files(self) -> Iterator[Tuple[FileId, str, FileData]]:
        """Yield (file_id, path, record) in id order."""
        for file_id, (path, record) in enumerate(zip(self._paths, self._records)):
            yield file_id, path, record

    def get_dependencies(self, path: str) -> List[str]:
        """Paths that path's build step consumes."""
        file_id = self._ids.get(path)
        if file_id is None:
            return []
        return [self._paths[dep] for dep in self._graph.successors(file_id)]

    def get_dependents(self, path: str) -> List[str]:
        """Paths whose build step consumes path."""
        file_id = self._ids.get(path)
        if file_id is None:
            return []
        return [self._paths[prod] for prod in self._graph.predecessors(file_id)]

    def count_by_type(self) -> Dict[str, int]:
        counts = {file_type.label: 0 for file_type in FileType}
        for record in self._records:
            counts[record.file_type.label] += 1
        return counts

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._ids

    def export_graph(self, document_name: Optional[str] = None) -> GraphExport:
        """Export records and edges to a JSON-compatible dict.

        Args:
            document_name: Optional name recorded in the metadata section.

        Returns:
            Dictionary containing:
            - metadata: timestamp, format version, counts
            - files: id, path and file_type per record, in id order
            - edges: producer/dependency ids and paths, in insertion order
        """
        metadata: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": EXPORT_FORMAT_VERSION,
            "total_files": len(self._paths),
            "total_edges": self._graph.edge_count,
            "files_by_type": self.count_by_type(),
        }
        if document_name:
            metadata["document_name"] = document_name

        files = [
            {"id": file_id, "path": path, **record.to_dict()}
            for file_id, path, record in self.files()
        ]
        edges = [
            {
                "producer": producer_id,
                "dependency": input_id,
                "producer_path": self._paths[producer_id],
                "dependency_path": self._paths[input_id],
            }
            for producer_id, input_id in self._graph.edges()
        ]

        return {"metadata": metadata, "files": files, "edges": edges}
