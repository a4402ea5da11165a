# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Directed dependency graph keyed by FileId.

An edge (producer, dependency) means the build step producing `producer`
consumes `dependency`. Nodes and edges keep insertion order so exports are
reproducible across runs over the same reports.

Limitations:
- NOT thread-safe: Designed for single-threaded use only
- No traversal algorithms; consumers walk successors() themselves
"""

import logging
from typing import Dict, Iterator, List, Tuple

from ninja_sbom.models import FileId

logger = logging.getLogger(__name__)

Edge = Tuple[FileId, FileId]


class DependencyGraph:
    """Adjacency-list digraph without multi-edges.

    Data Structure:
    - _successors: node -> ordered set of dependencies (dict keys)
    - _predecessors: node -> ordered set of producers consuming it
    - _edges: ordered set of (producer, dependency) pairs
    """

    def __init__(self) -> None:
        """Initialize empty graph."""
        self._successors: Dict[FileId, Dict[FileId, None]] = {}
        self._predecessors: Dict[FileId, Dict[FileId, None]] = {}
        self._edges: Dict[Edge, None] = {}

    def add_node(self, node: FileId) -> None:
        """Add a node with no edges. No-op if present."""
        if node not in self._successors:
            self._successors[node] = {}
            self._predecessors[node] = {}

    def add_edge(self, producer: FileId, dependency: FileId) -> bool:
        """Add a directed edge, creating missing nodes.

        Args:
            producer: File whose build step consumes dependency.
            dependency: File consumed.

        Returns:
            True if the edge was new, False if it already existed.
        """
        edge = (producer, dependency)
        if edge in self._edges:
            return False

        self.add_node(producer)
        self.add_node(dependency)
        self._edges[edge] = None
        self._successors[producer][dependency] = None
        self._predecessors[dependency][producer] = None
        return True

    def has_edge(self, producer: FileId, dependency: FileId) -> bool:
        return (producer, dependency) in self._edges

    def successors(self, node: FileId) -> List[FileId]:
        """Dependencies of node, in insertion order."""
        return list(self._successors.get(node, ()))

    def predecessors(self, node: FileId) -> List[FileId]:
        """Producers that consume node, in insertion order."""
        return list(self._predecessors.get(node, ()))

    def nodes(self) -> List[FileId]:
        return list(self._successors)

    def edges(self) -> Iterator[Edge]:
        """All edges in insertion order."""
        return iter(list(self._edges))

    @property
    def node_count(self) -> int:
        return len(self._successors)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __contains__(self, node: object) -> bool:
        return node in self._successors

    def clear(self) -> None:
        """Remove all nodes and edges."""
        self._successors.clear()
        self._predecessors.clear()
        self._edges.clear()
