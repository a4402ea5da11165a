# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Unit tests for DependencyGraph."""

from ninja_sbom.graph import DependencyGraph


class TestDependencyGraph:
    """Tests for the adjacency-list graph."""

    def test_initialization(self):
        """Test graph initializes empty."""
        graph = DependencyGraph()
        assert graph.node_count == 0
        assert graph.edge_count == 0
        assert list(graph.edges()) == []

    def test_add_edge_creates_nodes(self):
        """Test endpoints are added with the edge."""
        graph = DependencyGraph()
        assert graph.add_edge(0, 1) is True

        assert 0 in graph
        assert 1 in graph
        assert graph.successors(0) == [1]
        assert graph.predecessors(1) == [0]

    def test_no_multi_edges(self):
        """Test a repeated pair is stored once."""
        graph = DependencyGraph()
        graph.add_edge(0, 1)
        assert graph.add_edge(0, 1) is False

        assert graph.edge_count == 1
        assert graph.successors(0) == [1]

    def test_direction_matters(self):
        """Test (a, b) and (b, a) are distinct edges."""
        graph = DependencyGraph()
        graph.add_edge(0, 1)
        graph.add_edge(1, 0)

        assert graph.edge_count == 2
        assert graph.has_edge(1, 0)

    def test_insertion_order(self):
        """Test edges and successors keep insertion order."""
        graph = DependencyGraph()
        graph.add_edge(3, 2)
        graph.add_edge(3, 0)
        graph.add_edge(1, 2)

        assert list(graph.edges()) == [(3, 2), (3, 0), (1, 2)]
        assert graph.successors(3) == [2, 0]
        assert graph.predecessors(2) == [3, 1]
        assert graph.nodes() == [3, 2, 0, 1]

    def test_isolated_node(self):
        """Test add_node registers a node with no edges."""
        graph = DependencyGraph()
        graph.add_node(5)
        graph.add_node(5)

        assert graph.nodes() == [5]
        assert graph.successors(5) == []

    def test_unknown_node_queries(self):
        """Test queries for absent nodes return empty lists."""
        graph = DependencyGraph()
        assert graph.successors(9) == []
        assert graph.predecessors(9) == []
        assert not graph.has_edge(9, 8)

    def test_clear(self):
        """Test clear removes everything."""
        graph = DependencyGraph()
        graph.add_edge(0, 1)
        graph.clear()

        assert graph.node_count == 0
        assert graph.edge_count == 0
