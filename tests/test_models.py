# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Tests for core data models."""

import itertools

import pytest

from ninja_sbom.models import (
    DepsForOneFile,
    DepsView,
    FileData,
    FileType,
    QueryInput,
    QueryInputKind,
    QueryResult,
    promote,
)


class TestFileType:
    """Tests for the FileType order and promotion."""

    def test_order(self):
        """Test SOURCE < GENERATED < ARTIFACT."""
        assert FileType.SOURCE_FILE < FileType.GENERATED_FILE < FileType.OUTPUT_ARTIFACT

    @pytest.mark.parametrize(
        "current,new_type", list(itertools.product(list(FileType), repeat=2))
    )
    def test_promote_is_max(self, current, new_type):
        """Test promote never returns less than either argument."""
        result = promote(current, new_type)
        assert result >= current
        assert result >= new_type
        assert result in (current, new_type)

    def test_labels_round_trip(self):
        """Test labels map back to members."""
        for file_type in FileType:
            assert FileType.from_label(file_type.label) is file_type
        assert FileType.GENERATED_FILE.label == "generated_file"

    def test_default(self):
        """Test the first-sight default is SOURCE_FILE."""
        assert FileType.default() is FileType.SOURCE_FILE


class TestFileData:
    """Tests for FileData records."""

    def test_default_record(self):
        """Test a new record is a source file."""
        assert FileData().file_type == FileType.SOURCE_FILE

    def test_promote_to_reports_change(self):
        """Test promote_to returns whether the type changed."""
        record = FileData()
        assert record.promote_to(FileType.GENERATED_FILE) is True
        assert record.promote_to(FileType.SOURCE_FILE) is False
        assert record.promote_to(FileType.GENERATED_FILE) is False
        assert record.file_type == FileType.GENERATED_FILE

    def test_serialization(self):
        """Test dict serialization."""
        record = FileData(FileType.OUTPUT_ARTIFACT)
        assert record.to_dict() == {"file_type": "output_artifact"}
        assert FileData.from_dict(record.to_dict()) == record


class TestDepsResults:
    """Tests for borrowed and owned stanza shapes."""

    def test_view_slices_source(self):
        """Test a view reads paths from its spans."""
        source = "xx out.o yy a.c"
        view = DepsView(source, (3, 8), [(12, 15)])

        assert view.output == "out.o"
        assert view.inputs == ["a.c"]
        assert repr(view) == "DepsView(output='out.o', inputs=1)"

    def test_owned_is_independent_copy(self):
        """Test to_owned returns plain strings in a new object."""
        view = DepsView("out.o a.c", (0, 5), [(6, 9)])
        owned = view.to_owned()

        assert owned == DepsForOneFile("out.o", ["a.c"])
        assert owned.to_owned() is owned

    def test_owned_serialization(self):
        """Test DepsForOneFile dict serialization."""
        deps = DepsForOneFile("out.o", ["a.c", "a.h"])
        assert DepsForOneFile.from_dict(deps.to_dict()) == deps


class TestQueryResult:
    """Tests for QueryResult helpers."""

    def test_phony_exact_match(self):
        """Test phony() requires the exact description."""
        assert QueryResult("phony").phony() is True
        assert QueryResult("PHONY").phony() is False
        assert QueryResult("phony ").phony() is False
        assert QueryResult("cc").phony() is False

    def test_to_dict(self):
        """Test query result serialization uses kind labels."""
        result = QueryResult(
            "cc",
            inputs=[QueryInput(QueryInputKind.ORDER_ONLY, "stamp")],
            outputs=["a.o"],
        )
        assert result.to_dict() == {
            "input_desc": "cc",
            "inputs": [{"kind": "order_only", "path": "stamp"}],
            "outputs": ["a.o"],
        }
