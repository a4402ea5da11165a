# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Shared fixtures for integration tests.

Provides ninja report text shaped like real `ninja -t deps` and
`ninja -t query` output for a small C project.
"""

import pytest

from ninja_sbom.config import Config
from ninja_sbom.service import BuildGraphService


@pytest.fixture
def example_deps_report() -> str:
    """Single-stanza deps report for one object file."""
    return (
        "out/foo.o: #deps 3, deps mtime 123 (VALID)\n"
        "    src/foo.c\n"
        "    include/foo.h\n"
        "    include/common.h\n"
    )


@pytest.fixture
def example_query_report() -> str:
    """Query report for the object file's compile edge."""
    return "out/foo.o:\n  input: cc\n    src/foo.c\n  outputs:\n    out/foo.o\n"


@pytest.fixture
def project_deps_report() -> str:
    """Deps report for a two-object project, as ninja prints it."""
    return (
        "out/foo.o: #deps 3, deps mtime 1675791486835771571 (VALID)\n"
        "    src/foo.c\n"
        "    include/foo.h\n"
        "    include/common.h\n"
        "\n"
        "out/main.o: #deps 3, deps mtime 1675791486835771572 (STALE)\n"
        "    src/main.c\n"
        "    include/foo.h\n"
        "    out/gen/version.h\n"
        "\n"
        "out/gen/version.h: #deps 0, deps mtime 1675791486835771500 (VALID)\n"
        "\n"
    )


@pytest.fixture
def project_queries() -> dict:
    """Query reports keyed by target name."""
    return {
        "app": (
            "app:\n"
            "  input: link\n"
            "    out/foo.o\n"
            "    out/main.o\n"
            "    | app.ld\n"
            "  outputs:\n"
            "    app\n"
        ),
        "all": "all:\n  input: phony\n    app\n  outputs:\n    all\n",
    }


@pytest.fixture
def service() -> BuildGraphService:
    """Service with in-memory default configuration."""
    return BuildGraphService(Config.from_dict({}))
