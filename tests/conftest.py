"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from graphtext.graph import Graph, parse_graph_text

PEOPLE_TEXT = "Alice\nBob\nCharlie\nAlice Bob\nBob Charlie 5"


@pytest.fixture(autouse=True)
def clear_graphtext_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep GRAPHTEXT_* variables from the developer's shell out of tests."""
    for name in ("GRAPHTEXT_MAX_NODES", "GRAPHTEXT_GRAPH_TYPE", "GRAPHTEXT_INDEXING_MODE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def graph() -> Graph:
    """Empty undirected graph."""
    return Graph()


@pytest.fixture
def people_text() -> str:
    return PEOPLE_TEXT


@pytest.fixture
def people_graph() -> Graph:
    """Undirected graph: Alice - Bob - Charlie, with Bob-Charlie weighted 5."""
    return parse_graph_text(PEOPLE_TEXT)
