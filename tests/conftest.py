import asyncio
import logging
import os
import re
import sys
from typing import Any
from unittest.mock import MagicMock

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Ensure placeholder secrets do not trigger validators during tests
os.environ.setdefault("NEO4J_PASSWORD", "test-password")

import pytest
import structlog
from config import settings
from core.exceptions import BackendError
from neo4j.graph import Node

from utils import setup_logging

_REL_PATTERN = re.compile(r"-\[(?:r)?:(\w+)\]-")


def as_driver_node(properties: dict[str, Any]) -> Node:
    """Return a stand-in for a driver ``Node`` carrying ``properties``."""
    node = MagicMock(spec=Node)
    node.items.return_value = list(properties.items())
    return node


class InMemoryMovieGraph:
    """Tiny stand-in for Neo4j that answers the queries built by the repository.

    Person merges follow Neo4j's rules: the MERGE pattern must match every
    label of an existing node with that name, and a miss on a known name is
    rejected the way the ``Person.name`` uniqueness constraint would reject
    it. ``node_factory`` controls how nodes appear in returned rows: plain
    dicts (``Result.data()``) or driver nodes.
    """

    def __init__(self, strategy: str = "extensions", node_factory=dict) -> None:
        self.strategy = strategy
        self.node_factory = node_factory
        self.movies: dict[str, dict[str, Any]] = {}
        self.people: dict[str, dict[str, Any]] = {}
        self.person_labels: dict[str, set[str]] = {}
        # (person, relationship, movie) in insertion order
        self.edges: list[tuple[str, str, str]] = []
        self.reads: list[Any] = []
        self.writes: list[Any] = []
        self._lock = asyncio.Lock()

    def add_movie(self, title: str, **props: Any) -> None:
        self.movies[title] = {"title": title, **props}

    def add_person(self, name: str, **props: Any) -> None:
        self.people[name] = {"name": name, **props}
        self.person_labels[name] = {"Person"}

    def relate(self, name: str, relationship: str, title: str) -> None:
        self.edges.append((name, relationship, title))

    def _grouped(self, relationship: str) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for name, rel, title in self.edges:
            if rel == relationship:
                grouped.setdefault(title, []).append(name)
        return grouped

    async def read(self, query) -> list[dict[str, Any]]:
        self.reads.append(query)
        await asyncio.sleep(0)
        text, params = query.text, query.parameters
        rel_match = _REL_PATTERN.search(text)
        if rel_match:
            rel = rel_match.group(1)
            grouped = self._grouped(rel)
            if "title_param" in params:
                return [{"names": grouped.get(params["title_param"], [])}]
            if "AS maa" in text:
                return [
                    {"maa": {"title": t, "relationshipType": rel, "people": people}}
                    for t, people in grouped.items()
                ]
            return [{"title": t, "actors": people} for t, people in grouped.items()]
        if "title_param" in params:
            movie = self.movies.get(params["title_param"])
            return [{"m": self.node_factory(movie)}] if movie else []
        if "(n:Movie)" in text:
            return [{"n": self.node_factory(m)} for m in self.movies.values()]
        if "(n:Person)" in text:
            return [{"n": self.node_factory(p)} for p in self.people.values()]
        return []

    async def write(self, query) -> list[dict[str, Any]]:
        self.writes.append(query)
        text, params = query.text, query.parameters
        # Concurrent writers interleave here, like separate transactions would.
        await asyncio.sleep(0)
        async with self._lock:
            person = params["person"]
            if "movieTitle" in params and params["movieTitle"] not in self.movies:
                return []
            name = person["name"]
            pattern = set(re.search(r"MERGE \(p:([\w:]+) ", text).group(1).split(":"))
            if name in self.people and not pattern <= self.person_labels[name]:
                # MERGE matches every label in its pattern; a miss creates a
                # second node, which the Person.name constraint rejects.
                raise BackendError(
                    f"write query failed using the {self.strategy} strategy: "
                    f"Node already exists with label `Person` and property `name` = {name!r}"
                )
            if name not in self.people:
                self.people[name] = dict(person)
                on_create = re.search(r"ON CREATE SET (.*)", text).group(1)
                self.person_labels[name] = pattern | set(
                    re.findall(r"\bp:(\w+)", on_create)
                )
            if "movieTitle" in params:
                rel = re.search(r"MERGE \(m\)<-\[:(\w+)\]-\(p\)", text).group(1)
                edge = (person["name"], rel, params["movieTitle"])
                if edge not in self.edges:
                    self.edges.append(edge)
        return []


def _seed(graph: InMemoryMovieGraph) -> InMemoryMovieGraph:
    graph.add_movie(
        "The Matrix", released=1999, tagline="Welcome to the Real World"
    )
    graph.add_movie("The Matrix Reloaded", released=2003)
    graph.add_movie("Something's Gotta Give")
    graph.add_person("Keanu Reeves", born=1964)
    graph.add_person("Carrie-Anne Moss", born=1967)
    graph.add_person("Lana Wachowski", born=1965)
    graph.relate("Keanu Reeves", "ACTED_IN", "The Matrix")
    graph.relate("Carrie-Anne Moss", "ACTED_IN", "The Matrix")
    graph.relate("Keanu Reeves", "ACTED_IN", "The Matrix Reloaded")
    graph.relate("Lana Wachowski", "DIRECTED", "The Matrix")
    return graph


@pytest.fixture(params=["driver", "extensions", "fluent"])
def movie_graph(request) -> InMemoryMovieGraph:
    """Seeded graph, once per access strategy.

    The cursor strategy sees driver nodes; the others see property maps.
    """
    node_factory = as_driver_node if request.param == "driver" else dict
    return _seed(InMemoryMovieGraph(request.param, node_factory))


@pytest.fixture
def app_logging(monkeypatch, tmp_path):
    """Run a test with the application's logging configured at INFO."""
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "LOG_FILE", "movies.log")
    monkeypatch.setattr(settings, "ENABLE_RICH_LOGGING", False)
    monkeypatch.setattr(settings, "LOG_LEVEL_STR", "INFO")
    root_logger = logging.getLogger()
    previous_level = root_logger.level
    setup_logging()
    yield tmp_path / "movies.log"
    for handler in list(root_logger.handlers):
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(previous_level)
    structlog.reset_defaults()
