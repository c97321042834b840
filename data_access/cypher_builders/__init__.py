# data_access/cypher_builders/__init__.py
"""Utilities for constructing Cypher queries."""

from .fluent_cypher import CypherBuilder, CypherQuery
from .movie_cypher import (
    build_match_all,
    build_match_by_property,
    build_relate_nodes,
    build_traversal_aggregate,
    build_upsert_person,
)

__all__ = [
    "CypherBuilder",
    "CypherQuery",
    "build_match_all",
    "build_match_by_property",
    "build_traversal_aggregate",
    "build_upsert_person",
    "build_relate_nodes",
]
