# data_access/__init__.py
# This file makes the data_access directory a Python package.
# It exposes the repository and the query helpers behind it.

from .cypher_builders import (
    CypherBuilder,
    CypherQuery,
    build_match_all,
    build_match_by_property,
    build_relate_nodes,
    build_traversal_aggregate,
    build_upsert_person,
)
from .movie_queries import MovieRepository, get_movie_repository
from .result_mapper import FieldSpec, RecordSpec, map_column, map_record

__all__ = [
    "MovieRepository",
    "get_movie_repository",
    "CypherBuilder",
    "CypherQuery",
    "build_match_all",
    "build_match_by_property",
    "build_traversal_aggregate",
    "build_upsert_person",
    "build_relate_nodes",
    "FieldSpec",
    "RecordSpec",
    "map_record",
    "map_column",
]
