# data_access/result_mapper.py
"""Convert raw query records into typed models.

A record is a mapping from column name to a scalar, a list, a nested map, or a
driver ``Node``/``Relationship``. Each model has a :class:`RecordSpec`
describing the fields it needs; mapping only reads the record and builds the
model, so every executor shares the same specs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from core.exceptions import MappingError
from models.movie_models import (
    GraphModel,
    Movie,
    MovieTitleAndActors,
    MovieTitleAndRelatedPeople,
    Person,
)
from neo4j.graph import Entity  # type: ignore


STRING = "string"
INTEGER = "integer"
STRING_LIST = "string_list"


@dataclass(frozen=True)
class RecordSpec:
    model: type[GraphModel]
    fields: tuple[FieldSpec, ...]


@dataclass(frozen=True)
class FieldSpec:
    """One model field and where to find it in a record.

    ``kind`` is one of :data:`STRING`, :data:`INTEGER`, :data:`STRING_LIST`,
    or a :class:`RecordSpec` for a nested map. ``source`` is the record key
    when it differs from the model field name.
    """

    name: str
    kind: str | RecordSpec = STRING
    required: bool = True
    source: str | None = None

    @property
    def key(self) -> str:
        return self.source or self.name


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        return value
    if isinstance(value, Entity):
        return dict(value.items())
    return None


def _convert(spec: FieldSpec, value: Any, record: Mapping[str, Any]) -> Any:
    kind = spec.kind
    if isinstance(kind, RecordSpec):
        sub_map = _as_mapping(value)
        if sub_map is None:
            raise MappingError(
                spec.name, f"expected a map, got {type(value).__name__}", record
            )
        return map_record(sub_map, kind)
    if kind == STRING:
        if isinstance(value, str):
            return value
    elif kind == INTEGER:
        if isinstance(value, bool):
            pass
        elif isinstance(value, int):
            return value
        elif isinstance(value, float) and value.is_integer():
            return int(value)
    elif kind == STRING_LIST:
        if isinstance(value, list | tuple) and all(isinstance(v, str) for v in value):
            return list(value)
    else:
        raise MappingError(spec.name, f"unknown field kind {kind!r}", record)
    raise MappingError(
        spec.name, f"cannot convert {type(value).__name__} to {kind}", record
    )


def map_record(record: Mapping[str, Any], spec: RecordSpec) -> Any:
    """Build ``spec.model`` from ``record``.

    Optional fields that are missing or null become ``None``. A missing
    required field, or a value of the wrong type, raises :class:`MappingError`.
    An empty list is a valid value for a list field.
    """
    values: dict[str, Any] = {}
    for field_spec in spec.fields:
        value = record.get(field_spec.key)
        if value is None:
            if field_spec.required:
                raise MappingError(field_spec.name, "required field is missing", record)
            values[field_spec.name] = None
            continue
        values[field_spec.name] = _convert(field_spec, value, record)
    return spec.model(**values)


def map_column(record: Mapping[str, Any], column: str, spec: RecordSpec) -> Any:
    """Map the node or map held in ``record[column]``."""
    value = record.get(column)
    if value is None:
        raise MappingError(column, "required column is missing", record)
    return _convert(FieldSpec(column, spec), value, record)


def map_value(record: Mapping[str, Any], column: str, kind: str) -> Any:
    """Convert the scalar or list held in ``record[column]`` to ``kind``."""
    value = record.get(column)
    if value is None:
        raise MappingError(column, "required column is missing", record)
    return _convert(FieldSpec(column, kind), value, record)


MOVIE_SPEC = RecordSpec(
    Movie,
    (
        FieldSpec("title"),
        FieldSpec("released", INTEGER, required=False),
        FieldSpec("tagline", required=False),
    ),
)

PERSON_SPEC = RecordSpec(
    Person,
    (
        FieldSpec("name"),
        FieldSpec("born", INTEGER, required=False),
    ),
)

TITLE_AND_PEOPLE_SPEC = RecordSpec(
    MovieTitleAndRelatedPeople,
    (
        FieldSpec("title"),
        FieldSpec("relationship_type", source="relationshipType"),
        FieldSpec("people", STRING_LIST),
    ),
)

TITLE_AND_ACTORS_SPEC = RecordSpec(
    MovieTitleAndActors,
    (
        FieldSpec("title"),
        FieldSpec("actors", STRING_LIST),
    ),
)
