# data_access/cypher_builders/movie_cypher.py
"""Cypher for reading and writing movies and the people related to them.

Every helper returns a new :class:`CypherQuery`. The write helpers take the
query built so far and append to it, so a lookup and a merge can run as one
statement inside one transaction.
"""

from __future__ import annotations

from typing import Any

import structlog
from kg_constants import KG_PROP_NAME, KG_PROP_TITLE, PERSON_LABEL, PersonRole
from models.movie_models import Person

from .fluent_cypher import CypherBuilder, CypherQuery

logger = structlog.get_logger(__name__)

MOVIE_VAR = "m"
PERSON_VAR = "p"
REL_VAR = "r"


def build_match_all(label: str, variable: str = MOVIE_VAR) -> CypherQuery:
    """Return every node carrying ``label`` in column ``variable``."""
    return (
        CypherBuilder()
        .match(f"({variable}:{label})")
        .return_(variable)
        .to_query()
    )


def build_match_by_property(
    label: str,
    property_name: str,
    property_value: Any,
    variable: str = MOVIE_VAR,
    parameter_name: str | None = None,
) -> CypherQuery:
    """Return nodes with ``label`` whose ``property_name`` equals the bound value."""
    param = parameter_name or f"{property_name}_param"
    return (
        CypherBuilder()
        .match(f"({variable}:{label})")
        .where(f"{variable}.{property_name} = ${param}")
        .with_param(param, property_value)
        .return_(variable)
        .to_query()
    )


def build_traversal_aggregate(
    anchor_label: str,
    relationship: str,
    related_label: str,
    *,
    filter_property: str | None = None,
    filter_value: Any = None,
    group_by: str | None = KG_PROP_TITLE,
    collect_as: str = "people",
    include_relationship_type: bool = False,
    as_map: str | None = None,
    parameter_name: str | None = None,
) -> CypherQuery:
    """Collect the names of related nodes pointing at each anchor node.

    Matches ``(m:anchor_label)<-[r:relationship]-(p:related_label)`` and
    returns ``COLLECT(p.name)`` under ``collect_as``. Rows are grouped by the
    anchor's ``group_by`` property; with ``group_by=None`` the whole match is
    aggregated into one row, which holds an empty list when nothing matched.

    The ``WHERE`` clause is only emitted when ``filter_property`` is given.
    ``include_relationship_type`` adds ``type(r)`` as ``relationshipType``,
    and ``as_map`` wraps every column in a single map column of that name.

    ``relationship`` is embedded in the query text as-is.
    """
    builder = CypherBuilder().match(
        f"({MOVIE_VAR}:{anchor_label})<-[{REL_VAR}:{relationship}]-({PERSON_VAR}:{related_label})"
    )
    if filter_property is not None:
        param = parameter_name or f"{filter_property}_param"
        builder.where(f"{MOVIE_VAR}.{filter_property} = ${param}").with_param(
            param, filter_value
        )

    columns: list[tuple[str, str]] = []
    if group_by is not None:
        columns.append((group_by, f"{MOVIE_VAR}.{group_by}"))
    if include_relationship_type:
        columns.append(("relationshipType", f"type({REL_VAR})"))
    columns.append((collect_as, f"COLLECT({PERSON_VAR}.{KG_PROP_NAME})"))

    if as_map:
        entries = ", ".join(f"{key}: {expr}" for key, expr in columns)
        builder.return_(f"{{{entries}}} AS {as_map}")
    else:
        builder.return_(", ".join(f"{expr} AS {key}" for key, expr in columns))
    return builder.to_query()


def build_upsert_person(
    existing: CypherQuery | None,
    person: Person,
    parameter_name: str = "person",
    role: PersonRole = PersonRole.PERSON,
) -> CypherQuery:
    """Append a find-or-create of ``person`` keyed on its name.

    The merge pattern carries only the ``Person`` label and the name, since
    MERGE matches every label in its pattern. Properties and the role label
    are written only when the node is created: merging a known name with a
    different ``born`` or role leaves the stored node untouched.
    The person is bound to ``p``.
    """
    on_create = [f"{PERSON_VAR} = ${parameter_name}"]
    if role.role_label:
        on_create.append(f"{PERSON_VAR}:{role.role_label}")
    builder = CypherBuilder(existing)
    builder.merge(
        f"({PERSON_VAR}:{PERSON_LABEL} {{{KG_PROP_NAME}: ${parameter_name}.{KG_PROP_NAME}}})"
    ).on_create_set(", ".join(on_create)).with_param(
        parameter_name,
        {k: v for k, v in person.to_properties().items() if v is not None},
    )
    logger.debug(
        "Built person merge", person=person.name, labels=role.labels
    )
    return builder.to_query()


def build_relate_nodes(
    existing: CypherQuery,
    relationship: str,
    source: str = PERSON_VAR,
    target: str = MOVIE_VAR,
) -> CypherQuery:
    """Append a merge of ``(target)<-[:relationship]-(source)``.

    Both variables must already be bound by ``existing``. ``relationship`` is
    embedded in the query text as-is.
    """
    return (
        CypherBuilder(existing)
        .merge(f"({target})<-[:{relationship}]-({source})")
        .to_query()
    )
