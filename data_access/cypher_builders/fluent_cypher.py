# data_access/cypher_builders/fluent_cypher.py
"""Fluent builder for assembling parameterized Cypher queries."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _merge_parameters(
    existing: Mapping[str, Any], added: Mapping[str, Any]
) -> dict[str, Any]:
    merged = dict(existing)
    for name, value in added.items():
        if name in merged:
            raise ValueError(
                f"Cypher parameter '${name}' is already bound in this query; "
                "use a distinct parameter name for each step."
            )
        merged[name] = value
    return merged


@dataclass(frozen=True)
class CypherQuery:
    """Query text together with the parameters it binds."""

    text: str
    parameters: dict[str, Any] = field(default_factory=dict)


class CypherBuilder:
    """Simple fluent interface for constructing Cypher queries.

    Passing an existing :class:`CypherQuery` continues from its text and
    parameters; the query itself is left unchanged.
    """

    def __init__(self, query: CypherQuery | None = None) -> None:
        self._parts: list[str] = [query.text] if query and query.text else []
        self._parameters: dict[str, Any] = dict(query.parameters) if query else {}

    def raw(self, text: str) -> CypherBuilder:
        self._parts.append(text.strip())
        return self

    def match(self, clause: str) -> CypherBuilder:
        return self.raw(f"MATCH {clause}")

    def merge(self, clause: str) -> CypherBuilder:
        return self.raw(f"MERGE {clause}")

    def on_create_set(self, clause: str) -> CypherBuilder:
        return self.raw(f"ON CREATE SET {clause}")

    def where(self, clause: str) -> CypherBuilder:
        return self.raw(f"WHERE {clause}")

    def return_(self, clause: str) -> CypherBuilder:
        return self.raw(f"RETURN {clause}")

    def with_param(self, name: str, value: Any) -> CypherBuilder:
        self._parameters = _merge_parameters(self._parameters, {name: value})
        return self

    def build(self) -> str:
        return "\n".join(self._parts)

    def to_query(self) -> CypherQuery:
        return CypherQuery(self.build(), dict(self._parameters))
