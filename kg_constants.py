# kg_constants.py
"""Labels and relationship types used to build movie graph queries.

Query text embeds these values directly, so every label or relationship
keyword should come from here rather than from a string literal.
"""

from __future__ import annotations

from enum import Enum

# --- Node labels ---

MOVIE_LABEL = "Movie"
PERSON_LABEL = "Person"
ACTOR_LABEL = "Actor"
DIRECTOR_LABEL = "Director"

# Set of known node labels used in the movies graph.
NODE_LABELS = {
    MOVIE_LABEL,
    PERSON_LABEL,
    ACTOR_LABEL,
    DIRECTOR_LABEL,
}

# Property names shared across queries
KG_PROP_TITLE = "title"
KG_PROP_NAME = "name"


class PersonRole(str, Enum):
    """Classification of a person node.

    Every person is found or created through the plain ``Person`` label;
    a role only adds its own label to a newly created node.
    """

    PERSON = "person"
    ACTOR = "actor"
    DIRECTOR = "director"

    @property
    def role_label(self) -> str | None:
        """Return the label a role adds on top of ``Person``, if any."""
        return _ROLE_LABELS[self]

    @property
    def labels(self) -> str:
        """Return the full label expression for this role, e.g. ``Person:Actor``."""
        return ":".join(label for label in (PERSON_LABEL, self.role_label) if label)


_ROLE_LABELS: dict[PersonRole, str | None] = {
    PersonRole.PERSON: None,
    PersonRole.ACTOR: ACTOR_LABEL,
    PersonRole.DIRECTOR: DIRECTOR_LABEL,
}


class Relationships(str, Enum):
    """Relationship types between people and movies."""

    # (Person)-[:ACTED_IN]->(Movie)
    ACTED_IN = "ACTED_IN"
    # (Person)-[:DIRECTED]->(Movie)
    DIRECTED = "DIRECTED"
    # (Person)-[:WROTE]->(Movie)
    WROTE = "WROTE"
    # (Person)-[:FOLLOWS]->(Person)
    FOLLOWS = "FOLLOWS"
    # (Person)-[:REVIEWED]->(Movie)
    REVIEWED = "REVIEWED"
    # (Person)-[:PRODUCED]->(Movie)
    PRODUCED = "PRODUCED"

    def __str__(self) -> str:
        return self.value


# Set of known relationship types used in the movies graph.
RELATIONSHIP_TYPES = {rel.value for rel in Relationships}


def is_known_relationship(token: str) -> bool:
    """Return ``True`` if ``token`` names one of :data:`RELATIONSHIP_TYPES`."""
    return token in RELATIONSHIP_TYPES
