# data_access/movie_queries.py
"""Movie and person operations shared by every access strategy."""

from __future__ import annotations

import structlog
from config import settings
from core.exceptions import ValidationError
from core.executors import QueryExecutor, get_executor
from kg_constants import (
    KG_PROP_TITLE,
    MOVIE_LABEL,
    PERSON_LABEL,
    PersonRole,
    Relationships,
    is_known_relationship,
)
from models.movie_models import (
    Movie,
    MovieTitleAndActors,
    MovieTitleAndRelatedPeople,
    Person,
)

from .cypher_builders.fluent_cypher import CypherBuilder
from .cypher_builders.movie_cypher import (
    build_match_all,
    build_match_by_property,
    build_relate_nodes,
    build_traversal_aggregate,
    build_upsert_person,
)
from .result_mapper import (
    MOVIE_SPEC,
    PERSON_SPEC,
    STRING_LIST,
    TITLE_AND_ACTORS_SPEC,
    TITLE_AND_PEOPLE_SPEC,
    RecordSpec,
    map_column,
    map_record,
    map_value,
)

logger = structlog.get_logger(__name__)

__all__ = ["MovieRepository", "get_movie_repository"]

# Labels that ``list_all`` can read, with the record layout of their nodes.
_ENTITY_SPECS: dict[str, RecordSpec] = {
    MOVIE_LABEL: MOVIE_SPEC,
    PERSON_LABEL: PERSON_SPEC,
}

_PROJECTION_COLUMN = "maa"


def _require_text(field: str, value: str | None) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        logger.warning("Rejected blank identifier", field=field)
        raise ValidationError(field, "must be a non-empty string")
    return value


def _require_relationship(value: str | Relationships | None) -> str:
    token = _require_text("relationship", str(value) if value is not None else None)
    if settings.STRICT_RELATIONSHIP_TYPES and not is_known_relationship(token):
        logger.warning("Rejected unknown relationship type", relationship=token)
        raise ValidationError(
            "relationship",
            f"'{token}' is not one of {sorted(r.value for r in Relationships)}",
        )
    return token


class MovieRepository:
    """Reads and writes movies and people through one :class:`QueryExecutor`."""

    def __init__(self, executor: QueryExecutor | None = None) -> None:
        self.executor = executor or get_executor()

    @property
    def strategy(self) -> str:
        return self.executor.strategy

    async def list_all(self, entity_label: str = MOVIE_LABEL) -> list[Movie | Person]:
        """Return every node of ``entity_label`` (``Movie`` or ``Person``)."""
        label = _require_text("entity_label", entity_label)
        spec = _ENTITY_SPECS.get(label)
        if spec is None:
            raise ValidationError(
                "entity_label", f"'{label}' is not one of {sorted(_ENTITY_SPECS)}"
            )
        records = await self.executor.read(build_match_all(label, variable="n"))
        return [map_column(record, "n", spec) for record in records]

    async def get_by_title(self, title: str) -> Movie | None:
        """Return the movie called ``title``, or ``None`` if there is none."""
        _require_text("title", title)
        query = build_match_by_property(MOVIE_LABEL, KG_PROP_TITLE, title)
        records = await self.executor.read(query)
        if not records:
            logger.debug("Movie not found", title=title)
            return None
        if len(records) > 1:
            logger.warning(
                "Title matched more than one movie; using the first",
                title=title,
                count=len(records),
            )
        return map_column(records[0], "m", MOVIE_SPEC)

    async def get_related_names_by_title(
        self, title: str, relationship: str | Relationships
    ) -> list[str]:
        """Return the names of people with ``relationship`` to the movie ``title``.

        A movie with nobody related that way gives an empty list.
        """
        _require_text("title", title)
        rel = _require_relationship(relationship)
        query = build_traversal_aggregate(
            MOVIE_LABEL,
            rel,
            PERSON_LABEL,
            filter_property=KG_PROP_TITLE,
            filter_value=title,
            group_by=None,
            collect_as="names",
        )
        records = await self.executor.read(query)
        if not records:
            return []
        return map_value(records[0], "names", STRING_LIST)

    async def get_actor_names_by_title(self, title: str) -> list[str]:
        return await self.get_related_names_by_title(title, Relationships.ACTED_IN)

    async def get_all_related_by_entity(
        self, relationship: str | Relationships
    ) -> list[MovieTitleAndRelatedPeople]:
        """Return, per movie, everyone with ``relationship`` to it."""
        rel = _require_relationship(relationship)
        query = build_traversal_aggregate(
            MOVIE_LABEL,
            rel,
            PERSON_LABEL,
            include_relationship_type=True,
            as_map=_PROJECTION_COLUMN,
        )
        records = await self.executor.read(query)
        return [
            map_column(record, _PROJECTION_COLUMN, TITLE_AND_PEOPLE_SPEC)
            for record in records
        ]

    async def get_actors_by_movie(self) -> list[MovieTitleAndActors]:
        query = build_traversal_aggregate(
            MOVIE_LABEL, Relationships.ACTED_IN.value, PERSON_LABEL, collect_as="actors"
        )
        records = await self.executor.read(query)
        return [map_record(record, TITLE_AND_ACTORS_SPEC) for record in records]

    async def upsert_person(
        self,
        name: str,
        born: int | None = None,
        role: PersonRole = PersonRole.PERSON,
    ) -> Person:
        """Find or create the person called ``name``.

        ``born`` is only stored when the person is created. The returned
        :class:`Person` echoes the input, matching what was requested rather
        than what was already stored.
        """
        _require_text("name", name)
        person = Person(name=name, born=born)
        await self.executor.write(build_upsert_person(None, person, role=role))
        logger.info("Merged person", person=name, strategy=self.strategy)
        return person

    async def link_person_to_entity(
        self,
        entity_title: str,
        relationship: str | Relationships,
        person_name: str,
    ) -> list[MovieTitleAndRelatedPeople]:
        """Find-or-create ``person_name`` and relate them to the movie ``entity_title``.

        Returns the refreshed per-movie listing for ``relationship``. Nothing is
        written when the movie does not exist.
        """
        _require_text("entity_title", entity_title)
        rel = _require_relationship(relationship)
        _require_text("person_name", person_name)

        lookup = (
            CypherBuilder()
            .match(f"(m:{MOVIE_LABEL})")
            .where(f"m.{KG_PROP_TITLE} = $movieTitle")
            .with_param("movieTitle", entity_title)
            .to_query()
        )
        query = build_relate_nodes(
            build_upsert_person(lookup, Person(name=person_name)), rel
        )
        await self.executor.write(query)
        logger.info(
            "Linked person to movie",
            movie=entity_title,
            relationship=rel,
            person=person_name,
            strategy=self.strategy,
        )
        return await self.get_all_related_by_entity(rel)


def get_movie_repository(strategy: str | None = None) -> MovieRepository:
    """Return a repository backed by the executor for ``strategy``."""
    return MovieRepository(get_executor(strategy))
