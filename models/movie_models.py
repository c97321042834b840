"""Core data models for movies, people and their aggregated projections."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GraphModel(BaseModel):
    """Base model for values read from, or written to, the graph."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_properties(self) -> dict[str, Any]:
        """Return the node properties, using the graph's property names."""

        return self.model_dump(by_alias=True)


class Movie(GraphModel):
    """A movie node. ``released`` and ``tagline`` are missing on some movies."""

    title: str
    released: int | None = None
    tagline: str | None = None


class Person(GraphModel):
    """A person node."""

    name: str
    born: int | None = None


class MovieTitleAndRelatedPeople(GraphModel):
    """Names of everyone with ``relationship_type`` to the movie ``title``."""

    title: str
    relationship_type: str = Field(alias="relationshipType")
    people: list[str] = Field(default_factory=list)


class MovieTitleAndActors(GraphModel):
    """Actor names for a single movie."""

    title: str
    actors: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.title} - {','.join(self.actors)}"
