"""Central package for the movie graph data models."""

from .movie_models import (
    GraphModel,
    Movie,
    MovieTitleAndActors,
    MovieTitleAndRelatedPeople,
    Person,
)

__all__ = [
    "GraphModel",
    "Movie",
    "Person",
    "MovieTitleAndRelatedPeople",
    "MovieTitleAndActors",
]
