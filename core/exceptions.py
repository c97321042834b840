# core/exceptions.py
"""Exceptions raised by the movies data-access layer.

A lookup that finds nothing is not an error: it returns ``None`` or an empty
list. These exceptions mark requests that failed.
"""

from __future__ import annotations

from collections.abc import Iterable


class MovieGraphError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(MovieGraphError, ValueError):
    """A caller-supplied identifier was rejected before any query was built."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class MappingError(MovieGraphError):
    """A raw record could not be converted into its declared model."""

    def __init__(
        self, field: str, message: str, record_keys: Iterable[str] = ()
    ) -> None:
        self.field = field
        self.record_keys = sorted(record_keys)
        super().__init__(
            f"Cannot map field '{field}': {message} (record keys: {self.record_keys})"
        )


class BackendError(MovieGraphError):
    """The database failed the request after the driver gave up retrying."""
