# utils/__init__.py
"""General utility functions for the movies data-access layer."""

from .logging import setup_logging

__all__ = ["setup_logging"]
