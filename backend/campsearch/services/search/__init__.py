"""Availability-aware, multi-criteria property search."""

from campsearch.services.search.engine import search_properties

__all__ = ["search_properties"]
