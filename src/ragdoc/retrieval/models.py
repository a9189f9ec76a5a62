"""Declarative filters shared by every vector-collection backend."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

SUPPORTED_OPERATORS = ("eq", "ne", "gt", "gte", "lt", "lte", "in", "nin")


class MetadataFilter(BaseModel):
    """Declarative metadata filter for vector-store queries.

    A list of filters is combined with logical AND.

    Attributes
    ----------
    field:
        The record field to filter on (e.g. ``"document_id"``, ``"source_id"``).
    operator:
        Comparison operator — one of ``eq``, ``ne``, ``gt``, ``gte``,
        ``lt``, ``lte``, ``in``, ``nin``.
    value:
        The value (or list of values for ``in`` / ``nin``) to compare against.
    """

    field: str
    operator: str = "eq"
    value: Any = None

    # -- helpers for common filters ------------------------------------------

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def not_equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="ne", value=value)

    @classmethod
    def one_of(cls, field: str, values: list[Any]) -> MetadataFilter:
        return cls(field=field, operator="in", value=values)

    def matches(self, record: Any) -> bool:
        """Evaluate the filter against an in-memory record (model or dict)."""
        if isinstance(record, dict):
            actual = record.get(self.field)
        else:
            actual = getattr(record, self.field, None)
        op = self.operator
        if op == "eq":
            return actual == self.value
        if op == "ne":
            return actual != self.value
        if op == "in":
            return actual in self.value
        if op == "nin":
            return actual not in self.value
        if actual is None:
            return False
        if op == "gt":
            return actual > self.value
        if op == "gte":
            return actual >= self.value
        if op == "lt":
            return actual < self.value
        if op == "lte":
            return actual <= self.value
        raise ValueError(f"Unsupported filter operator: {op!r}")
