"""
Pydantic models for the query DSL.

These define the structure of incoming queries and normalized internal representations.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from .errors import ValidationError

SUPPORTED_OPS = ("eq", "in")


class NormalizedFilter(BaseModel):
    """
    Normalized filter representation.

    Input: {"status__eq": "ACTIVE"}
    Normalized: NormalizedFilter(field="status", op="eq", value="ACTIVE")
    """
    field: str
    op: Literal["eq", "in"]
    value: Any


class SelectionNode(BaseModel):
    """
    Selection node for query - defines what to fetch at each level.

    ``fields`` empty means every stored field. Each key of ``relations`` names
    a reference field to resolve, with its own nested selection.
    """
    fields: list[str] = Field(default_factory=list)
    relations: dict[str, SelectionNode] = Field(default_factory=dict)


class JSONQuery(BaseModel):
    """
    Query structure accepted by ``StoreGraph.query`` and ``POST /query``.

    Example:
    {
        "entity": "Order",
        "filters": {"user__eq": "5f1c..."},
        "select": {
            "fields": ["id", "total"],
            "relations": {"user": {"fields": ["username"]}}
        }
    }
    """
    entity: str
    id: Optional[str] = None  # single lookup when set
    filters: dict[str, Any] = Field(default_factory=dict)
    select: SelectionNode = Field(default_factory=SelectionNode)


def normalize_filters(filters: dict[str, Any]) -> list[NormalizedFilter]:
    """Convert ``{"field__op": value}`` dict to a normalized filter list."""
    result = []
    errors = []
    for key, value in filters.items():
        if "__" in key:
            field, op = key.rsplit("__", 1)
        else:
            field, op = key, "eq"
        if op not in SUPPORTED_OPS:
            errors.append(f"Unsupported filter operator '{op}' on '{field}'")
            continue
        if op == "in" and not isinstance(value, (list, tuple, set)):
            errors.append(f"Filter '{key}' expects a list")
            continue
        result.append(NormalizedFilter(field=field, op=op, value=list(value) if op == "in" else value))
    if errors:
        raise ValidationError(errors)
    return result


def full_selection(relations: dict[str, Any] | None = None) -> SelectionNode:
    """Selection with every stored field and the given relations resolved."""
    return SelectionNode(relations={name: SelectionNode() for name in (relations or {})})
