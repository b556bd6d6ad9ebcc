# src/combatstats/queries/templates.py

"""Building blocks for the fixed, named query templates.

A template is the immutable half of a list query: the projection and join
graph, the filters it understands, and the whitelist of sortable
expressions. Everything a request may change is bound as a parameter by
``combatstats.queries.composer``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from sqlalchemy import Float, Select, bindparam, case, cast, func
from sqlalchemy.sql.elements import ColumnElement

from combatstats.schemas.pagination import SortOrder

# Escape character declared on every LIKE predicate built from user input
LIKE_ESCAPE = "\\"


class FilterKind(str, Enum):
    """How a filter value is coerced and compared."""

    EQUALS = "equals"
    INTEGER = "integer"
    CONTAINS = "contains"
    ON_OR_AFTER = "on_or_after"
    ON_OR_BEFORE = "on_or_before"


@dataclass(frozen=True, eq=False)
class FilterSpec:
    """A query-string filter and the column it constrains.

    Attributes:
        name: Query parameter name, also used as the bound parameter name
        column: Physical expression the predicate compares against
        kind: Coercion and comparison rule
        required: Whether the resource refuses to run without it
    """

    name: str
    column: ColumnElement[Any]
    kind: FilterKind = FilterKind.EQUALS
    required: bool = False

    def predicate(self, value: Any) -> ColumnElement[bool]:
        """Build ``column OP :name`` with ``value`` bound, never inlined."""
        param = bindparam(self.name, value)
        if self.kind is FilterKind.CONTAINS:
            return self.column.like(param, escape=LIKE_ESCAPE)
        if self.kind is FilterKind.ON_OR_AFTER:
            return self.column >= param
        if self.kind is FilterKind.ON_OR_BEFORE:
            return self.column <= param
        return self.column == param


@dataclass(frozen=True, eq=False)
class TieBreaker:
    """A secondary ordering clause.

    ``key`` names the allow-list entry the clause duplicates; the clause is
    skipped when that key is already the primary sort. Clauses with no key
    (uniqueness columns) are always appended.
    """

    clause: ColumnElement[Any]
    key: str | None = None


@dataclass(frozen=True, eq=False)
class QueryTemplate:
    """Immutable definition of one list resource."""

    name: str
    base: Select[Any]
    sort_keys: Mapping[str, ColumnElement[Any]]
    default_sort: str
    default_direction: SortOrder = SortOrder.DESC
    filters: tuple[FilterSpec, ...] = ()
    tie_breakers: tuple[TieBreaker, ...] = ()
    sort_param: str | None = None
    direction_param: str | None = None
    size_params: tuple[str, ...] = ("size",)
    default_page_size: int = 20
    description: str = ""

    def __post_init__(self) -> None:
        if self.default_sort not in self.sort_keys:
            raise ValueError(
                f"Template '{self.name}' default sort '{self.default_sort}' "
                "is not in its sort allow-list"
            )
        names = [spec.name for spec in self.filters]
        if len(names) != len(set(names)):
            raise ValueError(f"Template '{self.name}' has duplicate filter names")
        # Freeze the allow-list so it cannot be mutated after startup
        object.__setattr__(self, "sort_keys", MappingProxyType(dict(self.sort_keys)))

    def match_sort_key(self, raw: str | None) -> str | None:
        """Resolve a public sort key against the allow-list.

        Exact matches win; otherwise a case-insensitive match is accepted.
        Returns None when the key is unknown.
        """
        if not raw:
            return None
        if raw in self.sort_keys:
            return raw
        folded = raw.casefold()
        for key in self.sort_keys:
            if key.casefold() == folded:
                return key
        return None


# =============================================================================
# Computed columns
# =============================================================================


def win_rate(wins: ColumnElement[Any], losses: ColumnElement[Any]) -> ColumnElement[float]:
    """Percentage of wins; 0 when no games were decided."""
    total = wins + losses
    return case(
        (total > 0, cast(wins, Float) / total * 100),
        else_=0.0,
    )


def kill_death_ratio(
    kills: ColumnElement[Any], deaths: ColumnElement[Any]
) -> ColumnElement[float]:
    """Kills per death; the raw kill count when the player never died."""
    return case(
        (deaths == 0, cast(kills, Float)),
        else_=cast(kills, Float) / deaths,
    )


def headshot_rate(
    headshots: ColumnElement[Any], kills: ColumnElement[Any]
) -> ColumnElement[float]:
    """Percentage of kills that were headshots; 0 without kills."""
    return case(
        (kills != 0, cast(func.coalesce(headshots, 0), Float) / kills * 100),
        else_=0.0,
    )
