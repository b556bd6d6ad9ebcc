# src/combatstats/queries/composer.py

"""Composes a template and per-request criteria into one bound statement."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

from sqlalchemy import Select, bindparam
from sqlalchemy.dialects import mssql
from sqlalchemy.engine import Dialect
from sqlalchemy.sql.elements import ColumnElement

from combatstats.queries.filters import Criteria
from combatstats.queries.templates import QueryTemplate
from combatstats.schemas.pagination import PageSpec, SortOrder, SortSpec

OFFSET_PARAM = "offset"
LIMIT_PARAM = "limit"

# OFFSET ... FETCH needs SQL Server 2012 (major version 11) or later
SQL_SERVER_VERSION = (16,)


def sql_server_dialect() -> Dialect:
    """An offline SQL Server dialect configured as a connected 2012+ server would be.

    A dialect that never connected does not know the server version and
    falls back to ROW_NUMBER() pagination.
    """
    dialect = mssql.dialect()
    dialect.server_version_info = SQL_SERVER_VERSION
    dialect._supports_offset_fetch = True
    return dialect


@dataclass(frozen=True, eq=False)
class BoundStatement:
    """A ready-to-execute statement and the values bound to it.

    Attributes:
        template: Name of the template the statement was built from
        statement: The composed SELECT; user values appear only as bind params
        params: Bound parameter name -> value
    """

    template: str
    statement: Select[Any]
    params: Mapping[str, Any]

    def render(self, dialect: Dialect | None = None) -> str:
        """SQL text with placeholders, compiled for SQL Server 2012+ by default."""
        return str(self.statement.compile(dialect=dialect or sql_server_dialect()))


def resolve_ordering(
    template: QueryTemplate, sort: SortSpec
) -> list[ColumnElement[Any]]:
    """Build the ORDER BY clauses for a template.

    Only expressions from the template's allow-list are used. An unknown key
    falls back to the template default key and default direction.
    """
    if sort.key is not None and sort.key in template.sort_keys:
        key, direction = sort.key, sort.direction
    else:
        key, direction = template.default_sort, template.default_direction

    primary = template.sort_keys[key]
    clauses = [primary.asc() if direction is SortOrder.ASC else primary.desc()]
    for tie_breaker in template.tie_breakers:
        if tie_breaker.key is not None and tie_breaker.key == key:
            continue
        clauses.append(tie_breaker.clause)
    return clauses


def compose(
    template: QueryTemplate,
    criteria: Criteria,
    sort: SortSpec,
    page: PageSpec,
) -> BoundStatement:
    """Append predicates, ordering and pagination to a template skeleton.

    One predicate is added per present criterion, in the template's filter
    order, combined with AND. Offset and limit are always bound parameters.
    """
    stmt = template.base
    params: dict[str, Any] = {}

    for spec in template.filters:
        if spec.name not in criteria:
            continue
        value = criteria[spec.name]
        stmt = stmt.where(spec.predicate(value))
        params[spec.name] = value

    stmt = stmt.order_by(*resolve_ordering(template, sort))

    stmt = stmt.offset(bindparam(OFFSET_PARAM, page.offset)).limit(
        bindparam(LIMIT_PARAM, page.limit)
    )
    params[OFFSET_PARAM] = page.offset
    params[LIMIT_PARAM] = page.limit

    return BoundStatement(
        template=template.name,
        statement=stmt,
        params=MappingProxyType(params),
    )
