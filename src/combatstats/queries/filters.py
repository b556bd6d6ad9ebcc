# src/combatstats/queries/filters.py

"""Turns raw query-string values into typed criteria, sort and page specs."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Any

from combatstats import config
from combatstats.exceptions import MissingRequiredFilterError
from combatstats.queries.templates import LIKE_ESCAPE, FilterKind, QueryTemplate
from combatstats.schemas.pagination import PageSpec, SortOrder, SortSpec

logger = logging.getLogger(__name__)

# LIKE metacharacters; "[" opens a character class on SQL Server
_LIKE_SPECIALS = (LIKE_ESCAPE, "%", "_", "[")

# Optional minus sign and ASCII digits only; rejects "+5", "1_000" and non-ASCII digits
_INTEGER_RE = re.compile(r"-?[0-9]+")

# Largest value a BIGINT column or bound OFFSET can hold
BIGINT_MAX = 2**63 - 1


class Criteria(Mapping[str, Any]):
    """Read-only mapping of the filters present in one request."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values = MappingProxyType(dict(values or {}))

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Criteria({dict(self._values)!r})"


@dataclass(frozen=True)
class ResolvedQuery:
    criteria: Criteria
    sort: SortSpec
    page: PageSpec


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so user text only matches literally."""
    for special in _LIKE_SPECIALS:
        value = value.replace(special, LIKE_ESCAPE + special)
    return value


def parse_int(raw: str | None) -> int | None:
    """Strict integer parsing; anything that is not an integer yields None."""
    if raw is None:
        return None
    raw = raw.strip()
    if not _INTEGER_RE.fullmatch(raw):
        return None
    try:
        return int(raw)
    except ValueError:
        # More digits than the interpreter converts
        return None


def parse_datetime(raw: str) -> datetime | None:
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError:
        return None


def _coerce(kind: FilterKind, raw: str) -> Any:
    if kind is FilterKind.INTEGER:
        value = parse_int(raw)
        # Out of range for the id columns; treated like any unparsable value
        if value is None or abs(value) > BIGINT_MAX:
            return None
        return value
    if kind is FilterKind.CONTAINS:
        return f"%{escape_like(raw)}%"
    if kind in (FilterKind.ON_OR_AFTER, FilterKind.ON_OR_BEFORE):
        return parse_datetime(raw)
    return raw


def _present(raw_params: Mapping[str, str | None], name: str) -> str | None:
    value = raw_params.get(name)
    if value is None or value == "":
        return None
    return value


def resolve_criteria(
    template: QueryTemplate, raw_params: Mapping[str, str | None]
) -> Criteria:
    """Collect the template's filters that are present in the request.

    Raises:
        MissingRequiredFilterError: A required filter is absent or empty.
    """
    values: dict[str, Any] = {}
    for spec in template.filters:
        raw = _present(raw_params, spec.name)
        if raw is None:
            if spec.required:
                raise MissingRequiredFilterError(spec.name, template.name)
            continue

        value = _coerce(spec.kind, raw)
        if value is None:
            # Unparsable numbers and dates are treated as "not filtered"
            logger.debug(
                "Ignoring unparsable filter value",
                extra={"template": template.name, "filter": spec.name},
            )
            continue
        values[spec.name] = value
    return Criteria(values)


def resolve_sort(
    template: QueryTemplate, raw_params: Mapping[str, str | None]
) -> SortSpec:
    """Match the requested sort key and direction.

    An omitted key means the template default key, still sorted in the
    requested direction. An unknown key resolves to None, which the composer
    replaces with the default key in the default direction.
    """
    if template.sort_param is None:
        return SortSpec(key=None, direction=template.default_direction)

    raw_key = _present(raw_params, template.sort_param)
    if raw_key is None:
        key: str | None = template.default_sort
    else:
        key = template.match_sort_key(raw_key)
    if key is None:
        logger.debug(
            "Unknown sort key, using template default",
            extra={"template": template.name, "sort_key": raw_key},
        )

    raw_direction = (
        _present(raw_params, template.direction_param)
        if template.direction_param
        else None
    )
    direction = (
        SortOrder.parse(raw_direction)
        if raw_direction is not None
        else template.default_direction
    )
    return SortSpec(key=key, direction=direction)


def resolve_page(
    template: QueryTemplate,
    raw_params: Mapping[str, str | None],
    max_size: int | None = None,
) -> PageSpec:
    """Parse page and size, clamping both to at least 1 and size to the cap.

    The page is also capped so the resulting offset still fits a BIGINT;
    such a page is simply empty.
    """
    max_size = max_size if max_size is not None else config.MAX_PAGE_SIZE

    page = parse_int(_present(raw_params, "page"))
    if page is None:
        page = 1

    size = None
    for name in template.size_params:
        size = parse_int(_present(raw_params, name))
        if size is not None:
            break
    if size is None:
        size = template.default_page_size

    size = min(max(size, 1), max_size)
    page = min(max(page, 1), BIGINT_MAX // size + 1)
    return PageSpec(page=page, size=size)


def resolve(
    template: QueryTemplate, raw_params: Mapping[str, str | None]
) -> ResolvedQuery:
    """Resolve everything a list request asks for. Pure, no I/O."""
    return ResolvedQuery(
        criteria=resolve_criteria(template, raw_params),
        sort=resolve_sort(template, raw_params),
        page=resolve_page(template, raw_params),
    )
