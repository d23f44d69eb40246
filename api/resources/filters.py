"""
Filter compiler for resource listings.

Turns a loosely-typed filter request (query-string values, JSON bodies) into
`(sql, args)` for asyncpg:

- every value (type id, booleans, substrings) is bound as `$n`
- the ORDER BY column comes from the closed `SortField` enum; caller text is
  only used to *look up* a member, never placed into the query
- an unknown sort field or sort order raises `InvalidFilter`
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from core.errors import InvalidFilter


class SortField(str, Enum):
    ID = "id"
    NAME = "name"
    DESCRIPTION = "description"
    URL = "url"
    TYPE_ID = "type_id"
    TYPE_NAME = "type_name"
    INTERNAL = "internal"
    DATE_CREATED = "date_created"
    TAGS = "tags"
    OBSOLETE = "obsolete"
    CREATED_AT = "created_at"

    @property
    def column(self) -> str:
        return _SORT_COLUMNS[self]


_SORT_COLUMNS: dict[SortField, str] = {
    SortField.ID: "r.id",
    SortField.NAME: "r.name",
    SortField.DESCRIPTION: "r.description",
    SortField.URL: "r.url",
    SortField.TYPE_ID: "r.type_id",
    SortField.TYPE_NAME: "t.name",
    SortField.INTERNAL: "r.internal",
    SortField.DATE_CREATED: "r.date_created",
    SortField.TAGS: "r.tags",
    SortField.OBSOLETE: "r.obsolete",
    SortField.CREATED_AT: "r.created_at",
}


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


DEFAULT_SORT_FIELD = SortField.CREATED_AT
DEFAULT_SORT_ORDER = SortOrder.DESC

SELECT_RESOURCES = """
SELECT
  r.id,
  r.name,
  r.description,
  r.url,
  r.type_id,
  r.internal,
  r.date_created,
  r.tags,
  r.obsolete,
  r.created_at,
  t.name AS type_name
FROM resources r
LEFT JOIN types t ON t.id = r.type_id
""".strip()


@dataclass(frozen=True)
class ResourceFilter:
    type_id: int | None = None
    internal: bool | None = None
    obsolete: bool | None = None
    tags: str | None = None
    search: str | None = None
    sort_by: SortField = DEFAULT_SORT_FIELD
    sort_order: SortOrder = DEFAULT_SORT_ORDER

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ResourceFilter":
        """
        Build a filter from loose input.

        Accepts both `sortBy`/`sortOrder` (what the web client sends) and
        `sort_by`/`sort_order`. Empty strings and None mean "not supplied".
        """
        sort_by = _first_present(params, "sortBy", "sort_by")
        sort_order = _first_present(params, "sortOrder", "sort_order")
        return cls(
            type_id=parse_type_id(params.get("type_id")),
            internal=parse_flag(params.get("internal")),
            obsolete=parse_flag(params.get("obsolete")),
            tags=_clean_text(params.get("tags")),
            search=_clean_text(params.get("search")),
            sort_by=parse_sort_field(sort_by),
            sort_order=parse_sort_order(sort_order),
        )


def _first_present(params: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = params.get(key)
        if value is not None and value != "":
            return value
    return None


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_type_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidFilter(f"type_id must be an integer, got {raw!r}.") from exc


def parse_flag(value: Any) -> bool | None:
    """
    Only an explicit true/false constrains the listing; anything else is absent.
    """
    if isinstance(value, bool):
        return value
    raw = str(value).strip().lower() if value is not None else ""
    if raw == "true":
        return True
    if raw == "false":
        return False
    return None


def parse_sort_field(value: Any) -> SortField:
    if value is None or value == "":
        return DEFAULT_SORT_FIELD
    if isinstance(value, SortField):
        return value
    try:
        return SortField(str(value).strip())
    except ValueError as exc:
        allowed = ", ".join(f.value for f in SortField)
        raise InvalidFilter(f"Unknown sort field. Allowed: {allowed}.") from exc


def parse_sort_order(value: Any) -> SortOrder:
    if value is None or value == "":
        return DEFAULT_SORT_ORDER
    if isinstance(value, SortOrder):
        return value
    try:
        return SortOrder(str(value).strip().upper())
    except ValueError as exc:
        raise InvalidFilter("sortOrder must be ASC or DESC.") from exc


def like_pattern(text: str) -> str:
    """
    Wrap `text` for a substring ILIKE, escaping LIKE wildcards so they match literally.
    """
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def build_where(resource_filter: ResourceFilter) -> tuple[list[str], list[Any]]:
    """
    Returns (clauses, args). Clauses reference args by position ($1..$n).
    """
    clauses: list[str] = []
    args: list[Any] = []

    def bind(value: Any) -> str:
        args.append(value)
        return f"${len(args)}"

    if resource_filter.type_id is not None:
        clauses.append(f"r.type_id = {bind(resource_filter.type_id)}")

    if resource_filter.internal is not None:
        clauses.append(f"r.internal = {bind(resource_filter.internal)}")

    if resource_filter.obsolete is not None:
        clauses.append(f"r.obsolete = {bind(resource_filter.obsolete)}")

    if resource_filter.tags:
        clauses.append(f"r.tags ILIKE {bind(like_pattern(resource_filter.tags))}")

    if resource_filter.search:
        placeholder = bind(like_pattern(resource_filter.search))
        clauses.append(f"(r.name ILIKE {placeholder} OR r.description ILIKE {placeholder})")

    return clauses, args


def order_by(resource_filter: ResourceFilter) -> str:
    # Both parts come from enums; re-validate in case a caller built the
    # dataclass directly with a plain string.
    field = parse_sort_field(resource_filter.sort_by)
    direction = parse_sort_order(resource_filter.sort_order).value
    return f"ORDER BY {field.column} {direction}, r.id {direction}"


def compile_listing_query(resource_filter: ResourceFilter | None = None) -> tuple[str, list[Any]]:
    resource_filter = resource_filter or ResourceFilter()
    clauses, args = build_where(resource_filter)

    parts = [SELECT_RESOURCES]
    if clauses:
        parts.append("WHERE " + "\n  AND ".join(clauses))
    parts.append(order_by(resource_filter))
    return "\n".join(parts), args
