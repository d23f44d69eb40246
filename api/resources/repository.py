"""
Resource persistence (raw SQL).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from core import db

from .filters import SELECT_RESOURCES, ResourceFilter, compile_listing_query

_RETURNING = """
RETURNING id, name, description, url, type_id, internal, date_created, tags, obsolete, created_at
""".strip()


async def list_resources(resource_filter: ResourceFilter | None = None) -> list[dict[str, Any]]:
    sql, args = compile_listing_query(resource_filter)
    return await db.fetch_all(sql, *args)


async def get_resource(resource_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        SELECT_RESOURCES + "\nWHERE r.id = $1",
        resource_id,
    )


async def insert_resource(
    *,
    name: str,
    description: str,
    url: str,
    type_id: int | None,
    internal: bool,
    date_created: datetime,
    tags: str,
    obsolete: bool,
) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO resources (name, description, url, type_id, internal, date_created, tags, obsolete)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
        {_RETURNING}
        """,
        name,
        description,
        url,
        type_id,
        internal,
        date_created,
        tags,
        obsolete,
    )
    if row is None:
        raise RuntimeError("Failed to insert resource.")
    return row


async def update_resource(
    resource_id: int,
    *,
    name: str,
    description: str,
    url: str,
    type_id: int | None,
    internal: bool,
    date_created: datetime,
    tags: str,
    obsolete: bool,
) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE resources
        SET name = $1,
            description = $2,
            url = $3,
            type_id = $4,
            internal = $5,
            date_created = $6,
            tags = $7,
            obsolete = $8
        WHERE id = $9
        {_RETURNING}
        """,
        name,
        description,
        url,
        type_id,
        internal,
        date_created,
        tags,
        obsolete,
        resource_id,
    )


async def delete_resource(resource_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        DELETE FROM resources
        WHERE id = $1
        RETURNING id, name
        """,
        resource_id,
    )

