"""
Type persistence (raw SQL).
"""

from __future__ import annotations

from typing import Any

from core import db


async def list_types() -> list[dict[str, Any]]:
    return await db.fetch_all(
        """
        SELECT id, name, created_at
        FROM types
        ORDER BY name ASC, id ASC
        """
    )


async def get_type_by_name(name: str) -> dict[str, Any] | None:
    return await db.fetch_one(
        """
        SELECT id, name, created_at
        FROM types
        WHERE lower(name) = lower($1)
        LIMIT 1
        """,
        name,
    )


async def insert_type(name: str) -> dict[str, Any]:
    row = await db.fetch_one(
        """
        INSERT INTO types (name)
        VALUES ($1)
        RETURNING id, name, created_at
        """,
        name,
    )
    if row is None:
        raise RuntimeError("Failed to insert type.")
    return row


async def delete_type_detaching_resources(type_id: int) -> dict[str, Any] | None:
    """
    Clear `type_id` on referencing resources and delete the type, atomically.

    Returns the deleted type plus `detached_resources`, or None when the type
    does not exist (nothing is changed in that case).
    """
    async with db.transaction() as conn:
        existing = await conn.fetchrow(
            "SELECT id, name FROM types WHERE id = $1 FOR UPDATE",
            type_id,
        )
        if existing is None:
            return None

        detached = await conn.fetchval(
            """
            WITH cleared AS (
              UPDATE resources
              SET type_id = NULL
              WHERE type_id = $1
              RETURNING id
            )
            SELECT count(*) FROM cleared
            """,
            type_id,
        )
        await conn.execute("DELETE FROM types WHERE id = $1", type_id)

    return {
        "id": int(existing["id"]),
        "name": str(existing["name"]),
        "detached_resources": int(detached or 0),
    }
