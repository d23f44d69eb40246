"""
Type management and name resolution.

`build_type_lookup` is what the CSV importer uses to turn a human-readable
`Type` column into a `type_id`.
"""

from __future__ import annotations

import logging
from typing import Any

import asyncpg

from core import db
from core.errors import DuplicateType, NotFound, ValidationError

from . import repository

logger = logging.getLogger(__name__)


def normalize_type_name(name: str | None) -> str:
    return (name or "").strip()


async def list_types() -> list[dict[str, Any]]:
    with db.storage_errors("type_list"):
        return await repository.list_types()


async def create_type(name: str) -> dict[str, Any]:
    name = normalize_type_name(name)
    if not name:
        raise ValidationError("Type name is required.")

    with db.storage_errors("type_create", name=name):
        existing = await repository.get_type_by_name(name)
        if existing is not None:
            raise DuplicateType(name)
        try:
            row = await repository.insert_type(name)
        except asyncpg.UniqueViolationError as exc:
            # Lost a race against a concurrent insert of the same name.
            raise DuplicateType(name) from exc

    logger.info("type_created id=%s name=%s", row["id"], row["name"])
    return row


async def delete_type(type_id: int) -> dict[str, Any]:
    with db.storage_errors("type_delete", type_id=type_id):
        row = await repository.delete_type_detaching_resources(type_id)
    if row is None:
        raise NotFound("Type", type_id)

    logger.info(
        "type_deleted id=%s name=%s detached_resources=%s",
        row["id"],
        row["name"],
        row["detached_resources"],
    )
    return row


async def build_type_lookup() -> dict[str, int]:
    """
    Map lowercased type name -> id. Pure read.
    """
    with db.storage_errors("type_lookup"):
        rows = await repository.list_types()

    lookup: dict[str, int] = {}
    for row in rows:
        key = normalize_type_name(row.get("name")).lower()
        if key and key not in lookup:
            lookup[key] = int(row["id"])
    return lookup


def resolve_type_id(lookup: dict[str, int], raw_name: str | None) -> int | None:
    key = normalize_type_name(raw_name).lower()
    if not key:
        return None
    return lookup.get(key)
