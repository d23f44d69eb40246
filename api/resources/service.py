"""
Resource business logic.

Listing goes through the filter compiler; single-record writes share one
validation path with the CSV importer (`prepare_payload`).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from core import db
from core.errors import NotFound, ValidationError

from . import repository, schemas
from .filters import ResourceFilter

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def split_tags(tags: str | None) -> list[str]:
    """
    Logical tag view: split on commas and trim. No de-duplication, no case folding.
    """
    return [tag.strip() for tag in (tags or "").split(",") if tag.strip()]


def prepare_payload(payload: schemas.ResourcePayload) -> dict[str, Any]:
    """
    Validate and normalize a write payload into repository keyword arguments.
    """
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("Resource name is required.")

    date_created = payload.date_created or _utc_now()
    if date_created.tzinfo is None:
        date_created = date_created.replace(tzinfo=timezone.utc)

    return {
        "name": name,
        "description": payload.description or "",
        "url": (payload.url or "").strip(),
        "type_id": payload.type_id,
        "internal": bool(payload.internal),
        "date_created": date_created,
        "tags": payload.tags or "",
        "obsolete": bool(payload.obsolete),
    }


async def list_resources(resource_filter: ResourceFilter | None = None) -> list[dict[str, Any]]:
    with db.storage_errors("resource_list"):
        return await repository.list_resources(resource_filter)


async def search_resources(params: Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    Entry point for loose input (query strings); raises InvalidFilter on a bad sort.
    """
    return await list_resources(ResourceFilter.from_params(params))


async def get_resource(resource_id: int) -> dict[str, Any]:
    with db.storage_errors("resource_get", resource_id=resource_id):
        row = await repository.get_resource(resource_id)
    if row is None:
        raise NotFound("Resource", resource_id)
    return row


async def create_resource(payload: schemas.ResourcePayload) -> dict[str, Any]:
    values = prepare_payload(payload)
    with db.storage_errors("resource_create", name=values["name"]):
        return await repository.insert_resource(**values)


async def update_resource(resource_id: int, payload: schemas.ResourcePayload) -> dict[str, Any]:
    values = prepare_payload(payload)
    with db.storage_errors("resource_update", resource_id=resource_id):
        row = await repository.update_resource(resource_id, **values)
    if row is None:
        raise NotFound("Resource", resource_id)
    return row


async def delete_resource(resource_id: int) -> dict[str, Any]:
    with db.storage_errors("resource_delete", resource_id=resource_id):
        row = await repository.delete_resource(resource_id)
    if row is None:
        raise NotFound("Resource", resource_id)
    logger.info("resource_deleted id=%s", resource_id)
    return row
