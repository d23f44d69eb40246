"""
Resource API endpoints (listing/search and single-record CRUD).
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from . import schemas, service

router = APIRouter()


@router.get("/resources", response_model=list[schemas.ResourceView])
async def list_resources(
    type_id: str | None = Query(default=None),
    internal: str | None = Query(default=None),
    obsolete: str | None = Query(default=None),
    tags: str | None = Query(default=None, max_length=500),
    search: str | None = Query(default=None, max_length=500),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str | None = Query(default=None, alias="sortOrder"),
) -> list[dict]:
    """
    List resources joined with their type name.

    Absent filters impose no constraint. `internal`/`obsolete` only filter on
    an explicit `true` or `false`. Unknown `sortBy`/`sortOrder` values get a 422.
    """
    return await service.search_resources(
        {
            "type_id": type_id,
            "internal": internal,
            "obsolete": obsolete,
            "tags": tags,
            "search": search,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
    )


@router.get("/resources/{resource_id}", response_model=schemas.ResourceView)
async def get_resource(resource_id: int) -> dict:
    return await service.get_resource(resource_id)


@router.post("/resources", status_code=status.HTTP_201_CREATED)
async def create_resource(request: schemas.ResourcePayload) -> dict:
    return await service.create_resource(request)


@router.put("/resources/{resource_id}")
async def update_resource(resource_id: int, request: schemas.ResourcePayload) -> dict:
    return await service.update_resource(resource_id, request)


@router.delete("/resources/{resource_id}")
async def delete_resource(resource_id: int) -> dict:
    row = await service.delete_resource(resource_id)
    return {"ok": True, "resource_id": int(row["id"])}
