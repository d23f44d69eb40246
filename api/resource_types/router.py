"""
Type management API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from . import schemas, service

router = APIRouter()


@router.get("/types")
async def list_types() -> dict:
    types = await service.list_types()
    return {"types": types, "count": len(types)}


@router.post("/types", status_code=status.HTTP_201_CREATED)
async def create_type(request: schemas.CreateTypeRequest) -> dict:
    return await service.create_type(request.name)


@router.delete("/types/{type_id}")
async def delete_type(type_id: int) -> dict:
    """
    Delete a type. Resources that referenced it are kept with `type_id` cleared.
    """
    row = await service.delete_type(type_id)
    return {
        "ok": True,
        "type_id": row["id"],
        "name": row["name"],
        "detached_resources": row["detached_resources"],
    }
