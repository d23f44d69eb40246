"""
Pydantic schemas for resource endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ResourcePayload(BaseModel):
    """
    Body for create/update. `name` emptiness is checked by the service so the
    same rule applies to HTTP writes and CSV imports.
    """

    name: str = Field(default="", max_length=500)
    description: str | None = None
    url: str | None = Field(default=None, max_length=2048)
    type_id: int | None = None
    internal: bool = False
    date_created: datetime | None = None
    tags: str | None = None
    obsolete: bool = False


class ResourceView(BaseModel):
    id: int
    name: str
    description: str
    url: str
    type_id: int | None
    type_name: str | None = None
    internal: bool
    date_created: datetime
    tags: str
    obsolete: bool
    created_at: datetime
