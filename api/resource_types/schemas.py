"""
Pydantic schemas for type endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CreateTypeRequest(BaseModel):
    name: str = Field(..., max_length=200)
