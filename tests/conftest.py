"""Pytest configuration and shared fixtures.

Fixtures are organized by category:
- Fake storage: an in-memory stand-in for the two repository modules
- HTTP: an httpx client bound to the ASGI app (no lifespan, no DB pool)
- Data: CSV payload builders
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import asyncpg
import httpx
import pytest
import pytest_asyncio

from main import create_app
from resource_types import repository as type_repository
from resources import repository as resource_repository

# =============================================================================
# Fake storage
# =============================================================================


class FakeCatalog:
    """In-memory replacement for `resources.repository` and `resource_types.repository`.

    Mirrors the storage rules the SQL schema enforces: case-insensitive unique
    type names and ids handed out in insertion order. Listing ignores filters
    (filter SQL is covered by the compiler tests and the integration suite) and
    returns rows newest first, like the default ORDER BY.
    """

    def __init__(self) -> None:
        self.types: dict[int, dict[str, Any]] = {}
        self.resources: dict[int, dict[str, Any]] = {}
        self.failing_names: set[str] = set()
        self.list_calls: list[Any] = []
        self._next_type_id = 1
        self._next_resource_id = 1
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    # -- types ---------------------------------------------------------------

    async def list_types(self) -> list[dict[str, Any]]:
        return sorted((dict(t) for t in self.types.values()), key=lambda t: (t["name"], t["id"]))

    async def get_type_by_name(self, name: str) -> dict[str, Any] | None:
        for row in self.types.values():
            if row["name"].lower() == name.lower():
                return dict(row)
        return None

    async def insert_type(self, name: str) -> dict[str, Any]:
        if any(row["name"].lower() == name.lower() for row in self.types.values()):
            raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
        row = {"id": self._next_type_id, "name": name, "created_at": self._tick()}
        self.types[row["id"]] = row
        self._next_type_id += 1
        return dict(row)

    async def delete_type_detaching_resources(self, type_id: int) -> dict[str, Any] | None:
        existing = self.types.pop(type_id, None)
        if existing is None:
            return None
        detached = 0
        for row in self.resources.values():
            if row["type_id"] == type_id:
                row["type_id"] = None
                detached += 1
        return {"id": existing["id"], "name": existing["name"], "detached_resources": detached}

    # -- resources -----------------------------------------------------------

    def _view(self, row: dict[str, Any]) -> dict[str, Any]:
        type_row = self.types.get(row["type_id"]) if row["type_id"] is not None else None
        return {**row, "type_name": type_row["name"] if type_row else None}

    async def list_resources(self, resource_filter: Any = None) -> list[dict[str, Any]]:
        self.list_calls.append(resource_filter)
        rows = sorted(self.resources.values(), key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return [self._view(row) for row in rows]

    async def get_resource(self, resource_id: int) -> dict[str, Any] | None:
        row = self.resources.get(resource_id)
        return self._view(row) if row is not None else None

    async def insert_resource(self, **values: Any) -> dict[str, Any]:
        if values["name"] in self.failing_names:
            raise asyncpg.PostgresError("could not insert row")
        row = {"id": self._next_resource_id, **values, "created_at": self._tick()}
        self.resources[row["id"]] = row
        self._next_resource_id += 1
        return dict(row)

    async def update_resource(self, resource_id: int, **values: Any) -> dict[str, Any] | None:
        row = self.resources.get(resource_id)
        if row is None:
            return None
        row.update(values)
        return dict(row)

    async def delete_resource(self, resource_id: int) -> dict[str, Any] | None:
        row = self.resources.pop(resource_id, None)
        if row is None:
            return None
        return {"id": row["id"], "name": row["name"]}


@pytest.fixture
def catalog(monkeypatch: pytest.MonkeyPatch) -> FakeCatalog:
    """Patch both repository modules to use a fresh FakeCatalog."""
    fake = FakeCatalog()
    for name in ("list_types", "get_type_by_name", "insert_type", "delete_type_detaching_resources"):
        monkeypatch.setattr(type_repository, name, getattr(fake, name))
    for name in ("list_resources", "get_resource", "insert_resource", "update_resource", "delete_resource"):
        monkeypatch.setattr(resource_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def export_dir(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point EXPORT_DIR at an empty per-test directory."""
    path = tmp_path / "exports"
    monkeypatch.setenv("EXPORT_DIR", str(path))
    return path


# =============================================================================
# HTTP
# =============================================================================


@pytest_asyncio.fixture
async def client(catalog: FakeCatalog):
    """httpx client against the app, backed by the fake catalog."""
    app = create_app(use_lifespan=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


# =============================================================================
# Data
# =============================================================================

CSV_HEADER_LINE = "Name,Description,URL,Type,Internal,Date Created,Tags,Obsolete"


@pytest.fixture
def make_csv():
    """Build CSV upload bytes from data lines (header defaults to the export header)."""

    def _make(*lines: str, header: str = CSV_HEADER_LINE) -> bytes:
        return ("\r\n".join([header, *lines]) + "\r\n").encode("utf-8")

    return _make
