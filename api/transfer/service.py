"""
Bulk transfer: CSV import and export.

Import flow:
1) Read the upload (size-limited), always closing it afterwards
2) Parse the whole CSV into rows (structural errors -> ParseError)
3) Build the type name -> id lookup once
4) Create each row as its own write; a failing row is recorded, never fatal
5) Return the aggregated summary

Export flow:
1) Load the full listing (no filter)
2) Spool it to a temporary CSV file under EXPORT_DIR
3) Stream the file out; the file is removed on every exit path
"""

from __future__ import annotations

import io
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from core import settings
from core.errors import PayloadTooLarge, StorageError, ValidationError
from resource_types import service as type_service
from resources import service as resource_service

from . import csv_codec

ALLOWED_EXTENSIONS = {".csv"}

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowError:
    row: int
    raw: dict[str, str]
    message: str


@dataclass
class ImportSummary:
    imported_ids: list[int] = field(default_factory=list)
    error_details: list[RowError] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.imported_ids)

    @property
    def error_count(self) -> int:
        return len(self.error_details)

    def as_dict(self) -> dict[str, Any]:
        return {
            "message": f"Successfully imported {self.imported_count} resources",
            "imported_count": self.imported_count,
            "error_count": self.error_count,
            "imported_ids": list(self.imported_ids),
            "error_details": [
                {"row": err.row, "raw": err.raw, "message": err.message}
                for err in self.error_details
            ],
        }


def validate_upload(file: UploadFile) -> str:
    """
    Return the normalized file extension if this upload is acceptable.
    """
    if not file.filename:
        raise ValidationError("Missing filename.")

    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"Unsupported file type '{ext}'. Allowed: {sorted(ALLOWED_EXTENSIONS)}")
    return ext


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise PayloadTooLarge(f"File too large. Max is {max_bytes} bytes.")

    return bytes(buf)


async def import_upload(file: UploadFile) -> ImportSummary:
    """
    HTTP entry point: validate, read and import an uploaded CSV.

    The upload's temporary file is closed whether the import succeeds,
    fails row-by-row, or fails as a whole.
    """
    try:
        validate_upload(file)
        data = await read_upload_bytes(file, max_bytes=settings.max_import_bytes())
        return await import_resources(data)
    finally:
        await file.close()


async def import_resources(data: bytes) -> ImportSummary:
    rows = csv_codec.parse_csv(data)
    type_lookup = await type_service.build_type_lookup()

    summary = ImportSummary()
    # Strictly sequential: each row is awaited before the next one starts,
    # which keeps error_details in file order.
    for row_number, raw in enumerate(rows, start=1):
        try:
            payload = csv_codec.row_to_payload(raw, type_lookup)
            created = await resource_service.create_resource(payload)
        except (ValidationError, StorageError) as exc:
            logger.warning("import_row_failed row=%s error=%s", row_number, exc.message)
            summary.error_details.append(RowError(row=row_number, raw=raw, message=exc.detail))
            continue
        summary.imported_ids.append(int(created["id"]))

    logger.info(
        "import_complete rows=%s imported=%s errors=%s",
        len(rows),
        summary.imported_count,
        summary.error_count,
    )
    return summary


async def export_resources() -> bytes:
    """
    Whole catalog as CSV bytes, built in memory.
    """
    rows = await resource_service.list_resources()
    with io.StringIO(newline="") as buffer:
        csv_codec.write_csv(rows, buffer)
        return buffer.getvalue().encode("utf-8")


def _remove_file(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass


def _write_spool(fd: int, rows: list[dict[str, Any]]) -> int:
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
        return csv_codec.write_csv(rows, handle)


@asynccontextmanager
async def spooled_export() -> AsyncIterator[Path]:
    """
    Write the full listing to a temporary CSV file and yield its path.

    The file is deleted when the block exits, including on errors raised while
    writing it or while the caller is still reading it.
    """
    rows = await resource_service.list_resources()

    export_dir = Path(settings.export_dir())
    export_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix="resources-", suffix=".csv", dir=export_dir)
    path = Path(name)
    try:
        # Blocking file I/O stays off the event loop.
        count = await run_in_threadpool(_write_spool, fd, rows)
        logger.info("export_spooled rows=%s path=%s", count, path)
        yield path
    finally:
        _remove_file(path)


async def stream_export(chunk_size: int | None = None) -> AsyncIterator[bytes]:
    """
    Yield the export file in chunks. Closing the generator early still removes the file.
    """
    size = chunk_size or settings.export_chunk_bytes()
    async with spooled_export() as path:
        handle = await run_in_threadpool(path.open, "rb")
        try:
            while True:
                chunk = await run_in_threadpool(handle.read, size)
                if not chunk:
                    break
                yield chunk
        finally:
            handle.close()


async def open_export_stream() -> AsyncIterator[bytes]:
    """
    Start the export eagerly so listing/spooling errors surface before any
    response bytes are sent, then hand back an iterator over the rest.
    """
    chunks = stream_export()
    try:
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = b""

    async def _iterate() -> AsyncIterator[bytes]:
        try:
            if first:
                yield first
            async for chunk in chunks:
                yield chunk
        finally:
            await chunks.aclose()

    return _iterate()
