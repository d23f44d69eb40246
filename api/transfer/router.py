"""
FastAPI router for CSV import/export.
"""

from __future__ import annotations

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import StreamingResponse

from . import service

router = APIRouter()

EXPORT_FILENAME = "resources.csv"


@router.get("/transfer/export")
async def export_csv() -> StreamingResponse:
    """
    Download the whole catalog as CSV (same columns the importer reads).
    """
    body = await service.open_export_stream()
    return StreamingResponse(
        body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )


@router.post("/transfer/import")
async def import_csv(file: UploadFile = File(...)) -> dict:
    """
    Import resources from an uploaded CSV.

    Always answers with a summary when the file itself is readable: rows that
    fail are listed in `error_details` and do not undo the rows that succeeded.
    """
    summary = await service.import_upload(file)
    return summary.as_dict()
