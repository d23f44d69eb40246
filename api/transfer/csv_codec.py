"""
CSV shape shared by import and export.

Export header (fixed order):
    Name, Description, URL, Type, Internal, Date Created, Tags, Obsolete

Import is header-driven: columns are matched by name (after trimming
whitespace), extra columns are ignored and missing ones fall back to defaults.
"""

from __future__ import annotations

import csv
import io
import re
from datetime import datetime, timezone
from typing import Any, Iterable, TextIO

from pydantic import ValidationError as PydanticValidationError

from core import settings
from core.errors import ParseError, ValidationError
from resource_types.service import resolve_type_id
from resources.schemas import ResourcePayload

# (row key, CSV header)
CSV_COLUMNS: tuple[tuple[str, str], ...] = (
    ("name", "Name"),
    ("description", "Description"),
    ("url", "URL"),
    ("type_name", "Type"),
    ("internal", "Internal"),
    ("date_created", "Date Created"),
    ("tags", "Tags"),
    ("obsolete", "Obsolete"),
)
CSV_HEADER: tuple[str, ...] = tuple(header for _key, header in CSV_COLUMNS)

TRUE_LITERALS = frozenset({"true", "1"})

_FALLBACK_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y",
    "%Y/%m/%d",
    # Date.toString() as written by older exports, minus the "(Zone Name)" suffix.
    "%a %b %d %Y %H:%M:%S GMT%z",
)
_ZONE_NAME_SUFFIX = re.compile(r"\s*\([^)]*\)\s*$")


def decode_csv_bytes(data: bytes) -> str:
    try:
        # utf-8-sig drops the BOM spreadsheet tools like to prepend.
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError("CSV file is not valid UTF-8.") from exc


def parse_csv(data: bytes) -> list[dict[str, str]]:
    """
    Parse the whole upload into header-mapped rows, in file order.

    Raises ParseError on structural problems (bad quoting, bad encoding).
    Empty lines are skipped; a line of empty cells (",,,") is a data row.
    """
    text = decode_csv_bytes(data)
    # Cells are bounded by the upload cap, not by the csv module's 128 KiB default.
    csv.field_size_limit(max(csv.field_size_limit(), settings.max_import_bytes()))
    reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)

    rows: list[dict[str, str]] = []
    try:
        if reader.fieldnames is None:
            return rows
        reader.fieldnames = [(name or "").strip() for name in reader.fieldnames]

        for record in reader:
            # Extra cells land under the None key; missing cells come back as None.
            rows.append({key: (value or "") for key, value in record.items() if key is not None})
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV near line {reader.line_num}: {exc}") from exc

    return rows


def parse_flag(value: str | None) -> bool:
    return (value or "").strip() in TRUE_LITERALS


def parse_date(value: str | None) -> datetime | None:
    """
    Best-effort timestamp parsing. Naive values are taken as UTC; None when unparseable.
    """
    raw = (value or "").strip()
    if not raw:
        return None

    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        candidate = _ZONE_NAME_SUFFIX.sub("", raw)
        for fmt in _FALLBACK_DATE_FORMATS:
            try:
                parsed = datetime.strptime(candidate, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def row_to_payload(row: dict[str, str], type_lookup: dict[str, int]) -> ResourcePayload:
    """
    Build a write payload from one CSV row.

    `date_created` is left as None when missing or unparseable; the resource
    service stamps "now" in that case.
    """
    try:
        return ResourcePayload(
            name=row.get("Name") or "",
            description=row.get("Description") or "",
            url=row.get("URL") or "",
            type_id=resolve_type_id(type_lookup, row.get("Type")),
            internal=parse_flag(row.get("Internal")),
            date_created=parse_date(row.get("Date Created")),
            tags=row.get("Tags") or "",
            obsolete=parse_flag(row.get("Obsolete")),
        )
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError(problems) from exc


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def write_csv(rows: Iterable[dict[str, Any]], handle: TextIO) -> int:
    """
    Write the header plus one line per row to `handle`. Returns the row count.
    """
    writer = csv.writer(handle, lineterminator="\r\n")
    writer.writerow(CSV_HEADER)
    count = 0
    for row in rows:
        writer.writerow([format_cell(row.get(key)) for key, _header in CSV_COLUMNS])
        count += 1
    return count
