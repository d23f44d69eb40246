"""
Catalog error taxonomy.

Services raise these; `main.py` turns them into HTTP responses using
`status_code`. Import rows that fail with `ValidationError` or `StorageError`
are collected into the import summary instead of propagating.

CatalogError
├── ValidationError   422  single-entity write rejected (e.g. empty name)
├── DuplicateType     409  type name already taken (case-insensitive)
├── NotFound          404  no row for the given id
├── InvalidFilter     422  unknown sort field or sort order
├── ParseError        400  CSV upload is not decodable / structurally broken
├── PayloadTooLarge   413  upload exceeds MAX_IMPORT_BYTES
└── StorageError      500  database failure (detail kept generic)
"""

from __future__ import annotations


class CatalogError(RuntimeError):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> str:
        return self.message


class ValidationError(CatalogError):
    status_code = 422


class DuplicateType(CatalogError):
    status_code = 409

    def __init__(self, name: str) -> None:
        super().__init__(f"Type '{name}' already exists.")
        self.name = name


class NotFound(CatalogError):
    status_code = 404

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} not found.")
        self.entity = entity
        self.entity_id = entity_id


class InvalidFilter(CatalogError):
    status_code = 422


class ParseError(CatalogError):
    status_code = 400


class PayloadTooLarge(CatalogError):
    status_code = 413


class StorageError(CatalogError):
    status_code = 500

    @property
    def detail(self) -> str:
        # Don't leak SQL or driver messages to clients.
        return "Internal server error."
