"""
Environment-driven settings.

Every setting is read lazily through a small function so tests can override
the environment with monkeypatch and see the change immediately.
"""

from __future__ import annotations

import os
import tempfile

DEFAULT_MAX_IMPORT_BYTES = 10 * 1024 * 1024  # 10 MiB
DEFAULT_EXPORT_CHUNK_BYTES = 64 * 1024
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://127.0.0.1:5173")


def env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_positive_int(name: str, default: int) -> int:
    value = env_int(name, default)
    return value if value > 0 else default


def max_import_bytes() -> int:
    return env_positive_int("MAX_IMPORT_BYTES", DEFAULT_MAX_IMPORT_BYTES)


def export_dir() -> str:
    return env_str("EXPORT_DIR", tempfile.gettempdir())


def export_chunk_bytes() -> int:
    return env_positive_int("EXPORT_CHUNK_BYTES", DEFAULT_EXPORT_CHUNK_BYTES)


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()


def log_format() -> str:
    return env_str("LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s %(message)s")
