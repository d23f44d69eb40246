"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)` with event-style messages,
e.g. `logger.info("import_complete imported=%s errors=%s", ...)`.
"""

from __future__ import annotations

import logging

from . import settings

_configured = False


def configure_logging() -> None:
    global _configured
    if _configured:
        return None

    level = logging.getLevelName(settings.log_level())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level, format=settings.log_format())
    _configured = True
