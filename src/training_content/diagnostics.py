from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Protocol

from psycopg.types.json import Jsonb

from .db import get_conn


log = logging.getLogger("training_content.diagnostics")

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class DiagnosticSink(Protocol):
    def capture(self, message: str, level: str, extra: Mapping[str, Any]) -> None: ...


def _render(extra: Mapping[str, Any]) -> str:
    return json.dumps(dict(extra), default=str, ensure_ascii=False, sort_keys=True)


class LoggingDiagnostics:
    def capture(self, message: str, level: str, extra: Mapping[str, Any]) -> None:
        try:
            log.log(LEVELS.get(level.lower(), logging.WARNING), "%s extra=%s", message, _render(extra))
        except Exception as exc:
            log.error("diagnostic capture failed: %s", exc)


class PostgresDiagnostics:
    def __init__(self, dsn: str):
        self.dsn = dsn

    def capture(self, message: str, level: str, extra: Mapping[str, Any]) -> None:
        try:
            payload = json.loads(_render(extra))
            with get_conn(self.dsn) as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO load_diagnostics (level, message, extra)
                        VALUES (%s, %s, %s)
                        """,
                        (level, message, Jsonb(payload)),
                    )
        except Exception as exc:
            log.warning("diagnostic write failed (%s): %s", message, exc)
