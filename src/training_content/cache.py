from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from psycopg.types.json import Jsonb

from .db import get_conn
from .models import Collection


log = logging.getLogger("training_content.cache")


class ContentCache(Protocol):
    def write(self, key: str, value: Collection) -> None: ...


def serialize_collection(value: Collection) -> list[dict[str, Any]]:
    return [record.to_dict() for record in value]


class PostgresContentCache:
    def __init__(self, dsn: str):
        self.dsn = dsn

    def write(self, key: str, value: Collection) -> None:
        payload = serialize_collection(value)
        with get_conn(self.dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO content_cache (key, value, updated_at)
                    VALUES (%s, %s, NOW())
                    ON CONFLICT (key)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
                    """,
                    (key, Jsonb(payload)),
                )
        log.info("cached %s records under %s", len(payload), key)


class JsonFileCache:
    def __init__(self, directory: str):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def write(self, key: str, value: Collection) -> None:
        payload = serialize_collection(value)
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        log.info("cached %s records under %s (%s)", len(payload), key, path)
