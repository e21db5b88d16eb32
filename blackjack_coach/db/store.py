from __future__ import annotations

import logging
import os
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import orjson
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

STATS_KEY = "blackjack_trainer_stats"

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
  key        TEXT PRIMARY KEY,
  value      TEXT NOT NULL,
  updated_at TEXT NOT NULL
)
"""


class StatsStore(Protocol):
    """Durable home of the stats record. The record is an opaque blob."""

    def load(self) -> Optional[Dict[str, Any]]: ...

    def save(self, record: Dict[str, Any]) -> None: ...


class MemoryStatsStore:
    """Keeps the record in memory; used by tests and throwaway sessions"""

    def __init__(self, record: Optional[Dict[str, Any]] = None):
        self._blob: Optional[bytes] = orjson.dumps(record) if record is not None else None
        self._lock = threading.Lock()
        self.saves = 0

    def load(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            if self._blob is None:
                return None
            return orjson.loads(self._blob)

    def save(self, record: Dict[str, Any]) -> None:
        with self._lock:
            self._blob = orjson.dumps(record)
            self.saves += 1


class SqliteStatsStore:
    """Key-value table in SQLite holding the record as one JSON document"""

    def __init__(self, db_path: str, key: str = STATS_KEY):
        self.db_path = db_path
        self.key = key
        if db_path == ":memory:":
            # One shared connection, or each thread would see its own empty database
            self.engine = create_engine(
                "sqlite://",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            parent = os.path.dirname(os.path.abspath(db_path))
            os.makedirs(parent, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{db_path}",
                connect_args={"check_same_thread": False},
            )
        self.Session = sessionmaker(bind=self.engine)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        with self.Session() as session:
            session.execute(text(SCHEMA))
            session.commit()

    def load(self) -> Optional[Dict[str, Any]]:
        with self.Session() as session:
            row = session.execute(
                text("SELECT value FROM kv WHERE key = :key"),
                {"key": self.key},
            ).fetchone()
        if row is None:
            return None
        try:
            record = orjson.loads(row.value)
        except orjson.JSONDecodeError:
            logging.getLogger(__name__).error("Stored stats for %s are not valid JSON; starting fresh", self.key)
            return None
        if not isinstance(record, dict):
            logging.getLogger(__name__).error("Stored stats for %s are not an object; starting fresh", self.key)
            return None
        return record

    def save(self, record: Dict[str, Any]) -> None:
        with self.Session() as session:
            session.execute(
                text("INSERT OR REPLACE INTO kv(key, value, updated_at) VALUES (:key, :value, :updated_at)"),
                {
                    "key": self.key,
                    "value": orjson.dumps(record).decode("utf-8"),
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
            )
            session.commit()

    def close(self) -> None:
        self.engine.dispose()
