"""Delivery log: ids of work log entries already pushed to Jira.

The log is what makes repeated runs idempotent. An id goes in only after
Jira accepted the entry, and an id in the log is never pushed again.
"""

import json
import sqlite3
from pathlib import Path


class DeliveryLogError(Exception):
    """The delivery log store exists but cannot be read."""


class DeliveryLog:
    """Persisted set of delivered log ids."""

    def contains(self, log_id: str) -> bool:
        raise NotImplementedError

    def mark(self, log_id: str) -> None:
        raise NotImplementedError


class JsonFileDeliveryLog(DeliveryLog):
    """JSON object {log_id: true}, read and rewritten whole on every call.

    A missing or empty file means nothing was delivered yet.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DeliveryLogError(
                f"Delivery log {self.path} is not valid JSON (line {e.lineno}, column {e.colno}): {e.msg}"
            ) from e
        if data == []:
            return {}
        if not isinstance(data, dict):
            raise DeliveryLogError(f"Delivery log {self.path} must hold a JSON object, got {type(data).__name__}")
        return data

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def contains(self, log_id: str) -> bool:
        return bool(self._load().get(str(log_id)))

    def mark(self, log_id: str) -> None:
        data = self._load()
        data[str(log_id)] = True
        self._save(data)


class SqliteDeliveryLog(DeliveryLog):
    """Same set kept in a single SQLite table."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS delivered_logs ("
                " log_id TEXT PRIMARY KEY,"
                " delivered_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP)"
            )
            conn.commit()
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def contains(self, log_id: str) -> bool:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT 1 FROM delivered_logs WHERE log_id=? LIMIT 1", (str(log_id),)
            ).fetchone()
        finally:
            conn.close()
        return row is not None

    def mark(self, log_id: str) -> None:
        conn = self._connect()
        try:
            conn.execute("INSERT OR IGNORE INTO delivered_logs(log_id) VALUES (?)", (str(log_id),))
            conn.commit()
        finally:
            conn.close()


def open_delivery_log(path: str | Path) -> DeliveryLog:
    """Pick the backend from the file suffix: SQLite for .db/.sqlite, JSON otherwise."""
    if Path(path).suffix.lower() in (".db", ".sqlite", ".sqlite3"):
        return SqliteDeliveryLog(path)
    return JsonFileDeliveryLog(path)
