"""
phonescan/store/sqlite_store.py
SQLite-backed document store. One database file per device namespace.

SCHEMA DESIGN NOTES:
- A single `records` table holds every kind; `doc` is the JSON document
- Documents are schemaless: unknown fields round-trip unchanged
- created_at is the ISO timestamp of the insert batch
- Each operation opens and closes its own connection
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from phonescan.exceptions import StoreError
from phonescan.models.record import RecordKind
from phonescan.store.base import Document, Predicate, RecordStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = '1.0'


class SQLiteStore(RecordStore):

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @classmethod
    def for_device(cls, data_dir: Path, identifier: str) -> 'SQLiteStore':
        """Store for one device namespace: <data_dir>/<identifier>.db"""
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        return cls(data_dir / f"{identifier}.db")

    # ── INTERNAL ─────────────────────────────────────────────

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            _create_schema(conn)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    # ── OPERATIONS ───────────────────────────────────────────

    def insert_all(self, kind: RecordKind, documents: Iterable[Document]) -> int:
        now  = datetime.now().isoformat()
        rows = [(RecordKind(kind).value, json.dumps(doc), now) for doc in documents]
        if not rows:
            return 0
        try:
            conn = self._connect()
            try:
                conn.executemany(
                    "INSERT INTO records (kind, doc, created_at) VALUES (?,?,?)", rows
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Insert into {kind} failed: {e}")
            raise StoreError(f"insert_all({RecordKind(kind).value}) failed: {e}") from e
        logger.debug(f"Wrote {len(rows)} {RecordKind(kind).value} rows")
        return len(rows)

    def delete_all(self, kind: RecordKind) -> int:
        try:
            conn = self._connect()
            try:
                cur = conn.execute("DELETE FROM records WHERE kind = ?", (RecordKind(kind).value,))
                conn.commit()
                removed = cur.rowcount
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Delete from {kind} failed: {e}")
            raise StoreError(f"delete_all({RecordKind(kind).value}) failed: {e}") from e
        logger.debug(f"Deleted {removed} {RecordKind(kind).value} rows")
        return removed

    def find_by(self, kind: RecordKind, predicate: Optional[Predicate] = None) -> List[Document]:
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT doc FROM records WHERE kind = ? ORDER BY id",
                    (RecordKind(kind).value,),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Query on {kind} failed: {e}")
            raise StoreError(f"find_by({RecordKind(kind).value}) failed: {e}") from e

        docs = [json.loads(r[0]) for r in rows]
        if predicate is None:
            return docs
        return [d for d in docs if predicate(d)]


# ── SCHEMA ───────────────────────────────────────────────────

def _create_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(f"""
        CREATE TABLE IF NOT EXISTS records (
            id          INTEGER PRIMARY KEY AUTOINCREMENT,
            kind        TEXT    NOT NULL,
            doc         TEXT    NOT NULL,   -- JSON object
            created_at  TEXT    NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_records_kind ON records(kind);

        CREATE TABLE IF NOT EXISTS store_meta (
            key     TEXT PRIMARY KEY,
            value   TEXT
        );
        INSERT OR IGNORE INTO store_meta (key, value)
            VALUES ('schema_version', '{SCHEMA_VERSION}');
    """)
