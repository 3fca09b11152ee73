"""
Persistent Store Module for DFA Simulator
Uses SQLite to keep saved DFA records per user.
"""

import json
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .errors import DFANotFoundError, DFAOwnershipError
from .identity import UserIdentity
from .records import DFARecord

log = structlog.get_logger()


class StoredDFA(BaseModel):
    """A saved record plus the metadata the store attaches to it."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    created_at: float = Field(alias="createdAt")
    updated_at: float = Field(alias="updatedAt")
    record: DFARecord

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            **self.record.to_record(),
        }


class DFAStore:
    """
    Document store for saved DFAs.
    Each operation opens its own connection, so one instance can be shared.
    """

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_path = str(Path(__file__).parent.parent / ".data" / "dfas.db")

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._connect()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS dfas (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    created_by TEXT,
                    name TEXT NOT NULL,
                    record TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
            """)

            # Listing is always per owner
            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_dfas_user ON dfas(user_id, created_at)
            """)

            conn.commit()
        finally:
            conn.close()
        log.info("store_initialized", db_path=self.db_path)

    @staticmethod
    def _row_to_stored(row: sqlite3.Row) -> StoredDFA:
        return StoredDFA(
            id=row["id"],
            user_id=row["user_id"],
            created_by=row["created_by"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            record=DFARecord.model_validate(json.loads(row["record"])),
        )

    def create(self, owner: UserIdentity, record: DFARecord) -> str:
        """Store a new record for owner and return its id."""
        dfa_id = uuid.uuid4().hex
        now = time.time()

        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO dfas (id, user_id, created_by, name, record, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
            """, (
                dfa_id,
                owner.uid,
                owner.email,
                record.name,
                json.dumps(record.to_record()),
                now,
                now,
            ))
            conn.commit()
        finally:
            conn.close()

        log.info("dfa_saved", dfa_id=dfa_id[:8], user_id=owner.uid, name=record.name)
        return dfa_id

    def list_for_user(self, user_id: str) -> List[StoredDFA]:
        """All records owned by user_id, newest first."""
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT id, user_id, created_by, record, created_at, updated_at
                FROM dfas
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
            """, (user_id,))
            rows = cursor.fetchall()
        finally:
            conn.close()

        log.debug("dfas_listed", user_id=user_id, count=len(rows))
        return [self._row_to_stored(row) for row in rows]

    def _fetch(self, conn: sqlite3.Connection, dfa_id: str, user_id: str) -> sqlite3.Row:
        cursor = conn.cursor()
        cursor.execute("""
            SELECT id, user_id, created_by, record, created_at, updated_at
            FROM dfas
            WHERE id = ?
        """, (dfa_id,))
        row = cursor.fetchone()

        if row is None:
            raise DFANotFoundError(dfa_id)
        if row["user_id"] != user_id:
            log.warning("dfa_access_denied", dfa_id=dfa_id[:8], user_id=user_id)
            raise DFAOwnershipError(dfa_id)
        return row

    def get(self, dfa_id: str, user_id: str) -> StoredDFA:
        conn = self._connect()
        try:
            row = self._fetch(conn, dfa_id, user_id)
        finally:
            conn.close()
        return self._row_to_stored(row)

    def delete(self, dfa_id: str, user_id: str) -> None:
        """Delete a record after checking it belongs to user_id."""
        conn = self._connect()
        try:
            self._fetch(conn, dfa_id, user_id)
            conn.execute("DELETE FROM dfas WHERE id = ?", (dfa_id,))
            conn.commit()
        finally:
            conn.close()

        log.info("dfa_deleted", dfa_id=dfa_id[:8], user_id=user_id)

    def count(self, user_id: Optional[str] = None) -> int:
        conn = self._connect()
        try:
            cursor = conn.cursor()
            if user_id is None:
                cursor.execute("SELECT COUNT(*) FROM dfas")
            else:
                cursor.execute("SELECT COUNT(*) FROM dfas WHERE user_id = ?", (user_id,))
            total = cursor.fetchone()[0]
        finally:
            conn.close()
        return total
