"""Database repository for the response tracker.

This module provides async SQLite storage for:
- per-user paste buffers
- processed update markers (idempotency gate)
- stored responses, unique per (user_id, fingerprint)
- users and their last acknowledgement time
"""

import asyncio
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from hh_tracker.tracker.models import (
    ApplicationRecord,
    CandidateRecord,
    GradeTag,
    InsertResult,
    RoleTag,
    Stats,
    StatsWindow,
    StatusTag,
)
from hh_tracker.tracker.stats import DEFAULT_TOP_COMPANIES, aggregate_records
from hh_tracker.utils.logging import get_logger

logger = get_logger("repository")

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS users (
    user_id INTEGER PRIMARY KEY,
    chat_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    last_ack_at INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS buffers (
    user_id INTEGER PRIMARY KEY,
    buffer_text TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS responses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    imported_at TEXT NOT NULL,
    response_date TEXT,
    company TEXT NOT NULL,
    title TEXT NOT NULL,
    status TEXT NOT NULL,
    role_family TEXT NOT NULL,
    grade TEXT NOT NULL,
    fingerprint TEXT NOT NULL,
    raw_summary TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS processed_events (
    event_id INTEGER PRIMARY KEY,
    processed_at TEXT NOT NULL
);
"""

CREATE_INDEX_SQL = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_responses_user_fingerprint
    ON responses(user_id, fingerprint);
CREATE INDEX IF NOT EXISTS idx_responses_user_imported_at
    ON responses(user_id, imported_at);
CREATE INDEX IF NOT EXISTS idx_responses_user_status
    ON responses(user_id, status);
CREATE INDEX IF NOT EXISTS idx_responses_user_company
    ON responses(user_id, company);
"""


def _timestamp(moment: datetime | None = None) -> str:
    """Render a UTC timestamp that sorts correctly as text."""
    moment = moment or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="microseconds")


@dataclass
class UserRow:
    user_id: int
    chat_id: int
    last_ack_at: int


class TrackerRepository:
    """Async SQLite repository for buffers, event markers and responses.

    All writes go through one connection and are serialized by a lock held
    for the duration of a single call, so every public method is atomic on
    its own. Nothing is held between calls. The lock is shared by all users:
    a transaction on the shared connection would otherwise commit or roll
    back statements issued by another user in the meantime, and SQLite
    admits one writer per database anyway.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Get a database connection.

        Yields:
            An aiosqlite connection.
        """
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
        yield self._connection

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Run the body as one committed unit, rolled back on error."""
        async with self._write_lock:
            async with self._get_connection() as conn:
                try:
                    yield conn
                except BaseException:
                    await conn.rollback()
                    raise
                await conn.commit()

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._transaction() as conn:
            await conn.executescript(CREATE_TABLES_SQL)
            await conn.executescript(CREATE_INDEX_SQL)

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # Users

    async def ensure_user(self, user_id: int, chat_id: int) -> UserRow:
        """Create the user or refresh its chat id, and return the row."""
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO users (user_id, chat_id, created_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET chat_id = excluded.chat_id
                """,
                (user_id, chat_id, _timestamp()),
            )
            cursor = await conn.execute(
                "SELECT user_id, chat_id, last_ack_at FROM users WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()

        return UserRow(
            user_id=row["user_id"],
            chat_id=row["chat_id"],
            last_ack_at=int(row["last_ack_at"] or 0),
        )

    async def update_last_ack_at(self, user_id: int, ts_ms: int) -> None:
        async with self._transaction() as conn:
            await conn.execute(
                "UPDATE users SET last_ack_at = ? WHERE user_id = ?",
                (ts_ms, user_id),
            )

    # Buffer store

    async def append_buffer(self, user_id: int, text: str) -> None:
        """Append ``text`` to the user's buffer, separated by a newline.

        A single upsert, so concurrent appends for one user never lose
        text. The row is created on first append.
        """
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO buffers (user_id, buffer_text, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    buffer_text = CASE
                        WHEN buffers.buffer_text = '' THEN excluded.buffer_text
                        ELSE buffers.buffer_text || char(10) || excluded.buffer_text
                    END,
                    updated_at = excluded.updated_at
                """,
                (user_id, text, _timestamp()),
            )

    async def read_buffer(self, user_id: int) -> str:
        """Return the user's buffered text, or an empty string."""
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT buffer_text FROM buffers WHERE user_id = ?",
                (user_id,),
            )
            row = await cursor.fetchone()

        if row is None:
            return ""
        return row["buffer_text"] or ""

    async def clear_buffer(self, user_id: int) -> None:
        async with self._transaction() as conn:
            await conn.execute("DELETE FROM buffers WHERE user_id = ?", (user_id,))

    # Idempotency gate

    async def mark_processed(self, event_id: int) -> bool:
        """Record ``event_id`` as processed.

        Returns:
            True if this call recorded it, False if it was already recorded.
        """
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO processed_events (event_id, processed_at)
                VALUES (?, ?)
                ON CONFLICT(event_id) DO NOTHING
                """,
                (event_id, _timestamp()),
            )
            inserted = cursor.rowcount == 1

        if not inserted:
            logger.debug("Event %s already processed", event_id)
        return inserted

    # Responses

    @staticmethod
    async def _insert(
        conn: aiosqlite.Connection,
        user_id: int,
        record: CandidateRecord,
        imported_at: datetime | None,
    ) -> bool:
        cursor = await conn.execute(
            """
            INSERT INTO responses (
                user_id, imported_at, response_date, company, title, status,
                role_family, grade, fingerprint, raw_summary
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, fingerprint) DO NOTHING
            """,
            (
                user_id,
                _timestamp(imported_at),
                record.response_date,
                record.company,
                record.title,
                record.status.value,
                record.role_family.value,
                record.grade.value,
                record.fingerprint,
                record.raw_summary,
            ),
        )
        return cursor.rowcount == 1

    async def insert_if_absent(
        self,
        user_id: int,
        record: CandidateRecord,
        imported_at: datetime | None = None,
    ) -> bool:
        """Store a record unless the user already has its fingerprint.

        Args:
            user_id: Owner of the record.
            record: The parsed record.
            imported_at: Import time override, defaults to now (UTC).

        Returns:
            True if the record was inserted, False if it was a duplicate.
        """
        async with self._transaction() as conn:
            return await self._insert(conn, user_id, record, imported_at)

    async def insert_many(
        self, user_id: int, records: Iterable[CandidateRecord]
    ) -> InsertResult:
        """Store records in one transaction and count inserts vs duplicates."""
        result = InsertResult()
        imported_at = datetime.now(UTC)

        async with self._transaction() as conn:
            for record in records:
                if await self._insert(conn, user_id, record, imported_at):
                    result.inserted += 1
                    result.inserted_records.append(record)
                else:
                    result.duplicates += 1

        return result

    async def get_by_fingerprint(
        self, user_id: int, fingerprint: str
    ) -> ApplicationRecord | None:
        async with self._get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM responses WHERE user_id = ? AND fingerprint = ?",
                (user_id, fingerprint),
            )
            row = await cursor.fetchone()

        if row is None:
            return None
        return self._row_to_record(row)

    async def list_records(
        self,
        user_id: int,
        limit: int | None = 2000,
        since: datetime | None = None,
    ) -> list[ApplicationRecord]:
        """List a user's records in import order.

        Args:
            user_id: Owner of the records.
            limit: Maximum number of records, or None for all.
            since: Only records imported at or after this moment.

        Returns:
            Records ordered by import time, oldest first.
        """
        query = "SELECT * FROM responses WHERE user_id = ?"
        params: list[object] = [user_id]
        if since is not None:
            query += " AND imported_at >= ?"
            params.append(_timestamp(since))
        query += " ORDER BY imported_at ASC, id ASC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        async with self._get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()

        return [self._row_to_record(row) for row in rows]

    async def aggregate(
        self,
        user_id: int,
        window: StatsWindow,
        top_k: int = DEFAULT_TOP_COMPANIES,
        now: datetime | None = None,
    ) -> Stats:
        """Compute stats for the user's records imported inside ``window``."""
        now = now or datetime.now(UTC)
        records = await self.list_records(user_id, limit=None, since=window.since(now))
        return aggregate_records(records, window, now=now, top_k=top_k)

    def _row_to_record(self, row: aiosqlite.Row) -> ApplicationRecord:
        """Convert a database row to an ApplicationRecord.

        Args:
            row: The database row.

        Returns:
            An ApplicationRecord instance.
        """
        return ApplicationRecord(
            id=row["id"],
            user_id=row["user_id"],
            imported_at=datetime.fromisoformat(row["imported_at"]),
            response_date=row["response_date"],
            company=row["company"],
            title=row["title"],
            status=StatusTag(row["status"]),
            role_family=RoleTag(row["role_family"]),
            grade=GradeTag(row["grade"]),
            fingerprint=row["fingerprint"],
            raw_summary=row["raw_summary"],
        )
