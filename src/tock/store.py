#!/usr/bin/env python3
"""
SQLite storage for tracked sessions.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .errors import SessionConflictError, StorageError
from .timestamps import (
    format_storage_timestamp,
    hours_between,
    parse_storage_timestamp,
)

log = logging.getLogger(__name__)

SESSION_COLUMNS = "id, topic, start_time, end_time"


@dataclass(frozen=True)
class Session:
    """
    Stored work session.

    Attributes
    ----------
    id : int
        Session identifier.
    topic : str
        Topic the time was spent on.
    start : datetime
        Start timestamp.
    end : Optional[datetime]
        End timestamp, or None while the session is active.
    """

    id: int
    topic: str
    start: datetime
    end: Optional[datetime]

    @property
    def is_active(self) -> bool:
        return self.end is None

    @property
    def hours(self) -> Optional[float]:
        if self.end is None:
            return None
        return hours_between(self.start, self.end)


def _row_to_session(row: Sequence[Any]) -> Session:
    start = parse_storage_timestamp(row[2])
    if start is None:
        raise StorageError(f"Session {row[0]} has an unreadable start time: {row[2]!r}")
    end = parse_storage_timestamp(row[3])
    if end is None and row[3] is not None and str(row[3]).strip():
        raise StorageError(f"Session {row[0]} has an unreadable end time: {row[3]!r}")
    return Session(id=int(row[0]), topic=str(row[1] or ""), start=start, end=end)


class SessionStore:
    """
    SQLite-backed storage for sessions.

    Each operation opens its own connection, commits, and closes it again.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._schema_ready = False

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open database {self.path}: {exc}") from exc
        # Closing without a commit discards the pending transaction.
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Database error in {self.path}: {exc}") from exc
        finally:
            conn.close()

    def ensure_schema(self) -> bool:
        """
        Ensure the SQLite schema exists.

        Returns
        -------
        bool
            True when the database file did not exist before.
        """
        if self._schema_ready:
            return False
        created = not self.path.exists()
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    id INTEGER PRIMARY KEY,
                    topic TEXT,
                    start_time TEXT NOT NULL,
                    end_time TEXT
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time)"
            )
        self._schema_ready = True
        if created:
            log.debug("Created session database at %s", self.path)
        return created

    def _fetch(self, query: str, params: Sequence[Any] = ()) -> List[Session]:
        self.ensure_schema()
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_session(row) for row in rows]

    def _execute(self, query: str, params: Sequence[Any] = ()) -> int:
        self.ensure_schema()
        with self._connect() as conn:
            cursor = conn.execute(query, params)
            return int(cursor.rowcount or 0)

    def get_active_session(self) -> Optional[Session]:
        """
        Return the session without an end time, if any.
        """
        sessions = self._fetch(
            f"SELECT {SESSION_COLUMNS} FROM sessions WHERE end_time IS NULL "
            "ORDER BY julianday(start_time) DESC LIMIT 1"
        )
        return sessions[0] if sessions else None

    def start_session(self, topic: str, now: Optional[datetime] = None) -> int:
        """
        Open a new session starting now.

        Parameters
        ----------
        topic : str
            Session topic.
        now : Optional[datetime], optional
            Start time (defaults to the current time).

        Returns
        -------
        int
            New session identifier.

        Raises
        ------
        SessionConflictError
            If another session is still active.
        """
        self.ensure_schema()
        start = now or datetime.now(timezone.utc)
        with self._connect() as conn:
            active = conn.execute(
                "SELECT id FROM sessions WHERE end_time IS NULL LIMIT 1"
            ).fetchone()
            if active is not None:
                raise SessionConflictError(
                    "Session already active! Stop it first with 'tock stop'"
                )
            cursor = conn.execute(
                "INSERT INTO sessions (topic, start_time) VALUES (?, ?)",
                (topic, format_storage_timestamp(start)),
            )
            session_id = int(cursor.lastrowid)
        log.debug("Started session %s (%s)", session_id, topic)
        return session_id

    def stop_session(self, session_id: int, now: Optional[datetime] = None) -> None:
        """
        Set the end time of a session to now.
        """
        end = now or datetime.now(timezone.utc)
        self._execute(
            "UPDATE sessions SET end_time = ? WHERE id = ?",
            (format_storage_timestamp(end), session_id),
        )
        log.debug("Stopped session %s", session_id)

    def get_session(self, session_id: int) -> Optional[Session]:
        sessions = self._fetch(
            f"SELECT {SESSION_COLUMNS} FROM sessions WHERE id = ?",
            (session_id,),
        )
        return sessions[0] if sessions else None

    def get_sessions(self, limit: int) -> List[Session]:
        """
        Return the most recent sessions, newest first.

        Parameters
        ----------
        limit : int
            Maximum number of sessions.

        Returns
        -------
        List[Session]
            Sessions ordered by start time descending, active ones included.
        """
        return self._fetch(
            f"SELECT {SESSION_COLUMNS} FROM sessions "
            "ORDER BY julianday(start_time) DESC LIMIT ?",
            (limit,),
        )

    def get_all_sessions_for_export(self) -> List[Session]:
        """
        Return all closed sessions, oldest first.
        """
        return self._fetch(
            f"SELECT {SESSION_COLUMNS} FROM sessions WHERE end_time IS NOT NULL "
            "ORDER BY julianday(start_time) ASC"
        )

    def insert_session(self, topic: str, start: datetime, end: datetime) -> int:
        """
        Insert a closed session.

        Returns
        -------
        int
            New session identifier.
        """
        self.ensure_schema()
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO sessions (topic, start_time, end_time) VALUES (?, ?, ?)",
                (topic, format_storage_timestamp(start), format_storage_timestamp(end)),
            )
            session_id = int(cursor.lastrowid)
        log.debug("Inserted session %s (%s)", session_id, topic)
        return session_id

    def update_session_topic(self, session_id: int, topic: str) -> None:
        self._execute("UPDATE sessions SET topic = ? WHERE id = ?", (topic, session_id))

    def update_session_start(self, session_id: int, start: datetime) -> None:
        self._execute(
            "UPDATE sessions SET start_time = ? WHERE id = ?",
            (format_storage_timestamp(start), session_id),
        )

    def update_session_end(self, session_id: int, end: datetime) -> None:
        self._execute(
            "UPDATE sessions SET end_time = ? WHERE id = ?",
            (format_storage_timestamp(end), session_id),
        )

    def delete_session(self, session_id: int) -> bool:
        """
        Delete one session.

        Returns
        -------
        bool
            True when a row was deleted.
        """
        deleted = self._execute("DELETE FROM sessions WHERE id = ?", (session_id,))
        log.debug("Deleted %s row(s) for session %s", deleted, session_id)
        return deleted > 0

    def delete_all_sessions(self) -> int:
        deleted = self._execute("DELETE FROM sessions")
        log.debug("Deleted all %s session(s)", deleted)
        return deleted

    def session_exists(self, session_id: int) -> bool:
        self.ensure_schema()
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM sessions WHERE id = ?", (session_id,)
            ).fetchone()
        return row is not None

    def period_stats(self, start: datetime, end: datetime) -> List[Tuple[str, float]]:
        """
        Sum closed-session hours per topic for sessions starting in a window.

        Parameters
        ----------
        start : datetime
            Window start (inclusive).
        end : datetime
            Window end (exclusive).

        Returns
        -------
        List[Tuple[str, float]]
            ``(topic, hours)`` pairs, most hours first.
        """
        self.ensure_schema()
        range_start = format_storage_timestamp(start)
        range_end = format_storage_timestamp(end)
        log.debug("Aggregating sessions in [%s, %s)", range_start, range_end)
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT topic,
                       SUM((julianday(end_time) - julianday(start_time)) * 24) AS hours
                FROM sessions
                WHERE end_time IS NOT NULL
                  AND julianday(start_time) >= julianday(?)
                  AND julianday(start_time) < julianday(?)
                GROUP BY topic
                ORDER BY hours DESC, topic ASC
                """,
                (range_start, range_end),
            ).fetchall()
        return [(str(row[0] or ""), float(row[1] or 0.0)) for row in rows]
