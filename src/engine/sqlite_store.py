"""
SQLite-backed Job Store.

- WAL mode for concurrent readers
- One connection per call for file databases
- ":memory:" keeps a single shared connection (a new connection
  would see an empty database)
- Every sqlite3.Error is raised as StoreError
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from .entities import Job, JobStatus
from .errors import JobNotFoundError, StoreError
from .store import JobStore


logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS jobs (
    job_id TEXT PRIMARY KEY,
    task TEXT NOT NULL,
    status TEXT NOT NULL,
    attempts INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    last_error TEXT
);
CREATE INDEX IF NOT EXISTS idx_jobs_task_status ON jobs(task, status);
"""


class SqliteJobStore(JobStore):
    """SQLite persistence for Job records."""

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize the store and create the schema.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for testing.

        Raises:
            StoreError: If the database cannot be opened or initialized
        """
        self.db_path = str(db_path)
        self._lock = threading.Lock()
        self._shared_conn: Optional[sqlite3.Connection] = None

        if self.db_path == MEMORY_DB:
            self._shared_conn = self._open(check_same_thread=False)
        else:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _open(self, check_same_thread: bool = True) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(
                self.db_path,
                timeout=30,
                check_same_thread=check_same_thread,
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            return conn
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open job database {self.db_path}: {e}") from e

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for a committed unit of work."""
        with self._lock:
            conn = self._shared_conn or self._open()
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StoreError(f"Job database error: {e}") from e
            finally:
                if conn is not self._shared_conn:
                    conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.executescript(SCHEMA)

    def save(self, job: Job) -> None:
        row = job.to_dict()
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO jobs (job_id, task, status, attempts, created_at, updated_at, last_error)
                VALUES (:job_id, :task, :status, :attempts, :created_at, :updated_at, :last_error)
                ON CONFLICT(job_id) DO UPDATE SET
                    status = excluded.status,
                    attempts = excluded.attempts,
                    updated_at = excluded.updated_at,
                    last_error = excluded.last_error
                """,
                row,
            )

    def find_by_id(self, job_id: str) -> Job:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM jobs WHERE job_id = ?",
                (job_id,),
            ).fetchone()

        if row is None:
            raise JobNotFoundError(job_id)

        return self._row_to_job(row)

    def find_all(self) -> list[Job]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM jobs ORDER BY created_at, rowid"
            ).fetchall()

        return [self._row_to_job(row) for row in rows]

    def close(self) -> None:
        """Close the shared in-memory connection, if any."""
        with self._lock:
            if self._shared_conn is not None:
                self._shared_conn.close()
                self._shared_conn = None

    def _row_to_job(self, row: sqlite3.Row) -> Job:
        """Convert a database row to a Job entity."""
        job = Job.from_dict(dict(row))
        if not isinstance(job.status, JobStatus):
            logger.warning(f"Job {job.job_id} has unknown status '{job.status}'")
        return job
