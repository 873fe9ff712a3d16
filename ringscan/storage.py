"""SQLite store for matched systems and the batched writer that fills it."""

import logging
import pathlib
import sqlite3
from typing import Iterable, List, Sequence, Tuple, Union

from ringscan.predicate import PersistedRow

logger = logging.getLogger(__name__)

PRAGMAS: Tuple[Tuple[str, Union[str, int]], ...] = (
    ("journal_mode", "WAL"),
    ("synchronous", "NORMAL"),
    ("cache_size", -2_000_000),  # KiB, ~2GB
    ("temp_store", "MEMORY"),
    ("mmap_size", 8 * 1024 * 1024 * 1024),
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS systems (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    system_name TEXT,
    x REAL,
    y REAL,
    z REAL,
    matched_body_name TEXT,
    matched_body TEXT,
    system_data TEXT
);
CREATE INDEX IF NOT EXISTS idx_system_name ON systems(system_name);
"""

INSERT_ROW = (
    "INSERT INTO systems (system_name, x, y, z, matched_body_name, matched_body, system_data) "
    "VALUES (?, ?, ?, ?, ?, ?, ?)"
)


def connect(path: Union[str, pathlib.Path], pragmas: Iterable[Tuple[str, Union[str, int]]] = PRAGMAS) -> sqlite3.Connection:
    """Open the store in autocommit mode; transactions are issued explicitly."""
    conn = sqlite3.connect(str(path), isolation_level=None)
    try:
        for name, value in pragmas:
            conn.execute(f"PRAGMA {name} = {value}")
    except sqlite3.Error:
        conn.close()
        raise
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA)


def analyze(conn: sqlite3.Connection) -> None:
    """Refresh query planner statistics."""
    conn.execute("ANALYZE")


class BatchedWriter:
    """Write rows inside an open transaction, committing every ``batch_size`` rows.

    Between commits the connection is always inside a transaction. Rows of the
    current batch only become durable on the next commit or on ``flush()``.
    """

    def __init__(self, conn: sqlite3.Connection, batch_size: int = 500):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.conn = conn
        self.batch_size = batch_size
        self.rows_written = 0
        self.batches_committed = 0
        self._batch: List[Sequence] = []
        self._open = False

    @property
    def pending(self) -> int:
        return len(self._batch)

    def begin(self) -> None:
        self.conn.execute("BEGIN")
        self._open = True

    def write(self, row: PersistedRow) -> None:
        if not self._open:
            self.begin()
        self._batch.append(row)
        if len(self._batch) >= self.batch_size:
            self._commit()
            self.begin()

    def flush(self) -> None:
        """Commit whatever is pending, including a partial batch."""
        if self._open:
            self._commit()

    def _commit(self) -> None:
        if self._batch:
            self.conn.executemany(INSERT_ROW, self._batch)
        self.conn.execute("COMMIT")
        self._open = False
        if self._batch:
            self.rows_written += len(self._batch)
            self.batches_committed += 1
            logger.debug("Committed batch of %d rows (%d total)", len(self._batch), self.rows_written)
        self._batch = []
