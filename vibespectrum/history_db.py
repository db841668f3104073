"""SQLite-backed spectrum store.

Keeps every stored :class:`~vibespectrum.domain_models.SpectrumResult` in a
single file, keyed by its timestamp string.  The full result (lines,
bookkeeping and band-peak cache) is stored as one JSON payload; quantity,
resolution and line count are duplicated into typed columns for ad-hoc
queries.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from threading import RLock

from .domain_models import SpectrumResult
from .errors import InvalidInputError, NotFoundError
from .json_utils import safe_json_dumps, safe_json_loads

LOGGER = logging.getLogger(__name__)

# -- Schema -------------------------------------------------------------------

_SCHEMA_VERSION = 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS schema_meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS spectra (
    timestamp      TEXT PRIMARY KEY,
    quantity       TEXT NOT NULL,
    resolution_hz  REAL NOT NULL,
    line_count     INTEGER NOT NULL,
    result_json    TEXT NOT NULL,
    created_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL
);
"""


class HistoryDB:
    """Thin wrapper around a SQLite database implementing ``SpectrumStore``."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = RLock()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._ensure_schema()

    # -- lifecycle ------------------------------------------------------------

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> HistoryDB:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @contextmanager
    def _cursor(self, *, commit: bool = True):
        with self._lock:
            cur = self._conn.cursor()
            try:
                yield cur
                if commit:
                    self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise
            finally:
                cur.close()

    def _ensure_schema(self) -> None:
        with self._cursor() as cur:
            cur.executescript(_SCHEMA_SQL)
        with self._cursor() as cur:
            cur.execute("SELECT value FROM schema_meta WHERE key = ?", ("version",))
            row = cur.fetchone()
            if row is None:
                cur.execute(
                    "INSERT INTO schema_meta (key, value) VALUES (?, ?)",
                    ("version", str(_SCHEMA_VERSION)),
                )
                LOGGER.info(
                    "Initialised spectrum DB schema v%d at %s", _SCHEMA_VERSION, self.db_path
                )
                return
            version = int(str(row[0]))
            if version != _SCHEMA_VERSION:
                raise RuntimeError(
                    f"Unsupported spectrum DB schema version {version}; "
                    f"expected {_SCHEMA_VERSION}. Delete the database file to recreate."
                )

    # -- write ----------------------------------------------------------------

    def store(self, timestamp: str, result: SpectrumResult) -> None:
        now = datetime.now(UTC).isoformat()
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO spectra (timestamp, quantity, resolution_hz, line_count, "
                "result_json, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(timestamp) DO UPDATE SET quantity = excluded.quantity, "
                "resolution_hz = excluded.resolution_hz, line_count = excluded.line_count, "
                "result_json = excluded.result_json, updated_at = excluded.updated_at",
                (
                    str(timestamp),
                    result.quantity.value,
                    result.resolution_hz,
                    result.line_count,
                    safe_json_dumps(result.to_dict()),
                    now,
                    now,
                ),
            )

    def delete(self, timestamp: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM spectra WHERE timestamp = ?", (str(timestamp),))
            return cur.rowcount > 0

    # -- read -----------------------------------------------------------------

    def retrieve(self, timestamp: str) -> SpectrumResult:
        with self._cursor(commit=False) as cur:
            cur.execute("SELECT result_json FROM spectra WHERE timestamp = ?", (str(timestamp),))
            row = cur.fetchone()
        if row is None:
            raise NotFoundError(f"No spectrum stored for timestamp {timestamp!r}")
        payload = safe_json_loads(row[0], context=f"spectrum {timestamp}")
        if not isinstance(payload, dict):
            raise NotFoundError(f"Stored spectrum for timestamp {timestamp!r} is unreadable")
        try:
            return SpectrumResult.from_dict(payload)
        except InvalidInputError as exc:
            LOGGER.warning("Stored spectrum %s is malformed: %s", timestamp, exc)
            raise NotFoundError(
                f"Stored spectrum for timestamp {timestamp!r} is unreadable"
            ) from exc

    def timestamps(self, start: str | None = None, end: str | None = None) -> list[str]:
        clauses: list[str] = []
        params: list[str] = []
        if start is not None:
            clauses.append("timestamp >= ?")
            params.append(str(start))
        if end is not None:
            clauses.append("timestamp <= ?")
            params.append(str(end))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._cursor(commit=False) as cur:
            cur.execute(f"SELECT timestamp FROM spectra{where} ORDER BY timestamp ASC", params)
            return [row[0] for row in cur.fetchall()]

    def __len__(self) -> int:
        with self._cursor(commit=False) as cur:
            cur.execute("SELECT COUNT(*) FROM spectra")
            return int(cur.fetchone()[0])
