"""SQLite-backed store.

Timestamps are stored as fixed-width UTC ISO-8601 strings so that string
comparison and ordering match chronological order.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import NotFoundError, ProfileExistsError, StorageError
from ..logging import get_logger
from ..models import (
    Import,
    ImportScope,
    ImportSummary,
    Profile,
    ProfileStats,
    ProfileSummary,
    Scope,
    URLFilters,
    URLRecord,
)
from .base import Clock, URLStore

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    name TEXT UNIQUE NOT NULL,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS imports (
    id TEXT PRIMARY KEY,
    profile_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    alias TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS urls (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT UNIQUE NOT NULL,
    profile_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
    import_id TEXT NOT NULL REFERENCES imports(id) ON DELETE CASCADE,
    original_url TEXT NOT NULL,
    cleaned_url TEXT NOT NULL,
    domain TEXT NOT NULL,
    is_duplicate INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_imports_profile ON imports(profile_id);
CREATE INDEX IF NOT EXISTS idx_urls_import ON urls(import_id);
CREATE INDEX IF NOT EXISTS idx_urls_profile_cleaned ON urls(profile_id, cleaned_url, created_at);
"""

_URL_COLUMNS = "seq, id, profile_id, import_id, original_url, cleaned_url, domain, is_duplicate, created_at"


def _to_db_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _from_db_time(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _row_to_record(row: sqlite3.Row) -> URLRecord:
    return URLRecord(
        seq=row["seq"],
        id=row["id"],
        profile_id=row["profile_id"],
        import_id=row["import_id"],
        original_url=row["original_url"],
        cleaned_url=row["cleaned_url"],
        domain=row["domain"],
        is_duplicate=bool(row["is_duplicate"]),
        created_at=_from_db_time(row["created_at"]),
    )


def _py_lower(value: Optional[str]) -> Optional[str]:
    # SQLite's built-in lower() only folds ASCII.
    return value.lower() if value is not None else None


def _where_clause(scope: Scope, filters: URLFilters) -> Tuple[str, List[Any]]:
    if isinstance(scope, ImportScope):
        clauses = ["import_id = ?"]
        params: List[Any] = [scope.import_id]
    else:
        clauses = ["profile_id = ?"]
        params = [scope.profile_id]

    if filters.domain:
        clauses.append("instr(py_lower(domain), py_lower(?)) > 0")
        params.append(filters.domain)
    if filters.is_duplicate is not None:
        clauses.append("is_duplicate = ?")
        params.append(int(filters.is_duplicate))
    if filters.search:
        clauses.append(
            "(instr(py_lower(original_url), py_lower(?)) > 0"
            " OR instr(py_lower(cleaned_url), py_lower(?)) > 0"
            " OR instr(py_lower(domain), py_lower(?)) > 0)"
        )
        params.extend([filters.search] * 3)
    return " AND ".join(clauses), params


class SQLiteURLStore(URLStore):
    """Persist profiles, imports and URLs in a SQLite database."""

    def __init__(self, path: Union[str, Path] = ":memory:", clock: Optional[Clock] = None) -> None:
        super().__init__(clock)
        self.path = str(path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.create_function("py_lower", 1, _py_lower, deterministic=True)
            self._conn.execute("PRAGMA foreign_keys = ON;")
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StorageError(f"Could not open database {self.path}: {exc}") from exc
        logger.info("SQLite store ready", path=self.path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.IntegrityError:
                raise
            except sqlite3.Error as exc:
                logger.error("SQLite operation failed", path=self.path, error=str(exc))
                raise StorageError(str(exc)) from exc

    def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        with self._transaction() as conn:
            return conn.execute(sql, params).fetchall()

    def _fetchone(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        with self._transaction() as conn:
            return conn.execute(sql, params).fetchone()

    # Profiles -----------------------------------------------------------------

    @staticmethod
    def _row_to_profile(row: sqlite3.Row) -> Profile:
        return Profile(id=row["id"], name=row["name"], created_at=_from_db_time(row["created_at"]))

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        row = self._fetchone("SELECT id, name, created_at FROM profiles WHERE id = ?", (profile_id,))
        return self._row_to_profile(row) if row else None

    def get_profile_by_name(self, name: str) -> Optional[Profile]:
        row = self._fetchone("SELECT id, name, created_at FROM profiles WHERE name = ?", (name,))
        return self._row_to_profile(row) if row else None

    def create_profile(self, name: str) -> Profile:
        profile = Profile(name=name, created_at=self.now())
        try:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO profiles (id, name, created_at) VALUES (?, ?, ?)",
                    (profile.id, profile.name, _to_db_time(profile.created_at)),
                )
        except sqlite3.IntegrityError as exc:
            raise ProfileExistsError(f"Profile '{name}' already exists") from exc
        return profile

    def list_profiles(self) -> List[ProfileSummary]:
        rows = self._fetchall(
            """
            SELECT p.id, p.name, p.created_at,
                   (SELECT COUNT(*) FROM imports i WHERE i.profile_id = p.id) AS import_count,
                   (SELECT COUNT(*) FROM urls u WHERE u.profile_id = p.id) AS url_count
            FROM profiles p
            ORDER BY p.created_at DESC
            """
        )
        return [
            ProfileSummary(
                id=row["id"],
                name=row["name"],
                created_at=_from_db_time(row["created_at"]),
                import_count=row["import_count"],
                url_count=row["url_count"],
            )
            for row in rows
        ]

    # Imports ------------------------------------------------------------------

    def create_import(self, profile_id: str, alias: str) -> Import:
        new_import = Import(profile_id=profile_id, alias=alias, created_at=self.now())
        try:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO imports (id, profile_id, alias, created_at) VALUES (?, ?, ?, ?)",
                    (new_import.id, profile_id, alias, _to_db_time(new_import.created_at)),
                )
        except sqlite3.IntegrityError as exc:
            raise NotFoundError("Profile not found") from exc
        return new_import

    def get_import(self, import_id: str) -> Optional[Import]:
        row = self._fetchone(
            "SELECT id, profile_id, alias, created_at FROM imports WHERE id = ?", (import_id,)
        )
        if not row:
            return None
        return Import(
            id=row["id"],
            profile_id=row["profile_id"],
            alias=row["alias"],
            created_at=_from_db_time(row["created_at"]),
        )

    def list_imports(self, profile_id: str) -> List[ImportSummary]:
        rows = self._fetchall(
            """
            SELECT i.id, i.alias, i.created_at,
                   COUNT(u.seq) AS url_count,
                   COALESCE(SUM(u.is_duplicate), 0) AS duplicate_count
            FROM imports i
            LEFT JOIN urls u ON u.import_id = i.id
            WHERE i.profile_id = ?
            GROUP BY i.id, i.alias, i.created_at
            ORDER BY i.created_at DESC
            """,
            (profile_id,),
        )
        return [
            ImportSummary(
                id=row["id"],
                alias=row["alias"],
                created_at=_from_db_time(row["created_at"]),
                url_count=row["url_count"],
                duplicate_count=row["duplicate_count"],
            )
            for row in rows
        ]

    def delete_import(self, import_id: str) -> None:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM imports WHERE id = ?", (import_id,))
            if cursor.rowcount == 0:
                raise NotFoundError("Import not found")

    # URL records --------------------------------------------------------------

    def add_urls(self, records: Sequence[URLRecord]) -> List[URLRecord]:
        if not records:
            return []
        created_at = self.now()
        stamp = _to_db_time(created_at)
        stored = []
        try:
            with self._transaction() as conn:
                for record in records:
                    cursor = conn.execute(
                        """
                        INSERT INTO urls (id, profile_id, import_id, original_url,
                                          cleaned_url, domain, is_duplicate, created_at)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            record.id,
                            record.profile_id,
                            record.import_id,
                            record.original_url,
                            record.cleaned_url,
                            record.domain,
                            int(record.is_duplicate),
                            stamp,
                        ),
                    )
                    stored.append(
                        record.model_copy(update={"created_at": created_at, "seq": cursor.lastrowid})
                    )
        except sqlite3.IntegrityError as exc:
            raise StorageError(f"Batch insert rejected: {exc}") from exc
        return stored

    def list_profile_urls(self, profile_id: str) -> List[URLRecord]:
        rows = self._fetchall(
            f"SELECT {_URL_COLUMNS} FROM urls WHERE profile_id = ? ORDER BY created_at ASC, seq ASC",
            (profile_id,),
        )
        return [_row_to_record(row) for row in rows]

    def query_urls(self, scope: Scope, filters: URLFilters) -> List[URLRecord]:
        where, params = _where_clause(scope, filters)
        rows = self._fetchall(
            f"SELECT {_URL_COLUMNS} FROM urls WHERE {where}"
            " ORDER BY created_at DESC, seq DESC LIMIT ? OFFSET ?",
            [*params, filters.page_size, filters.offset],
        )
        return [_row_to_record(row) for row in rows]

    def count_urls(self, scope: Scope, filters: URLFilters) -> int:
        where, params = _where_clause(scope, filters)
        row = self._fetchone(f"SELECT COUNT(*) AS total FROM urls WHERE {where}", params)
        return row["total"] if row else 0

    def find_earliest_url(
        self,
        profile_id: str,
        cleaned_url: str,
        exclude_id: Optional[str] = None,
        before: Optional[datetime] = None,
    ) -> Optional[URLRecord]:
        clauses = ["profile_id = ?", "cleaned_url = ?"]
        params: List[Any] = [profile_id, cleaned_url]
        if exclude_id is not None:
            clauses.append("id != ?")
            params.append(exclude_id)
        if before is not None:
            clauses.append("created_at < ?")
            params.append(_to_db_time(before))
        row = self._fetchone(
            f"SELECT {_URL_COLUMNS} FROM urls WHERE {' AND '.join(clauses)}"
            " ORDER BY created_at ASC, seq ASC LIMIT 1",
            params,
        )
        return _row_to_record(row) if row else None

    def profile_stats(self, profile_id: str) -> ProfileStats:
        row = self._fetchone(
            """
            SELECT COUNT(*) AS total,
                   COALESCE(SUM(is_duplicate), 0) AS duplicates,
                   COUNT(DISTINCT domain) AS domains
            FROM urls WHERE profile_id = ?
            """,
            (profile_id,),
        )
        total = row["total"] if row else 0
        duplicates = row["duplicates"] if row else 0
        return ProfileStats(
            total_urls=total,
            duplicate_urls=duplicates,
            unique_urls=total - duplicates,
            unique_domains=row["domains"] if row else 0,
        )


__all__ = ["SQLiteURLStore"]
