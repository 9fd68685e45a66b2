"""Content Store: raw statute text and on-demand article snippets.

The view only depends on the ``ContentStore`` protocol. The reference
implementation is a DuckDB file with the desktop application's layout:

Tables:
    full_texts      -- one row per statute (law_name, full_text, category, region)
    chunks          -- one row per article (law_name, article_number, content)
    _schema_version -- schema version tracking

The database is built by ``write_content_db`` (scripts/build_content_db.py)
and opened read-only by ``DuckDBContentStore``.
"""
from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from lawview.segmenter import segment_document

# Dynamic DuckDB import for pyright compatibility
_duckdb_mod = importlib.import_module("duckdb")

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

SNIPPET_STORAGE_FAILURE_TEXT = "加载预览失败"

# Lower sorts first in law-name suggestions; unknown categories go last.
CATEGORY_PRIORITY: dict[str, int] = {
    "法律": 1,
    "司法解释": 2,
    "行政法规": 3,
    "地方法规": 4,
}
_UNKNOWN_CATEGORY_PRIORITY = 99


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ContentStoreError(OSError):
    """The store exists but could not be read."""


class DocumentNotFoundError(LookupError):
    """No statute is stored under the requested source identifier."""


class SchemaVersionError(RuntimeError):
    """Raised when a content DB schema version does not match expected."""


# ---------------------------------------------------------------------------
# Protocol and records
# ---------------------------------------------------------------------------


class ContentStore(Protocol):
    """What a statute view needs from its storage collaborator."""

    async def get_full_text(self, source_id: str) -> str:
        """Raw statute text; raises DocumentNotFoundError / ContentStoreError."""
        ...

    async def get_article_snippet(
        self,
        law_name: str | None,
        article_number: str,
        current_law_name: str,
    ) -> str:
        """Display text for one article (None law_name = current document)."""
        ...


@dataclass(frozen=True, slots=True)
class StatuteRecord:
    """One statute to ingest."""

    law_name: str
    full_text: str
    category: str = ""
    region: str = ""

    def __post_init__(self) -> None:
        if not self.law_name:
            raise ValueError("law_name cannot be empty")


@dataclass(frozen=True, slots=True)
class LawNameSuggestion:
    name: str
    category: str
    region: str


def source_id_to_law_name(source_id: str) -> str:
    """Strip trailing ".txt" suffixes: "刑法.txt" -> "刑法"."""
    name = source_id
    while name.endswith(".txt"):
        name = name[: -len(".txt")]
    return name


def category_priority(category: str) -> int:
    return CATEGORY_PRIORITY.get(category, _UNKNOWN_CATEGORY_PRIORITY)


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_SCHEMA_DDL = f"""\
CREATE TABLE _schema_version (
    table_name VARCHAR PRIMARY KEY,
    version VARCHAR NOT NULL,
    created_at TIMESTAMP DEFAULT current_timestamp
);

INSERT INTO _schema_version VALUES ('content', '{SCHEMA_VERSION}', current_timestamp);

CREATE TABLE full_texts (
    law_name VARCHAR PRIMARY KEY,
    full_text VARCHAR NOT NULL,
    category VARCHAR,
    region VARCHAR
);

CREATE TABLE chunks (
    law_name VARCHAR NOT NULL,
    article_number VARCHAR NOT NULL,
    content VARCHAR NOT NULL
)
"""


def _read_schema_version(conn: Any) -> str:
    try:
        result = conn.execute(
            "SELECT version FROM _schema_version WHERE table_name = 'content'"
        ).fetchone()
    except _duckdb_mod.Error:
        return "unknown"
    return str(result[0]) if result else "unknown"


def ensure_schema_version(
    conn: Any,
    *,
    db_path: Path | None = None,
    expected: str = SCHEMA_VERSION,
) -> str:
    """Validate the schema version of an open connection.

    Returns the actual version; raises SchemaVersionError on mismatch.
    """
    actual = _read_schema_version(conn)
    if actual != expected:
        where = f" in {db_path}" if db_path is not None else ""
        raise SchemaVersionError(
            f"Schema version mismatch{where}: expected {expected}, got {actual}"
        )
    return actual


def article_chunks(record: StatuteRecord) -> list[tuple[str, str, str]]:
    """Per-article (law_name, article_number, content) rows for *record*."""
    doc = segment_document(record.full_text, record.law_name)
    return [(record.law_name, a.label, a.text) for a in doc.articles]


def write_content_db(
    db_path: Path,
    statutes: Iterable[StatuteRecord | tuple[str, str]],
) -> dict[str, int]:
    """Create a content database at *db_path* from statutes.

    Each statute is stored whole in ``full_texts`` and chunked into
    ``chunks`` by the segmenter. The file must not exist yet. Returns
    ``{"statutes": n, "chunks": m}``.

    Any failure (a duplicate law name, a malformed record) rolls the load
    back and removes the partial file before the error propagates.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn: Any = _duckdb_mod.connect(str(db_path))
    n_statutes = 0
    n_chunks = 0
    in_txn = False
    try:
        for stmt in _SCHEMA_DDL.split(";"):
            stmt = stmt.strip()
            if stmt:
                conn.execute(stmt)
        conn.execute("BEGIN TRANSACTION")
        in_txn = True
        for item in statutes:
            record = item if isinstance(item, StatuteRecord) else StatuteRecord(*item)
            conn.execute(
                "INSERT INTO full_texts VALUES (?, ?, ?, ?)",
                [record.law_name, record.full_text, record.category, record.region],
            )
            rows = article_chunks(record)
            if rows:
                conn.executemany("INSERT INTO chunks VALUES (?, ?, ?)", rows)
            n_statutes += 1
            n_chunks += len(rows)
            logger.debug("ingested %s (%d articles)", record.law_name, len(rows))
        conn.execute("COMMIT")
    except Exception:
        logger.error("content db build failed after %d statutes; removing %s",
                     n_statutes, db_path)
        if in_txn:
            try:
                conn.execute("ROLLBACK")
            except _duckdb_mod.Error:
                logger.debug("rollback failed", exc_info=True)
        conn.close()
        db_path.unlink(missing_ok=True)
        db_path.with_name(db_path.name + ".wal").unlink(missing_ok=True)
        raise
    conn.close()
    return {"statutes": n_statutes, "chunks": n_chunks}


# ---------------------------------------------------------------------------
# DuckDB store
# ---------------------------------------------------------------------------


class DuckDBContentStore:
    """Read-only Content Store backed by a DuckDB file.

    Queries are synchronous and fast; the async methods exist to satisfy
    the ContentStore protocol used by the view.
    """

    def __init__(self, db_path: Path, *, enforce_schema: bool = True) -> None:
        self._db_path = db_path
        try:
            self._conn: Any = _duckdb_mod.connect(str(db_path), read_only=True)
        except _duckdb_mod.Error as exc:
            raise ContentStoreError(f"cannot open content store {db_path}: {exc}") from exc
        if enforce_schema:
            try:
                ensure_schema_version(self._conn, db_path=db_path)
            except SchemaVersionError:
                self._conn.close()
                raise

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> DuckDBContentStore:
        return self

    def __exit__(self, *_args: object) -> None:
        self.close()

    @property
    def schema_version(self) -> str:
        return _read_schema_version(self._conn)

    @property
    def statute_count(self) -> int:
        result = self._conn.execute("SELECT COUNT(*) FROM full_texts").fetchone()
        return int(result[0]) if result else 0

    def law_names(self) -> list[str]:
        """All stored law names, sorted."""
        rows = self._conn.execute(
            "SELECT law_name FROM full_texts ORDER BY law_name"
        ).fetchall()
        return [str(r[0]) for r in rows]

    def read_full_text(self, source_id: str) -> str:
        """Synchronous form of ``get_full_text``."""
        law_name = source_id_to_law_name(source_id)
        try:
            row = self._conn.execute(
                "SELECT full_text FROM full_texts WHERE law_name = ?", [law_name]
            ).fetchone()
        except _duckdb_mod.Error as exc:
            raise ContentStoreError(
                f"failed to read {law_name!r} from {self._db_path}: {exc}"
            ) from exc
        if row is None:
            logger.debug("full text miss: %s", law_name)
            raise DocumentNotFoundError(law_name)
        return str(row[0])

    def read_article_snippet(
        self,
        law_name: str | None,
        article_number: str,
        current_law_name: str,
    ) -> str:
        """Synchronous form of ``get_article_snippet``."""
        target = law_name or current_law_name
        try:
            row = self._conn.execute(
                "SELECT content FROM chunks "
                "WHERE law_name LIKE ? AND article_number = ? LIMIT 1",
                [f"%{target}%", article_number],
            ).fetchone()
        except _duckdb_mod.Error as exc:
            logger.warning("snippet lookup failed for %s %s: %s", target, article_number, exc)
            return SNIPPET_STORAGE_FAILURE_TEXT
        if row is None:
            logger.debug("snippet miss: %s %s", target, article_number)
            return f"未找到《{target}》的{article_number}"
        return str(row[0])

    async def get_full_text(self, source_id: str) -> str:
        return self.read_full_text(source_id)

    async def get_article_snippet(
        self,
        law_name: str | None,
        article_number: str,
        current_law_name: str,
    ) -> str:
        return self.read_article_snippet(law_name, article_number, current_law_name)

    def search_law_names(self, query: str, limit: int = 10) -> list[LawNameSuggestion]:
        """Law names containing *query*, most authoritative and shortest first."""
        rows = self._conn.execute(
            "SELECT DISTINCT law_name, category, region FROM full_texts "
            "WHERE law_name LIKE ? LIMIT 200",
            [f"%{query}%"],
        ).fetchall()
        suggestions = [
            LawNameSuggestion(
                name=str(r[0]),
                category=str(r[1] or ""),
                region=str(r[2] or ""),
            )
            for r in rows
        ]
        suggestions.sort(
            key=lambda s: (category_priority(s.category), len(s.name), s.name)
        )
        return suggestions[:limit]
