"""SQLite reference gateway."""

import contextlib
import logging
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set

from ..constants import REFERENCE_TABLE
from ..core import AttachmentReference, Field, VersionInfo
from .base import reference_from_field

logger = logging.getLogger(__name__)


def connect(path: Path) -> sqlite3.Connection:
    """Open the reference database in autocommit mode.

    Transactions are opened explicitly by SqliteReferenceGateway.transaction().
    """
    if str(path) != ":memory:":
        path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), isolation_level=None)
    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    conn.executescript(
        f"""
        CREATE TABLE IF NOT EXISTS {REFERENCE_TABLE} (
          field_id INTEGER NOT NULL,
          version_no INTEGER NOT NULL,
          blob_id TEXT NOT NULL,
          mime_type TEXT,
          file_name TEXT,
          PRIMARY KEY (field_id, version_no)
        );

        CREATE INDEX IF NOT EXISTS idx_{REFERENCE_TABLE}_blob_id
          ON {REFERENCE_TABLE}(blob_id);
        """
    )


def _placeholders(values: List) -> str:
    return ", ".join("?" for _ in values)


class SqliteReferenceGateway:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._depth = 0

    @classmethod
    def open(cls, path: Path) -> "SqliteReferenceGateway":
        """Connect to (and create if needed) the database at path."""
        conn = connect(path)
        migrate(conn)
        return cls(conn)

    def close(self) -> None:
        self._conn.close()

    @contextlib.contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed calls in one write transaction.

        BEGIN IMMEDIATE takes the database write lock up front, so a
        reference count read inside the block cannot be invalidated by a
        concurrent insert before the matching delete. Nested use joins the
        outer transaction.
        """
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        self._conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        else:
            self._conn.execute("COMMIT")
        finally:
            self._depth = 0

    def store_reference(self, version_info: VersionInfo, field: Field) -> None:
        ref = reference_from_field(version_info, field)
        self._conn.execute(
            f"""
            INSERT OR REPLACE INTO {REFERENCE_TABLE}(field_id, version_no, blob_id, mime_type, file_name)
            VALUES(?, ?, ?, ?, ?)
            """,
            (ref.field_id, ref.version_no, ref.blob_id, ref.mime_type, ref.file_name),
        )
        logger.debug("Stored reference %s/%s -> %s", ref.field_id, ref.version_no, ref.blob_id)

    def get_reference(self, field_id: int, version_no: int) -> Optional[AttachmentReference]:
        row = self._conn.execute(
            f"SELECT * FROM {REFERENCE_TABLE} WHERE field_id = ? AND version_no = ?",
            (field_id, version_no),
        ).fetchone()
        if row is None:
            return None
        return AttachmentReference(
            field_id=int(row["field_id"]),
            version_no=int(row["version_no"]),
            blob_id=str(row["blob_id"]),
            mime_type=row["mime_type"],
            file_name=row["file_name"],
        )

    def remove_reference(self, field_id: int, version_no: int) -> None:
        self._conn.execute(
            f"DELETE FROM {REFERENCE_TABLE} WHERE field_id = ? AND version_no = ?",
            (field_id, version_no),
        )

    def get_referenced_blob_ids(self, field_ids: Iterable[int], version_no: int) -> Set[str]:
        ids = list(field_ids)
        if not ids:
            return set()
        rows = self._conn.execute(
            f"""
            SELECT DISTINCT blob_id FROM {REFERENCE_TABLE}
            WHERE version_no = ? AND field_id IN ({_placeholders(ids)})
            """,
            (version_no, *ids),
        ).fetchall()
        return {str(r["blob_id"]) for r in rows}

    def remove_references(self, field_ids: Iterable[int], version_no: int) -> None:
        ids = list(field_ids)
        if not ids:
            return
        cur = self._conn.execute(
            f"DELETE FROM {REFERENCE_TABLE} WHERE version_no = ? AND field_id IN ({_placeholders(ids)})",
            (version_no, *ids),
        )
        logger.debug("Removed %d reference(s) in version %s", cur.rowcount, version_no)

    def count_references_per_blob(self, blob_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(dict.fromkeys(blob_ids))
        counts = {blob_id: 0 for blob_id in ids}
        if not ids:
            return counts
        rows = self._conn.execute(
            f"""
            SELECT blob_id, COUNT(*) AS n FROM {REFERENCE_TABLE}
            WHERE blob_id IN ({_placeholders(ids)})
            GROUP BY blob_id
            """,
            ids,
        ).fetchall()
        for r in rows:
            counts[str(r["blob_id"])] = int(r["n"])
        return counts

    def list_references(self, blob_id: Optional[str] = None) -> List[AttachmentReference]:
        """List rows, optionally only those naming one blob."""
        if blob_id is None:
            rows = self._conn.execute(
                f"SELECT * FROM {REFERENCE_TABLE} ORDER BY field_id, version_no"
            ).fetchall()
        else:
            rows = self._conn.execute(
                f"SELECT * FROM {REFERENCE_TABLE} WHERE blob_id = ? ORDER BY field_id, version_no",
                (blob_id,),
            ).fetchall()
        return [
            AttachmentReference(
                field_id=int(r["field_id"]),
                version_no=int(r["version_no"]),
                blob_id=str(r["blob_id"]),
                mime_type=r["mime_type"],
                file_name=r["file_name"],
            )
            for r in rows
        ]
