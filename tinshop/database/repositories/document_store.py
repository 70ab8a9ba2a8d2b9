"""
Key/value store of JSON documents on top of SQLite.

Every collection (inventory, sales, stock logs, settings, ...) is one row in
the `documents` table. Callers read a whole collection, change it in memory
and write it back in full; there is no partial-update protocol.

Writes that must land together (a sale and the inventory it touched) go in
one `transaction()` block:

    with store.transaction():
        store.save(KEY_SALES, sales_doc)
        store.save(KEY_INVENTORY, inventory_doc)

Either both rows change or neither does.
"""

from __future__ import annotations

import copy
import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from ...constants import TABLE_DOCUMENTS

_log = logging.getLogger(__name__)


class DocumentStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._tx_depth = 0

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def transaction(self) -> Iterator["DocumentStore"]:
        """
        Start an IMMEDIATE transaction, commit on success, rollback on error.
        Nested blocks join the outermost transaction.
        """
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        cur = self.conn.cursor()
        try:
            cur.execute("BEGIN IMMEDIATE")
            self._tx_depth = 1
            yield self
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise
        finally:
            self._tx_depth = 0
            cur.close()

    # ---------------------------- Reads ----------------------------

    def load(self, key: str, default: Any = None) -> Any:
        """
        Return the decoded document stored under `key`.

        A missing key or a value that is not valid JSON yields a copy of
        `default`; the bad value is logged and left in place.
        """
        row = self.conn.execute(
            f"SELECT value FROM {TABLE_DOCUMENTS} WHERE key=?", (key,)
        ).fetchone()
        if row is None:
            return copy.deepcopy(default)
        try:
            return json.loads(row[0])
        except (TypeError, ValueError) as e:
            _log.error("Document %r is not valid JSON, using default: %s", key, e)
            return copy.deepcopy(default)

    def keys(self) -> List[str]:
        rows = self.conn.execute(
            f"SELECT key FROM {TABLE_DOCUMENTS} ORDER BY key"
        ).fetchall()
        return [r[0] for r in rows]

    def exists(self, key: str) -> bool:
        row = self.conn.execute(
            f"SELECT 1 FROM {TABLE_DOCUMENTS} WHERE key=? LIMIT 1", (key,)
        ).fetchone()
        return row is not None

    # ---------------------------- Writes ----------------------------

    def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self.transaction():
            self.conn.execute(
                f"""
                INSERT INTO {TABLE_DOCUMENTS}(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, payload),
            )

    def save_many(self, docs: Dict[str, Any]) -> None:
        with self.transaction():
            for key, value in docs.items():
                self.save(key, value)

    def delete(self, key: str) -> None:
        with self.transaction():
            self.conn.execute(f"DELETE FROM {TABLE_DOCUMENTS} WHERE key=?", (key,))

    # ---------------------------- Backup / restore ----------------------------

    def export_all(self) -> Dict[str, Any]:
        """All documents as one JSON-ready dict (unparseable values become None)."""
        return {k: self.load(k) for k in self.keys()}

    def import_data(self, data: Dict[str, Any]) -> None:
        """Write every key in `data`; keys not mentioned are left untouched."""
        if not isinstance(data, dict):
            raise ValueError("Backup data must be a JSON object of key → document.")
        self.save_many(data)
        _log.info("Imported %d documents", len(data))
