"""Repository access for the indexer.

The indexer reads records through the narrow ``Repository`` protocol:
fetch by id, fetch by foreign key, paged listing, and save/delete
(which fire hooks so indexing can follow repository writes).

``InMemoryRepository`` implements the protocol for tests and for
embedding the indexer in tools that already hold their records.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from solrindex.records.model import FieldCatalog, FieldDefinition, Record

logger = logging.getLogger(__name__)

RecordHook = Callable[[Record], None]
RecordFilter = Callable[[Record], bool]


@runtime_checkable
class Repository(Protocol):
    """Protocol for content repository backends."""

    def get(self, table: str, record_id: Any) -> Record | None:
        """Fetch one record by id, or None if it does not exist."""
        ...

    def find_by(self, table: str, column: str, value: Any) -> list[Record]:
        """Fetch all records of a table whose column equals value."""
        ...

    def list_page(
        self,
        table: str,
        page: int,
        page_size: int,
        *,
        sort_by: str = "id",
        exclude: RecordFilter | None = None,
    ) -> list[Record]:
        """Fetch one page (1-based) of a table, sorted ascending."""
        ...

    def save(self, record: Record) -> None:
        """Persist a record and fire after-save hooks."""
        ...

    def delete(self, record: Record) -> None:
        """Remove a record and fire after-delete hooks."""
        ...

    def field_catalog(self) -> FieldCatalog:
        """Return the search settings for metadata elements."""
        ...


class InMemoryRepository:
    """Dictionary-backed repository with save/delete hooks.

    Args:
        records: Initial records. Later records replace earlier ones
            with the same ``(table, id)``.
        fields: Field definitions for the generic element mapping.

    Example::

        repo = InMemoryRepository([Record(table="Item", id=1)])
        repo.add_save_hook(indexer.after_save)
        repo.save(repo.get("Item", 1))
    """

    def __init__(
        self,
        records: list[Record] | None = None,
        fields: list[FieldDefinition] | None = None,
    ) -> None:
        self._tables: dict[str, dict[int, Record]] = {}
        self._catalog = FieldCatalog(fields or [])
        self._save_hooks: list[RecordHook] = []
        self._delete_hooks: list[RecordHook] = []
        for record in records or []:
            self.put(record)

    # ---------------------------------------------------------------
    # Hooks
    # ---------------------------------------------------------------

    def add_save_hook(self, hook: RecordHook) -> None:
        """Register a callable run after every save."""
        self._save_hooks.append(hook)

    def add_delete_hook(self, hook: RecordHook) -> None:
        """Register a callable run after every delete."""
        self._delete_hooks.append(hook)

    # ---------------------------------------------------------------
    # Protocol
    # ---------------------------------------------------------------

    def put(self, record: Record) -> None:
        """Store a record without firing hooks."""
        self._tables.setdefault(record.table, {})[record.id] = record

    def get(self, table: str, record_id: Any) -> Record | None:
        if record_id is None:
            return None
        try:
            key = int(record_id)
        except (TypeError, ValueError):
            return None
        return self._tables.get(table, {}).get(key)

    def find_by(self, table: str, column: str, value: Any) -> list[Record]:
        rows = self._tables.get(table, {}).values()
        return sorted(
            (r for r in rows if _loose_equal(r.get(column), value)),
            key=lambda r: r.id,
        )

    def list_page(
        self,
        table: str,
        page: int,
        page_size: int,
        *,
        sort_by: str = "id",
        exclude: RecordFilter | None = None,
    ) -> list[Record]:
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")
        rows = [r for r in self._tables.get(table, {}).values() if not (exclude and exclude(r))]
        rows.sort(key=lambda r: _sort_key(r.get(sort_by)))
        start = (page - 1) * page_size
        return rows[start : start + page_size]

    def save(self, record: Record) -> None:
        self.put(record)
        for hook in self._save_hooks:
            hook(record)

    def delete(self, record: Record) -> None:
        self._tables.get(record.table, {}).pop(record.id, None)
        for hook in self._delete_hooks:
            hook(record)

    def field_catalog(self) -> FieldCatalog:
        return self._catalog

    # ---------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------

    def count(self, table: str) -> int:
        """Return the number of records in a table."""
        return len(self._tables.get(table, {}))

    @property
    def tables(self) -> list[str]:
        """Return the names of tables holding at least one record."""
        return [name for name, rows in self._tables.items() if rows]

    @classmethod
    def from_json(cls, path: str | Path) -> InMemoryRepository:
        """Load records and field definitions from a JSON dump.

        The file holds ``{"records": [...], "fields": [...]}`` where
        records use ``Record.to_dict`` shape and fields carry
        ``vocabulary``, ``name``, ``slug``, ``is_indexed``, ``is_facet``.

        Raises:
            ValueError: If the file is not a JSON object.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Repository dump must be a JSON object: {path}")
        fields = [
            FieldDefinition(
                vocabulary=f.get("vocabulary", "Dublin Core"),
                name=f["name"],
                slug=str(f["slug"]),
                is_indexed=bool(f.get("is_indexed", True)),
                is_facet=bool(f.get("is_facet", False)),
            )
            for f in data.get("fields", [])
        ]
        records = [Record.from_dict(r) for r in data.get("records", [])]
        logger.info("Loaded %d records from %s", len(records), path)
        return cls(records=records, fields=fields)


def _loose_equal(left: Any, right: Any) -> bool:
    """Compare column values the way a SQL ``=`` on ids would."""
    if left is None or right is None:
        return False
    if left == right:
        return True
    return str(left) == str(right)


def _sort_key(value: Any) -> tuple[int, Any]:
    """Sort None first, numbers numerically, everything else as text."""
    if value is None:
        return (0, 0)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (1, value)
    return (2, str(value))
