"""Observability channel for recoverable extraction errors.

Each bad value is logged as a warning and kept, so an admin run can
show which records need fixing.
"""

from __future__ import annotations

import logging
from typing import Any

from solrindex.errors import ExtractionError

logger = logging.getLogger(__name__)


class ExtractionLog:
    """Collects extraction errors keyed by record id.

    Example::

        log = ExtractionLog()
        mapper = ItemMapper(repo, resolver, log=log)
        mapper.map_item(item)
        for error in log.for_record(item.id):
            print(error)
    """

    def __init__(self) -> None:
        self._entries: list[ExtractionError] = []

    def report(self, error: ExtractionError) -> None:
        """Record and log one extraction error."""
        self._entries.append(error)
        logger.warning(
            "Indexing error: %s (%s)",
            error,
            error.admin_url or f"record #{error.record_id}",
        )

    @property
    def entries(self) -> list[ExtractionError]:
        """Return all reported errors, in report order."""
        return list(self._entries)

    def for_record(self, record_id: int) -> list[ExtractionError]:
        """Return the errors reported for one record."""
        return [e for e in self._entries if e.record_id == record_id]

    def clear(self) -> None:
        """Forget all entries."""
        self._entries.clear()

    def to_dict(self) -> list[dict[str, Any]]:
        """Serialize all entries."""
        return [e.to_dict() for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
