"""Addon registry.

Holds the parsed addon collection and answers the per-record questions
the indexer asks: which addon governs a record, what its document looks
like, and which dependent records must be resaved when it changes.

Cascade resaves go through ``Repository.save``, whose hooks usually
re-enter this registry. Every cascade started while another is running
shares the outer cascade's visited set, so a cycle of child and remote
references resaves each record at most once per cascade.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from solrindex.addons.config import AddonConfig
from solrindex.addons.indexer import AddonIndexer, addon_document_id
from solrindex.addons.parser import AddonConfigParser
from solrindex.mapping.document import Document
from solrindex.records.model import Record
from solrindex.records.repository import Repository
from solrindex.settings import DEFAULT_ADDON_DIR

logger = logging.getLogger(__name__)

RecordKey = tuple[str, int]


@dataclass
class CascadeFailure:
    """A dependent record that could not be resaved.

    Attributes:
        table: Table of the dependent record.
        record_id: ID of the dependent record, as referenced.
        reason: What went wrong.
    """

    table: str
    record_id: Any
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"table": self.table, "record_id": self.record_id, "reason": self.reason}


@dataclass
class CascadeReport:
    """Outcome of one cascade resave.

    Attributes:
        origin: The record whose change triggered the cascade.
        resaved: Dependent records resaved, in order.
        skipped: Dependents already resaved earlier in the cascade.
        failures: Dependents whose resave failed.
    """

    origin: RecordKey
    resaved: list[RecordKey] = field(default_factory=list)
    skipped: list[RecordKey] = field(default_factory=list)
    failures: list[CascadeFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True if no dependent failed."""
        return not self.failures

    def merge(self, other: CascadeReport) -> None:
        """Fold another report into this one."""
        self.resaved.extend(other.resaved)
        self.skipped.extend(other.skipped)
        self.failures.extend(other.failures)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "origin": list(self.origin),
            "resaved": [list(k) for k in self.resaved],
            "skipped": [list(k) for k in self.skipped],
            "failures": [f.to_dict() for f in self.failures],
        }


class AddonManager:
    """Registry of addon configs for one repository.

    The addon collection is parsed lazily on first use and cached.
    Passing a parser to ``parse_all`` (or to the per-record methods)
    parses again and appends addons for tables not yet registered.
    Call ``reset`` to discard the cache before a clean reparse.

    Args:
        repository: Repository the addon records live in.
        addon_dir: Directory of addon sources.
        indexer: Addon document builder. Built from the repository
            when omitted.

    Example::

        manager = AddonManager(repo, Path("addon_configs"))
        doc = manager.index_record(page)
        manager.resave_children(exhibit)
    """

    def __init__(
        self,
        repository: Repository,
        addon_dir: str | Path | None = None,
        indexer: AddonIndexer | None = None,
    ) -> None:
        self._repository = repository
        self.addon_dir = Path(addon_dir) if addon_dir is not None else DEFAULT_ADDON_DIR
        self._indexer = indexer or AddonIndexer(repository)
        self._addons: list[AddonConfig] | None = None
        self._visited: set[RecordKey] | None = None

    # ---------------------------------------------------------------
    # Cache
    # ---------------------------------------------------------------

    @property
    def is_parsed(self) -> bool:
        """Return True once the addon collection has been parsed."""
        return self._addons is not None

    @property
    def addons(self) -> list[AddonConfig]:
        """Return the cached addons (empty before the first parse)."""
        return list(self._addons or [])

    def parse_all(self, parser: AddonConfigParser | None = None) -> list[AddonConfig]:
        """Parse the addon directory and merge the result into the cache.

        Addons whose table is already registered are skipped, keeping
        tables unique.

        Args:
            parser: Parser to use. Defaults to ``AddonConfigParser``.

        Returns:
            The full cached collection.

        Raises:
            ConfigError: If any source is malformed. The cache is left
                as it was.
        """
        parser = parser or AddonConfigParser()
        parsed = parser.parse_dir(self.addon_dir)

        addons = list(self._addons or [])
        registered = {a.table for a in addons}
        for addon in parsed:
            if addon.table in registered:
                logger.warning(
                    "Skipping addon for %s from %s: table already registered",
                    addon.table,
                    addon.source or "<unknown>",
                )
                continue
            registered.add(addon.table)
            addons.append(addon)

        self._addons = addons
        return list(addons)

    def reset(self) -> None:
        """Discard the cached addons; the next use reparses."""
        self._addons = None

    def _ensure_parsed(self, parser: AddonConfigParser | None = None) -> list[AddonConfig]:
        if self._addons is None or parser is not None:
            self.parse_all(parser)
        return self._addons or []

    # ---------------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------------

    def find_addon_for_record(self, record: Record) -> AddonConfig | None:
        """Return the first registered addon governing the record's table."""
        for addon in self._ensure_parsed():
            if addon.table == record.table:
                return addon
        return None

    def get_id(self, record: Record, parser: AddonConfigParser | None = None) -> str | None:
        """Return the document id of an addon record, or None."""
        self._ensure_parsed(parser)
        addon = self.find_addon_for_record(record)
        if addon is None:
            return None
        return addon_document_id(addon, record)

    # ---------------------------------------------------------------
    # Indexing
    # ---------------------------------------------------------------

    def reindex_addons(self, parser: AddonConfigParser | None = None) -> list[Document]:
        """Build documents for every indexable addon record."""
        addons = self._ensure_parsed(parser)
        return self._indexer.index_all(addons)

    def index_record(
        self, record: Record, parser: AddonConfigParser | None = None
    ) -> Document | None:
        """Return the document for a record, or None if it is not indexed.

        A record is not indexed when no addon governs its table or the
        addon's flag column is not set on it.
        """
        self._ensure_parsed(parser)
        addon = self.find_addon_for_record(record)
        if addon is None or not self._indexer.is_record_indexed(record, addon):
            return None
        return self._indexer.index_record(record, addon)

    # ---------------------------------------------------------------
    # Cascades
    # ---------------------------------------------------------------

    def resave_children(self, record: Record) -> CascadeReport:
        """Resave every child record that references this record.

        Does nothing when no addon governs the record.
        """
        report = CascadeReport(origin=record.key)
        addon = self.find_addon_for_record(record)
        if addon is None:
            return report

        with self._cascade(record):
            for child in addon.children:
                rows = self._repository.find_by(child.table, child.parent_key, record.id)
                for row in rows:
                    self._resave(row, report)
        return report

    def resave_remote_parent(self, record: Record) -> CascadeReport:
        """Resave every parent record that pulls values from this record.

        Each addon field whose remote table is the record's table names
        the column holding the parent id. A missing parent is reported
        once, however many fields name it.
        """
        report = CascadeReport(origin=record.key)
        missing: set[tuple[str, Any]] = set()
        with self._cascade(record):
            for addon in self._ensure_parsed():
                for fld in addon.remote_fields:
                    if fld.remote is None or fld.remote.table != record.table:
                        continue
                    parent_id = record.get(fld.remote.key)
                    parent = self._repository.get(addon.table, parent_id)
                    if parent is None:
                        if (addon.table, parent_id) in missing:
                            continue
                        missing.add((addon.table, parent_id))
                        self._fail(
                            report,
                            CascadeFailure(addon.table, parent_id, "parent record not found"),
                        )
                        continue
                    self._resave(parent, report)
        return report

    def cascade(self, record: Record) -> CascadeReport:
        """Run both cascades for a record under one visited set."""
        report = CascadeReport(origin=record.key)
        with self._cascade(record):
            report.merge(self.resave_children(record))
            report.merge(self.resave_remote_parent(record))
        return report

    @contextmanager
    def _cascade(self, origin: Record) -> Iterator[set[RecordKey]]:
        outermost = self._visited is None
        if self._visited is None:
            self._visited = set()
        visited = self._visited
        visited.add(origin.key)
        try:
            yield visited
        finally:
            if outermost:
                self._visited = None

    def _resave(self, record: Record, report: CascadeReport) -> None:
        visited = self._visited if self._visited is not None else set()
        if record.key in visited:
            report.skipped.append(record.key)
            return
        visited.add(record.key)
        try:
            self._repository.save(record)
        except Exception as exc:  # each dependent fails on its own
            self._fail(report, CascadeFailure(record.table, record.id, str(exc) or repr(exc)))
            return
        report.resaved.append(record.key)

    @staticmethod
    def _fail(report: CascadeReport, failure: CascadeFailure) -> None:
        logger.warning(
            "Cascade from %s #%s: could not resave %s #%s: %s",
            report.origin[0],
            report.origin[1],
            failure.table,
            failure.record_id,
            failure.reason,
        )
        report.failures.append(failure)
