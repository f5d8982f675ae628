"""Reindex orchestrator.

Drives full reindex and clear runs against Solr and keeps the index in
step with repository saves and deletes. This is the only layer that
retries Solr calls; mapping and cascade logic live in ``mapping`` and
``addons``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from solrindex.addons.indexer import AddonIndexer
from solrindex.addons.manager import AddonManager, CascadeReport
from solrindex.errors import ExtractionError, SolrConnectionError, SolrUnavailableError
from solrindex.mapping.document import Document
from solrindex.mapping.log import ExtractionLog
from solrindex.mapping.mapper import ITEM_TABLE, ItemMapper, item_document_id
from solrindex.mapping.uri import UriResolver, UrlBuilder
from solrindex.records.model import Record
from solrindex.records.repository import InMemoryRepository, Repository
from solrindex.settings import IndexSettings
from solrindex.solr.client import SolrClient, SolrConnection

logger = logging.getLogger(__name__)

ClientFactory = Callable[[SolrConnection, float], SolrClient]

# First backoff delay in seconds; doubles on each further attempt.
RETRY_DELAY = 0.5


def _default_client_factory(connection: SolrConnection, timeout: float) -> SolrClient:
    return SolrClient(connection, timeout=timeout)


@dataclass
class IndexReport:
    """Summary of a full reindex run.

    Attributes:
        items: Item documents submitted.
        addons: Addon documents submitted.
        pages: Item pages processed.
        errors: Extraction errors reported during the run.
    """

    items: int = 0
    addons: int = 0
    pages: int = 0
    errors: list[ExtractionError] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Return the number of documents submitted."""
        return self.items + self.addons

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "items": self.items,
            "addons": self.addons,
            "pages": self.pages,
            "total": self.total,
            "errors": [e.to_dict() for e in self.errors],
        }


class SearchIndexer:
    """Indexes a repository into Solr.

    Args:
        repository: Source of items and addon records.
        settings: Connection defaults and run knobs.
        manager: Addon registry. Built from settings when omitted.
        client_factory: Builds a client for a connection and timeout.
        sleep_func: Sleep used between retries of an unreachable Solr.

    Example::

        indexer = SearchIndexer(repo, IndexSettings(solr_core="seals"))
        indexer.install(repo)
        report = indexer.index_all()
    """

    def __init__(
        self,
        repository: Repository,
        settings: IndexSettings | None = None,
        manager: AddonManager | None = None,
        client_factory: ClientFactory | None = None,
        sleep_func: Callable[[float], None] | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings or IndexSettings()
        # Extraction errors of the latest run or save only.
        self.log = ExtractionLog()

        urls = UrlBuilder(self.settings.base_url, self.settings.admin_path)
        self.mapper = ItemMapper(
            repository,
            urls,
            log=self.log,
            facet_prefix=self.settings.facet_prefix,
        )
        self.manager = manager or AddonManager(
            repository,
            self.settings.addon_dir,
            AddonIndexer(
                repository,
                UriResolver(urls, repository),
                page_size=self.settings.page_size,
                facet_prefix=self.settings.facet_prefix,
            ),
        )
        self._client_factory = client_factory or _default_client_factory
        self._sleep = sleep_func or time.sleep

    # ---------------------------------------------------------------
    # Connection
    # ---------------------------------------------------------------

    def connect(self, options: Mapping[str, Any] | None = None) -> SolrClient:
        """Return a client for the configured core, with per-call overrides."""
        connection = SolrConnection.from_options(options, self.settings)
        return self._client_factory(connection, self.settings.timeout_seconds)

    def ping(self, options: Mapping[str, Any] | None = None) -> bool:
        """Return True if Solr answers; any failure counts as False."""
        try:
            return self.connect(options).ping()
        except Exception as exc:
            logger.info("Solr ping failed: %s", exc)
            return False

    # ---------------------------------------------------------------
    # Bulk runs
    # ---------------------------------------------------------------

    def index_all(self, options: Mapping[str, Any] | None = None) -> IndexReport:
        """Reindex every item and every indexable addon record.

        Items are paged in id order, public and private alike, skipping
        items in excluded collections. Each page is committed. Addon
        documents follow in one batch, then the index is optimized.

        Raises:
            SolrClientError: If Solr rejects a request.
            SolrUnavailableError: If Solr stays unreachable.
        """
        client = self.connect(options)
        report = IndexReport()
        self.log.clear()
        excluded = set(self.settings.excluded_collection_ids)

        def is_excluded(record: Record) -> bool:
            return record.collection_id is not None and record.collection_id in excluded

        page = 1
        while True:
            items = self.repository.list_page(
                ITEM_TABLE, page, self.settings.page_size, sort_by="id", exclude=is_excluded
            )
            if not items:
                break
            for item in items:
                self._submit(client, "add_documents", [self.mapper.map_item(item)])
                report.items += 1
            self._submit(client, "commit")
            report.pages += 1
            page += 1

        docs = self.manager.reindex_addons()
        self._submit(client, "add_documents", docs)
        self._submit(client, "commit")
        report.addons = len(docs)

        self._submit(client, "optimize")
        report.errors = self.log.entries
        logger.info(
            "Indexed %d item(s) over %d page(s) and %d addon record(s); %d extraction error(s)",
            report.items,
            report.pages,
            report.addons,
            len(report.errors),
        )
        return report

    def delete_all(self, options: Mapping[str, Any] | None = None) -> None:
        """Remove every document from the index."""
        client = self.connect(options)
        self._submit(client, "delete_by_query", "*:*")
        self._submit(client, "commit")
        self._submit(client, "optimize")
        logger.info("Cleared Solr core %s", client.connection.core)

    # ---------------------------------------------------------------
    # Repository hooks
    # ---------------------------------------------------------------

    def document_for(self, record: Record) -> Document | None:
        """Return the current document for a record, or None if not indexed."""
        if record.table == ITEM_TABLE:
            return self.mapper.map_item(record)
        return self.manager.index_record(record)

    def document_id(self, record: Record) -> str | None:
        """Return the document id for a record, or None if not indexed."""
        if record.table == ITEM_TABLE:
            return item_document_id(record.id)
        return self.manager.get_id(record)

    def after_save(self, record: Record) -> CascadeReport:
        """Refresh a saved record's document and cascade to dependents.

        A record that maps to no document but has an id (an addon record
        whose flag is cleared) is removed from the index. Saving an item
        replaces ``log`` with that item's extraction errors.
        """
        client = self.connect()
        if record.table == ITEM_TABLE:
            self.log.clear()
        doc = self.document_for(record)
        if doc is not None:
            self._submit(client, "add_documents", [doc])
            self._submit(client, "commit")
        else:
            doc_id = self.document_id(record)
            if doc_id is not None:
                self._delete_id(client, doc_id)
        return self.manager.cascade(record)

    def after_delete(self, record: Record) -> None:
        """Remove a deleted record's document."""
        doc_id = self.document_id(record)
        if doc_id is None:
            return
        self._delete_id(self.connect(), doc_id)

    def install(self, repository: InMemoryRepository | None = None) -> None:
        """Register ``after_save`` and ``after_delete`` as repository hooks."""
        target = repository if repository is not None else self.repository
        target.add_save_hook(self.after_save)
        target.add_delete_hook(self.after_delete)

    # ---------------------------------------------------------------

    def _delete_id(self, client: SolrClient, doc_id: str) -> None:
        self._submit(client, "delete_by_query", f'id:"{doc_id}"')
        self._submit(client, "commit")

    def _submit(self, client: SolrClient, operation: str, *args: Any) -> Any:
        """Run one client operation, retrying while Solr is unreachable.

        Only transport failures are retried; a rejection from Solr is
        raised on the first attempt.

        Raises:
            SolrUnavailableError: If every attempt failed to reach Solr.
        """
        attempts = self.settings.retry_attempts
        delay = RETRY_DELAY
        for attempt in range(1, attempts + 1):
            try:
                return getattr(client, operation)(*args)
            except SolrConnectionError as exc:
                if attempt == attempts:
                    raise SolrUnavailableError(
                        client.connection.base_url, operation, attempts, exc
                    ) from exc
                logger.warning(
                    "%s on %s failed (attempt %d/%d): %s",
                    operation,
                    client.connection.base_url,
                    attempt,
                    attempts,
                    exc,
                )
                self._sleep(delay)
                delay *= 2
