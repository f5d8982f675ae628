"""Addon record to document mapping.

Builds documents for secondary record types from their addon config:
plain fields are read from the record's columns, remote fields from
the rows of the remote table that point back at the record.
"""

from __future__ import annotations

import logging
from typing import Any

from solrindex.addons.config import AddonConfig, FieldConfig
from solrindex.mapping.document import Document
from solrindex.mapping.uri import UriResolver, UrlBuilder
from solrindex.records.model import Record
from solrindex.records.repository import Repository
from solrindex.settings import DEFAULT_FACET_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def addon_document_id(addon: AddonConfig, record: Record) -> str:
    """Return the document id of an addon record."""
    return f"{addon.table}_{record.id}"


class AddonIndexer:
    """Maps addon records to documents.

    Args:
        repository: Source of addon and remote records.
        resolver: Computes the ``url`` field. Built from the repository
            when omitted.
        page_size: Records fetched per page in ``index_all``.
        facet_prefix: Namespace prefix carried by the documents.
    """

    def __init__(
        self,
        repository: Repository,
        resolver: UriResolver | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        facet_prefix: str = DEFAULT_FACET_PREFIX,
    ) -> None:
        self._repository = repository
        self._resolver = resolver or UriResolver(UrlBuilder(), repository)
        self._page_size = page_size
        self._facet_prefix = facet_prefix

    def index_all(self, addons: list[AddonConfig]) -> list[Document]:
        """Build documents for every indexable record of every addon.

        Addons are visited in registration order and records in
        repository id order.
        """
        docs: list[Document] = []
        for addon in addons:
            count = 0
            page = 1
            while True:
                records = self._repository.list_page(addon.table, page, self._page_size)
                if not records:
                    break
                for record in records:
                    if self.is_record_indexed(record, addon):
                        docs.append(self.index_record(record, addon))
                        count += 1
                page += 1
            logger.info("Indexed %d %s record(s)", count, addon.table)
        return docs

    @staticmethod
    def is_record_indexed(record: Record, addon: AddonConfig) -> bool:
        """Return True if the addon's flag column is set (or it has none)."""
        if addon.flag is None:
            return True
        return bool(record.get(addon.flag))

    def index_record(self, record: Record, addon: AddonConfig) -> Document:
        """Build the document for one addon record."""
        doc = Document(id=addon_document_id(addon, record), facet_prefix=self._facet_prefix)
        doc.set_field("model", addon.table)
        doc.set_field("modelid", record.id)
        doc.set_field("resulttype", addon.result_type)
        doc.set_field("url", self._resolve_url(record))
        doc.set_field("public", self.is_record_indexed(record, addon))

        title_field = addon.title_field
        if title_field is not None:
            titles = self._field_values(record, title_field)
            doc.set_field("title", titles[0] if titles else None)

        for fld in addon.fields:
            for value in self._field_values(record, fld):
                if fld.indexed:
                    doc.add_value(fld.index_key, value)
                if fld.facet:
                    doc.add_value(fld.facet_key, value)

        if addon.tagged:
            for tag in record.tags:
                doc.add_value("tag", tag)

        return doc

    # ---------------------------------------------------------------

    def _field_values(self, record: Record, fld: FieldConfig) -> list[Any]:
        if fld.remote is None:
            value = record.get(fld.name)
            return [] if value is None else [value]
        rows = self._repository.find_by(fld.remote.table, fld.remote.key, record.id)
        return [row.get(fld.name) for row in rows if row.get(fld.name) is not None]

    def _resolve_url(self, record: Record) -> str | None:
        try:
            return self._resolver.resolve(record)
        except ValueError as exc:
            logger.warning("No URL for %s #%d: %s", record.table, record.id, exc)
            return None
