"""Primary record (Item) to document mapping.

Builds one document per item from three layers: system fields, the
domain facet rules, and the generic element mapping driven by the
field catalog. Attached files contribute their element texts through
the generic layer.
"""

from __future__ import annotations

import logging

from solrindex.errors import ExtractionError
from solrindex.mapping.document import Document
from solrindex.mapping.facets import FacetExtractor
from solrindex.mapping.log import ExtractionLog
from solrindex.mapping.uri import UrlBuilder
from solrindex.records.model import DUBLIN_CORE, FieldCatalog, Record
from solrindex.records.repository import Repository
from solrindex.settings import DEFAULT_FACET_PREFIX

logger = logging.getLogger(__name__)

ITEM_TABLE = "Item"
COLLECTION_TABLE = "Collection"
FILE_TABLE = "File"
FILE_ITEM_KEY = "item_id"


def item_document_id(record_id: int) -> str:
    """Return the document id of an item."""
    return f"{ITEM_TABLE}_{record_id}"


def index_element_texts(catalog: FieldCatalog, record: Record, document: Document) -> None:
    """Copy a record's element texts into the document.

    Each text whose field definition is indexed goes to the text key,
    and each whose definition is a facet goes to the string key. Texts
    without a definition are skipped.
    """
    for text in record.metadata:
        definition = catalog.find_by_text(text)
        if definition is None:
            continue
        if definition.is_indexed:
            document.add_value(definition.index_key, text.text)
        if definition.is_facet:
            document.add_value(definition.facet_key, text.text)


class ItemMapper:
    """Maps items to search documents.

    Args:
        repository: Source of collections, files and field definitions.
        url_builder: Builds admin links for extraction diagnostics.
        facets: Domain facet rules. Defaults to the seal rules.
        log: Receives recoverable extraction errors.
        facet_prefix: Namespace prefix for domain facets.

    Example::

        mapper = ItemMapper(repo, UrlBuilder("http://example.org"))
        doc = mapper.map_item(repo.get("Item", 1))
        doc.to_dict()["id"]  # "Item_1"
    """

    def __init__(
        self,
        repository: Repository,
        url_builder: UrlBuilder | None = None,
        facets: FacetExtractor | None = None,
        log: ExtractionLog | None = None,
        facet_prefix: str = DEFAULT_FACET_PREFIX,
    ) -> None:
        self._repository = repository
        self._urls = url_builder or UrlBuilder()
        self._facets = facets or FacetExtractor()
        self.log = log if log is not None else ExtractionLog()
        self._facet_prefix = facet_prefix

    def map_item(self, item: Record) -> Document:
        """Build the document for one item.

        Args:
            item: An ``Item`` record.

        Returns:
            A fresh document; extraction errors go to ``self.log``.
        """
        doc = Document(id=item_document_id(item.id), facet_prefix=self._facet_prefix)
        doc.set_field("resulttype", ITEM_TABLE)
        doc.set_field("model", ITEM_TABLE)
        doc.set_field("modelid", item.id)

        def on_error(label: str, value: str) -> None:
            self.log.report(
                ExtractionError(
                    record_id=item.id,
                    field=label,
                    value=value,
                    admin_url=self._urls.admin_url(f"items/show/{item.id}"),
                )
            )

        self._facets.extract(item, doc, on_error)

        doc.set_field("public", item.public)
        doc.set_field("title", item.value(DUBLIN_CORE, "Title") or None)

        catalog = self._repository.field_catalog()
        index_element_texts(catalog, item, doc)

        for tag in item.tags:
            doc.add_value("tag", tag)

        if item.collection_id is not None:
            collection = self._repository.get(COLLECTION_TABLE, item.collection_id)
            if collection is not None:
                doc.set_field("collection", collection.value(DUBLIN_CORE, "Title") or None)
            else:
                logger.debug("Item %d points to missing collection %s", item.id, item.collection_id)

        if item.item_type:
            doc.set_field("itemtype", item.item_type)

        doc.set_field("featured", bool(item.featured))

        for file_record in self._repository.find_by(FILE_TABLE, FILE_ITEM_KEY, item.id):
            index_element_texts(catalog, file_record, doc)

        return doc
