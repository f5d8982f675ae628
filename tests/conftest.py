"""
Pytest configuration and fixtures for solrindex tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from solrindex.addons.indexer import AddonIndexer
from solrindex.addons.manager import AddonManager
from solrindex.mapping.mapper import ItemMapper
from solrindex.mapping.uri import UriResolver, UrlBuilder
from solrindex.records.model import DUBLIN_CORE, ElementText, FieldDefinition, Record
from solrindex.records.repository import InMemoryRepository
from solrindex.settings import DEFAULT_ADDON_DIR
from solrindex.solr.client import SolrConnection

BASE_URL = "http://example.org"


def _dc(field: str, text: str) -> ElementText:
    """Build a Dublin Core element text."""
    return ElementText(DUBLIN_CORE, field, text)


def _item(record_id: int, *texts: tuple[str, str], **kwargs: Any) -> Record:
    """Build an item from ``(field, text)`` pairs."""
    return Record(
        table="Item",
        id=record_id,
        metadata=[_dc(name, text) for name, text in texts],
        **kwargs,
    )


class _FakeSolrClient:
    """Records every call instead of talking HTTP."""

    def __init__(self, connection: SolrConnection | None = None) -> None:
        self.connection = connection or SolrConnection()
        self.calls: list[tuple[str, Any]] = []
        self.documents: list[dict[str, Any]] = []
        self.ping_result = True

    def add_documents(self, documents) -> int:
        docs = [d.to_dict() for d in documents]
        self.documents.extend(docs)
        self.calls.append(("add", [d["id"] for d in docs]))
        return len(docs)

    def commit(self) -> None:
        self.calls.append(("commit", None))

    def optimize(self) -> None:
        self.calls.append(("optimize", None))

    def delete_by_query(self, query: str) -> None:
        self.calls.append(("delete", query))

    def ping(self) -> bool:
        return self.ping_result

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def field_definitions() -> list[FieldDefinition]:
    """Field definitions for the generic element mapping."""
    return [
        FieldDefinition(DUBLIN_CORE, "Title", "50", is_indexed=True, is_facet=True),
        FieldDefinition(DUBLIN_CORE, "Subject", "49", is_indexed=True),
        FieldDefinition(DUBLIN_CORE, "Description", "41", is_indexed=True),
        FieldDefinition(DUBLIN_CORE, "Publisher", "45", is_indexed=False, is_facet=True),
    ]


@pytest.fixture
def seal_item() -> Record:
    """A fully described seal."""
    return _item(
        1,
        ("Title", "Cylinder seal of Ur-Nammu"),
        ("Publisher", "Louvre"),
        ("Provenance", "Acquisition history : bought 1912"),
        ("Provenance", "De Clercq collection"),
        ("Temporal Coverage", "Period remarks : ur III (2112-2004 BC)"),
        ("Spatial Coverage", "Provenience remarks : ur"),
        ("Medium", " lapis lazuli "),
        ("Format", "Height : 28 mm"),
        ("Format", "Width : 15 mm"),
        ("Format", "Weight : 12 g"),
        ("Subject", "Subgenre remarks : presentation scene"),
        ("Subject", "king"),
        ("Subject", "goddess"),
        public=True,
        featured=True,
        collection_id=1,
        item_type="Seal",
        tags=["cylinder", "ur III"],
    )


@pytest.fixture
def repo(field_definitions, seal_item) -> InMemoryRepository:
    """Repository holding items, files, collections and addon records."""
    records = [
        Record(table="Collection", id=1, metadata=[_dc("Title", "Louvre seals")]),
        Record(table="Collection", id=2, metadata=[_dc("Title", "Private loans")]),
        seal_item,
        _item(2, ("Title", "Stamp seal"), public=False, collection_id=2),
        _item(3, ("Title", "Loose seal")),
        Record(
            table="File",
            id=10,
            metadata=[_dc("Description", "Photograph of the impression")],
            columns={"item_id": 1},
        ),
        Record(table="Exhibit", id=1, slug="kings", public=True, tags=["royal"],
               columns={"title": "Kings", "description": "Royal seals"}),
        Record(table="Exhibit", id=2, slug="drafts", public=False,
               columns={"title": "Drafts"}),
        Record(table="ExhibitPage", id=5, slug="throne",
               columns={"exhibit_id": 1, "title": "The throne"}),
        Record(table="ExhibitPageEntry", id=7,
               columns={"page_id": 5, "text": "A royal audience", "caption": "Seal 1"}),
        Record(table="ExhibitPageEntry", id=8,
               columns={"page_id": 5, "text": "The king enthroned"}),
        Record(table="SimplePagesPage", id=3, slug="about",
               columns={"title": "About", "text": "About the corpus", "is_published": True}),
        Record(table="SimplePagesPage", id=4, slug="draft",
               columns={"title": "Draft", "is_published": False}),
    ]
    return InMemoryRepository(records, field_definitions)


@pytest.fixture
def url_builder() -> UrlBuilder:
    """URL builder rooted at the test site."""
    return UrlBuilder(BASE_URL)


@pytest.fixture
def manager(repo, url_builder) -> AddonManager:
    """Addon registry over the shipped addon sources."""
    indexer = AddonIndexer(repo, UriResolver(url_builder, repo))
    return AddonManager(repo, DEFAULT_ADDON_DIR, indexer)


@pytest.fixture
def mapper(repo, url_builder) -> ItemMapper:
    """Item mapper with a fresh extraction log."""
    return ItemMapper(repo, url_builder)


@pytest.fixture
def fake_client() -> _FakeSolrClient:
    """Call-recording Solr client."""
    return _FakeSolrClient()


@pytest.fixture
def make_item():
    """Factory for items built from ``(field, text)`` pairs."""
    return _item
