"""Solr indexing for repository records.

Maps items and configuration-declared addon records to flat Solr
documents, and keeps the index in step with repository changes.
"""

from solrindex.addons import AddonConfigParser, AddonManager
from solrindex.errors import (
    ConfigError,
    ExtractionError,
    SolrClientError,
    SolrConnectionError,
    SolrIndexError,
    SolrUnavailableError,
)
from solrindex.indexing import IndexReport, SearchIndexer
from solrindex.mapping import Document, ItemMapper
from solrindex.records import InMemoryRepository, Record
from solrindex.settings import IndexSettings

__version__ = "0.1.0"

__all__ = [
    "AddonConfigParser",
    "AddonManager",
    "ConfigError",
    "Document",
    "ExtractionError",
    "IndexReport",
    "IndexSettings",
    "InMemoryRepository",
    "ItemMapper",
    "Record",
    "SearchIndexer",
    "SolrClientError",
    "SolrConnectionError",
    "SolrIndexError",
    "SolrUnavailableError",
]
