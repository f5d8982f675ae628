"""Record to search document mapping.

Turns repository records into flat Solr documents: domain facet rules
for items, schema-driven element mapping, and public URI resolution.
"""

from solrindex.mapping.document import Document
from solrindex.mapping.facets import DEFAULT_RULES, FacetExtractor
from solrindex.mapping.log import ExtractionLog
from solrindex.mapping.mapper import ItemMapper, index_element_texts, item_document_id
from solrindex.mapping.uri import RouteStyle, UriResolver, UrlBuilder

__all__ = [
    "DEFAULT_RULES",
    "Document",
    "ExtractionLog",
    "FacetExtractor",
    "ItemMapper",
    "RouteStyle",
    "UriResolver",
    "UrlBuilder",
    "index_element_texts",
    "item_document_id",
]
