"""Solr HTTP client."""

from solrindex.solr.client import SolrClient, SolrConnection

__all__ = ["SolrClient", "SolrConnection"]
