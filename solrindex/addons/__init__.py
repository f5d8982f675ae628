"""Pluggable addon record types.

An addon source declares a table, its indexed fields, remote field
references and child tables. The manager resolves records to addons
and keeps dependent documents fresh through cascade resaves.
"""

from solrindex.addons.config import AddonConfig, ChildConfig, FieldConfig, RemoteConfig
from solrindex.addons.indexer import AddonIndexer, addon_document_id
from solrindex.addons.manager import AddonManager, CascadeFailure, CascadeReport
from solrindex.addons.parser import AddonConfigParser

__all__ = [
    "AddonConfig",
    "AddonConfigParser",
    "AddonIndexer",
    "AddonManager",
    "CascadeFailure",
    "CascadeReport",
    "ChildConfig",
    "FieldConfig",
    "RemoteConfig",
    "addon_document_id",
]
