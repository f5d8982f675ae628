"""Repository records and access protocol."""

from solrindex.records.model import (
    DUBLIN_CORE,
    ElementText,
    FieldCatalog,
    FieldDefinition,
    Record,
)
from solrindex.records.repository import InMemoryRepository, Repository

__all__ = [
    "DUBLIN_CORE",
    "ElementText",
    "FieldCatalog",
    "FieldDefinition",
    "InMemoryRepository",
    "Record",
    "Repository",
]
