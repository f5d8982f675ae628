"""Record model for the content repository.

A ``Record`` is a read-only snapshot of one repository row: its table
(kind), identity, visibility, element texts and raw columns. The
indexing code never writes to records; it only reads them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DUBLIN_CORE = "Dublin Core"


@dataclass(frozen=True)
class ElementText:
    """One metadata value attached to a record.

    Args:
        vocabulary: Element set name (e.g. "Dublin Core").
        field: Element name (e.g. "Subject").
        text: The raw text value.
    """

    vocabulary: str
    field: str
    text: str

    def to_dict(self) -> dict[str, str]:
        """Serialize to dictionary."""
        return {"vocabulary": self.vocabulary, "field": self.field, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ElementText:
        """Deserialize from dictionary."""
        return cls(
            vocabulary=data.get("vocabulary", DUBLIN_CORE),
            field=data["field"],
            text=str(data.get("text", "")),
        )


@dataclass
class Record:
    """A polymorphic repository record.

    Args:
        table: Record kind, e.g. "Item", "File", "ExhibitPage".
        id: Numeric identity, unique within the table.
        public: Visibility flag.
        featured: Featured flag (items only).
        slug: Slug identity, for kinds routed by slug.
        metadata: Element texts, order-preserving.
        tags: Tag names.
        columns: Raw column values (foreign keys, addon fields, flags).
        collection_id: Owning collection, if any.
        item_type: Item type label, if any.
    """

    table: str
    id: int
    public: bool = True
    featured: bool = False
    slug: str | None = None
    metadata: list[ElementText] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    columns: dict[str, Any] = field(default_factory=dict)
    collection_id: int | None = None
    item_type: str | None = None

    @property
    def key(self) -> tuple[str, int]:
        """Return the ``(table, id)`` pair identifying this record."""
        return (self.table, self.id)

    def values(self, vocabulary: str, name: str) -> list[str]:
        """Return all values of one element, in order."""
        return [
            text.text
            for text in self.metadata
            if text.vocabulary == vocabulary and text.field == name
        ]

    def value(self, vocabulary: str, name: str) -> str:
        """Return the first value of one element, or an empty string."""
        values = self.values(vocabulary, name)
        return values[0] if values else ""

    def get(self, column: str, default: Any = None) -> Any:
        """Read a raw column value.

        ``id``, ``public``, ``featured`` and ``slug`` resolve to the
        record attributes so addon configs can name them as columns.
        """
        if column in ("id", "public", "featured", "slug"):
            return getattr(self, column)
        return self.columns.get(column, default)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "table": self.table,
            "id": self.id,
            "public": self.public,
            "featured": self.featured,
            "slug": self.slug,
            "metadata": [m.to_dict() for m in self.metadata],
            "tags": list(self.tags),
            "columns": dict(self.columns),
            "collection_id": self.collection_id,
            "item_type": self.item_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """Deserialize from dictionary."""
        return cls(
            table=data["table"],
            id=int(data["id"]),
            public=bool(data.get("public", True)),
            featured=bool(data.get("featured", False)),
            slug=data.get("slug"),
            metadata=[ElementText.from_dict(m) for m in data.get("metadata", [])],
            tags=list(data.get("tags", [])),
            columns=dict(data.get("columns", {})),
            collection_id=data.get("collection_id"),
            item_type=data.get("item_type"),
        )


@dataclass(frozen=True)
class FieldDefinition:
    """Search settings for one metadata element.

    Args:
        vocabulary: Element set name.
        name: Element name.
        slug: Key stem used in Solr field names.
        is_indexed: Contributes a searchable text field.
        is_facet: Contributes a string (facet) field.
    """

    vocabulary: str
    name: str
    slug: str
    is_indexed: bool = True
    is_facet: bool = False

    @property
    def index_key(self) -> str:
        """Return the text field name."""
        return f"{self.slug}_t"

    @property
    def facet_key(self) -> str:
        """Return the string field name."""
        return f"{self.slug}_s"


class FieldCatalog:
    """Lookup of field definitions by ``(vocabulary, name)``.

    Example::

        catalog = FieldCatalog([
            FieldDefinition("Dublin Core", "Title", "50", is_facet=True),
        ])
        definition = catalog.find("Dublin Core", "Title")
    """

    def __init__(self, definitions: Iterable[FieldDefinition] = ()) -> None:
        self._definitions: dict[tuple[str, str], FieldDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: FieldDefinition) -> None:
        """Add or replace a definition."""
        self._definitions[(definition.vocabulary, definition.name)] = definition

    def find(self, vocabulary: str, name: str) -> FieldDefinition | None:
        """Return the definition for an element, or None."""
        return self._definitions.get((vocabulary, name))

    def find_by_text(self, text: ElementText) -> FieldDefinition | None:
        """Return the definition matching an element text, or None."""
        definition = self.find(text.vocabulary, text.field)
        if definition is None:
            logger.debug("No field definition for %s:%s", text.vocabulary, text.field)
        return definition

    def __len__(self) -> int:
        return len(self._definitions)
