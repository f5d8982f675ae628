"""Search document built for one record.

A document has four field namespaces:

* system fields (``id``, ``model``, ``title`` ...), single-valued;
* domain facets, single-valued and last-write-wins, emitted with the
  facet prefix;
* domain multi-valued facets, emitted with the facet prefix;
* generic multi-valued fields (element texts, tags), emitted as is.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from solrindex.settings import DEFAULT_FACET_PREFIX

ID_FIELD = "id"
SYSTEM_FIELDS = (
    "resulttype",
    "model",
    "modelid",
    "public",
    "title",
    "itemtype",
    "featured",
    "collection",
    "url",
)


@dataclass
class Document:
    """A flat, Solr-ready document.

    Args:
        id: Document identifier, ``"{Type}_{id}"``.
        facet_prefix: Namespace prefix for domain facets.
    """

    id: str
    facet_prefix: str = DEFAULT_FACET_PREFIX
    fields: dict[str, Any] = field(default_factory=dict)
    facets: dict[str, str | None] = field(default_factory=dict)
    facet_values: dict[str, list[str]] = field(default_factory=dict)
    values: dict[str, list[Any]] = field(default_factory=dict)

    def set_field(self, name: str, value: Any) -> None:
        """Set a single-valued system field."""
        if name == ID_FIELD:
            raise ValueError("The document id is fixed at creation")
        self.fields[name] = value

    def set_facet(self, name: str, value: str | None) -> None:
        """Set a domain facet; later writes replace earlier ones."""
        self.facets[name] = value

    def add_facet_value(self, name: str, value: str) -> None:
        """Append to a multi-valued domain facet."""
        self.facet_values.setdefault(name, []).append(value)

    def add_value(self, name: str, value: Any) -> None:
        """Append to a generic multi-valued field."""
        self.values.setdefault(name, []).append(value)

    def get(self, name: str, default: Any = None) -> Any:
        """Read a field by its emitted (prefixed) name."""
        return self.to_dict().get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Flatten to the Solr wire shape.

        Unset (None) values are omitted.
        """
        flat: dict[str, Any] = {ID_FIELD: self.id}
        for name, value in self.fields.items():
            if value is not None:
                flat[name] = value
        for name, value in self.facets.items():
            if value is not None:
                flat[f"{self.facet_prefix}{name}"] = value
        for name, items in self.facet_values.items():
            flat[f"{self.facet_prefix}{name}"] = list(items)
        for name, items in self.values.items():
            flat[name] = list(items)
        return flat
