"""Addon config model.

An addon describes one secondary record type: the table it governs,
the fields to index, remote fields that pull values from another
table, and child tables to resave when a parent changes.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def default_addon_name(table: str) -> str:
    """Derive an addon name from its table (``ExhibitPage`` -> ``exhibit_page``)."""
    return _CAMEL_BOUNDARY.sub("_", table).lower()


@dataclass(frozen=True)
class RemoteConfig:
    """A field whose values live on another table.

    Args:
        table: Table holding the values.
        key: Column on ``table`` that references the owning record.
    """

    table: str
    key: str

    def to_dict(self) -> dict[str, str]:
        """Serialize to dictionary."""
        return {"table": self.table, "key": self.key}


@dataclass(frozen=True)
class ChildConfig:
    """A dependent table resaved when the parent changes.

    Args:
        table: Child table.
        parent_key: Column on ``table`` holding the parent id.
    """

    table: str
    parent_key: str

    def to_dict(self) -> dict[str, str]:
        """Serialize to dictionary."""
        return {"table": self.table, "parentKey": self.parent_key}


@dataclass(frozen=True)
class FieldConfig:
    """One indexed field of an addon.

    Args:
        name: Column name on the record (or on the remote table).
        addon_name: Name of the owning addon, used in field keys.
        indexed: Contributes a searchable text field.
        facet: Contributes a string (facet) field.
        is_title: Its value becomes the document title.
        remote: Remote table reference, if the values live elsewhere.
        label: Display label.
    """

    name: str
    addon_name: str
    indexed: bool = True
    facet: bool = False
    is_title: bool = False
    remote: RemoteConfig | None = None
    label: str = ""

    @property
    def index_key(self) -> str:
        """Return the text field name."""
        return f"{self.addon_name}_{self.name}_t"

    @property
    def facet_key(self) -> str:
        """Return the string field name."""
        return f"{self.addon_name}_{self.name}_s"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the source format."""
        data: dict[str, Any] = {
            "name": self.name,
            "indexed": self.indexed,
            "facet": self.facet,
        }
        if self.is_title:
            data["isTitle"] = True
        if self.remote is not None:
            data["remote"] = self.remote.to_dict()
        if self.label:
            data["label"] = self.label
        return data


@dataclass
class AddonConfig:
    """Configuration for one addon record type.

    Args:
        table: Record type this addon governs. Unique among addons.
        name: Short name used in Solr field keys.
        result_type: Label stored in the ``resulttype`` field.
        fields: Indexed fields, in declaration order.
        children: Dependent tables for cascade resaves.
        flag: Column that must be truthy for a record to be indexed.
        tagged: Whether record tags are indexed.
        source: Where the config was read from.
    """

    table: str
    name: str = ""
    result_type: str = ""
    fields: list[FieldConfig] = field(default_factory=list)
    children: list[ChildConfig] = field(default_factory=list)
    flag: str | None = None
    tagged: bool = False
    source: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = default_addon_name(self.table)
        if not self.result_type:
            self.result_type = self.table

    @property
    def title_field(self) -> FieldConfig | None:
        """Return the field flagged as title, or None."""
        for fld in self.fields:
            if fld.is_title:
                return fld
        return None

    @property
    def remote_fields(self) -> list[FieldConfig]:
        """Return fields whose values live on a remote table."""
        return [f for f in self.fields if f.remote is not None]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the source format."""
        data: dict[str, Any] = {
            "table": self.table,
            "name": self.name,
            "resultType": self.result_type,
            "fields": [f.to_dict() for f in self.fields],
            "children": [c.to_dict() for c in self.children],
            "tagged": self.tagged,
        }
        if self.flag:
            data["flag"] = self.flag
        return data
