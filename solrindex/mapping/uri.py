"""Public URI resolution for records.

Every record kind resolves through a ``RouteStyle`` looked up by table
name, falling back to slug routing when the record has a slug and to
id routing otherwise. Admin addresses are rewritten to their public
form so the index never points into the admin interface.
"""

from __future__ import annotations

import re
from enum import Enum

from solrindex.records.model import Record
from solrindex.records.repository import Repository

DEFAULT_ACTION = "show"

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class RouteStyle(str, Enum):
    """How a record kind is addressed.

    Attributes:
        ROOT_SLUG: ``/<slug>`` (standalone pages).
        NESTED: ``<container address>/<slug>``.
        SLUG: ``/<controller>/<action>/<slug>``.
        IDENTITY: ``/<controller>/<action>/<id>``.
    """

    ROOT_SLUG = "root_slug"
    NESTED = "nested"
    SLUG = "slug"
    IDENTITY = "identity"


# Kinds with a fixed route style.
ROUTE_STYLES: dict[str, RouteStyle] = {
    "SimplePagesPage": RouteStyle.ROOT_SLUG,
    "ExhibitPage": RouteStyle.NESTED,
}

# Nested kind -> (container table, container id column)
CONTAINERS: dict[str, tuple[str, str]] = {
    "ExhibitPage": ("Exhibit", "exhibit_id"),
}


def dasherize(name: str) -> str:
    """Convert ``CamelCase`` to ``camel-case``."""
    return _CAMEL_BOUNDARY.sub("-", name).lower()


def pluralize(word: str) -> str:
    """Pluralize an English controller name."""
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


def controller_for(table: str) -> str:
    """Return the route controller for a table (``ExhibitPage`` -> ``exhibit-pages``)."""
    return pluralize(dasherize(table))


def public_uri(uri: str, admin_path: str = "/admin") -> str:
    """Rewrite the first admin path segment to the public root."""
    segment = "/" + admin_path.strip("/") + "/"
    return uri.replace(segment, "/", 1)


class UrlBuilder:
    """Builds site addresses from a base URL.

    Args:
        base_url: Site root, without trailing slash (may be empty).
        admin_path: Path of the admin interface below the root.
    """

    def __init__(self, base_url: str = "", admin_path: str = "/admin") -> None:
        self.base_url = base_url.rstrip("/")
        self.admin_path = "/" + admin_path.strip("/")

    def url(self, path: str) -> str:
        """Return the address of a site path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def admin_url(self, path: str) -> str:
        """Return the admin address of a site path."""
        return f"{self.base_url}{self.admin_path}/{path.lstrip('/')}"

    def record_url(self, record: Record, action: str = DEFAULT_ACTION) -> str:
        """Return the id-based address of a record."""
        return self.url(f"{controller_for(record.table)}/{action}/{record.id}")

    def slug_url(self, record: Record, action: str = DEFAULT_ACTION) -> str:
        """Return the slug-based address of a record."""
        return self.url(f"{controller_for(record.table)}/{action}/{record.slug}")


class UriResolver:
    """Computes the public address of any record.

    Args:
        url_builder: Address builder.
        repository: Used to load containers of nested kinds.
        route_styles: Per-table route styles.
        containers: Per-table container lookups for nested kinds.

    Example::

        resolver = UriResolver(UrlBuilder("http://example.org"), repo)
        resolver.resolve(page)  # "http://example.org/exhibits/show/kings/throne"
    """

    def __init__(
        self,
        url_builder: UrlBuilder,
        repository: Repository | None = None,
        route_styles: dict[str, RouteStyle] | None = None,
        containers: dict[str, tuple[str, str]] | None = None,
    ) -> None:
        self._urls = url_builder
        self._repository = repository
        self._styles = dict(ROUTE_STYLES if route_styles is None else route_styles)
        self._containers = dict(CONTAINERS if containers is None else containers)

    def route_style(self, record: Record) -> RouteStyle:
        """Return the route style for a record."""
        style = self._styles.get(record.table)
        if style is not None:
            return style
        return RouteStyle.SLUG if record.slug else RouteStyle.IDENTITY

    def resolve(self, record: Record, action: str = DEFAULT_ACTION) -> str:
        """Return the public address of a record.

        Raises:
            ValueError: If a slug-routed record has no slug, or a nested
                record's container cannot be loaded.
        """
        style = self.route_style(record)
        if style is RouteStyle.IDENTITY:
            uri = self._urls.record_url(record, action)
        elif style is RouteStyle.SLUG:
            uri = self._urls.slug_url(record, action)
        elif style is RouteStyle.ROOT_SLUG:
            uri = self._urls.url(self._require_slug(record))
        else:
            container = self._container(record)
            uri = f"{self._urls.slug_url(container, action)}/{self._require_slug(record)}"
        return public_uri(uri, self._urls.admin_path)

    # ---------------------------------------------------------------

    @staticmethod
    def _require_slug(record: Record) -> str:
        if not record.slug:
            raise ValueError(f"{record.table} #{record.id} has no slug")
        return record.slug

    def _container(self, record: Record) -> Record:
        lookup = self._containers.get(record.table)
        if lookup is None or self._repository is None:
            raise ValueError(f"No container lookup for {record.table}")
        table, column = lookup
        container = self._repository.get(table, record.get(column))
        if container is None:
            raise ValueError(f"{record.table} #{record.id} has no {table}")
        return container
