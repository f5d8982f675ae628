"""Tests for URI resolution."""

from __future__ import annotations

import pytest

from solrindex.mapping.uri import (
    RouteStyle,
    UriResolver,
    UrlBuilder,
    controller_for,
    public_uri,
)
from solrindex.records.model import Record


class TestHelpers:
    """Tests for controller naming and admin rewriting."""

    @pytest.mark.parametrize(
        "table,controller",
        [
            ("Item", "items"),
            ("ExhibitPage", "exhibit-pages"),
            ("Gallery", "galleries"),
            ("Box", "boxes"),
            ("Key", "keys"),
        ],
    )
    def test_controller_for(self, table, controller):
        assert controller_for(table) == controller

    def test_public_uri_rewrites_first_admin_segment(self):
        assert public_uri("http://x/admin/items/show/1") == "http://x/items/show/1"
        assert public_uri("/admin/a/admin/b") == "/a/admin/b"

    def test_custom_admin_path(self):
        assert public_uri("/backend/items", "backend") == "/items"


class TestUrlBuilder:
    """Tests for UrlBuilder."""

    def test_urls(self):
        urls = UrlBuilder("http://example.org/")
        assert urls.url("about") == "http://example.org/about"
        assert urls.admin_url("/items/show/2") == "http://example.org/admin/items/show/2"

    def test_record_and_slug_urls(self):
        urls = UrlBuilder()
        record = Record(table="Exhibit", id=4, slug="kings")
        assert urls.record_url(record) == "/exhibits/show/4"
        assert urls.slug_url(record) == "/exhibits/show/kings"


class TestUriResolver:
    """Tests for UriResolver."""

    @pytest.fixture
    def resolver(self, repo, url_builder):
        return UriResolver(url_builder, repo)

    def test_standalone_page(self, resolver, repo):
        assert resolver.resolve(repo.get("SimplePagesPage", 3)) == "http://example.org/about"

    def test_nested_page(self, resolver, repo):
        page = repo.get("ExhibitPage", 5)
        assert resolver.route_style(page) is RouteStyle.NESTED
        assert resolver.resolve(page) == "http://example.org/exhibits/show/kings/throne"

    def test_slug_record(self, resolver, repo):
        assert resolver.resolve(repo.get("Exhibit", 1)) == "http://example.org/exhibits/show/kings"

    def test_identity_record(self, resolver, repo):
        item = repo.get("Item", 1)
        assert resolver.route_style(item) is RouteStyle.IDENTITY
        assert resolver.resolve(item) == "http://example.org/items/show/1"

    def test_admin_base_is_made_public(self, repo):
        resolver = UriResolver(UrlBuilder("http://example.org/admin"), repo)
        assert resolver.resolve(repo.get("Item", 1)) == "http://example.org/items/show/1"

    def test_missing_container_raises(self, resolver):
        orphan = Record(table="ExhibitPage", id=9, slug="lost", columns={"exhibit_id": 99})
        with pytest.raises(ValueError):
            resolver.resolve(orphan)

    def test_missing_slug_raises(self, resolver):
        with pytest.raises(ValueError):
            resolver.resolve(Record(table="SimplePagesPage", id=9))

    def test_route_styles_are_injectable(self, url_builder):
        resolver = UriResolver(url_builder, route_styles={"Item": RouteStyle.SLUG})
        item = Record(table="Item", id=1, slug="ur-nammu")
        assert resolver.resolve(item) == "http://example.org/items/show/ur-nammu"
