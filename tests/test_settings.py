"""Tests for IndexSettings."""

from __future__ import annotations

import json

import pytest

from solrindex.settings import DEFAULT_ADDON_DIR, IndexSettings


class TestIndexSettings:
    """Tests for defaults, validation and loading."""

    def test_defaults(self):
        settings = IndexSettings()
        assert (settings.solr_host, settings.solr_port, settings.solr_core) == (
            "localhost",
            8983,
            "omeka",
        )
        assert settings.addon_dir == DEFAULT_ADDON_DIR
        assert settings.facet_prefix == "assyr_"
        assert settings.excluded_collection_ids == []

    @pytest.mark.parametrize("field", ["page_size", "retry_attempts"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValueError):
            IndexSettings(**{field: 0})

    def test_dict_round_trip(self, tmp_path):
        settings = IndexSettings(solr_core="seals", addon_dir=tmp_path, excluded_collection_ids=[4])
        assert IndexSettings.from_dict(settings.to_dict()) == settings

    def test_from_dict_fills_defaults(self):
        settings = IndexSettings.from_dict({"solr_port": "8080"})
        assert settings.solr_port == 8080
        assert settings.solr_core == "omeka"

    def test_load(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"base_url": "http://example.org"}), encoding="utf-8")
        assert IndexSettings.load(path).base_url == "http://example.org"

    def test_load_rejects_non_object(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ValueError):
            IndexSettings.load(path)
