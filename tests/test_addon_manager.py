"""Tests for the addon registry (AddonManager)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from solrindex.addons.config import AddonConfig
from solrindex.addons.manager import AddonManager, CascadeReport
from solrindex.addons.parser import AddonConfigParser
from solrindex.errors import ConfigError
from solrindex.records.model import Record
from solrindex.records.repository import InMemoryRepository


def write_source(directory: Path, name: str, data) -> None:
    (directory / name).write_text(json.dumps(data), encoding="utf-8")


class StaticParser(AddonConfigParser):
    """Parser returning a fixed addon list."""

    def __init__(self, addons: list[AddonConfig]) -> None:
        self.addons = addons

    def parse_dir(self, addon_dir):
        return list(self.addons)


@pytest.fixture
def saved(repo) -> list[tuple[str, int]]:
    """Keys of every record saved through the repository."""
    keys: list[tuple[str, int]] = []
    repo.add_save_hook(lambda record: keys.append(record.key))
    return keys


# ===================================================================
# Cache
# ===================================================================


class TestParseAll:
    """Tests for cache population and merging."""

    def test_lazy_parse(self, manager, repo):
        assert not manager.is_parsed
        assert manager.addons == []
        manager.find_addon_for_record(repo.get("Exhibit", 1))
        assert manager.is_parsed
        assert [a.table for a in manager.addons] == ["Exhibit", "ExhibitPage", "SimplePagesPage"]

    def test_parser_argument_merges(self, repo, tmp_path):
        write_source(tmp_path, "a.json", {"table": "Exhibit", "name": "first"})
        manager = AddonManager(repo, tmp_path)
        manager.parse_all()

        extra = StaticParser(
            [AddonConfig(table="Exhibit", name="second"), AddonConfig(table="Gallery")]
        )
        addons = manager.parse_all(extra)

        assert [a.table for a in addons] == ["Exhibit", "Gallery"]
        assert manager.find_addon_for_record(Record(table="Exhibit", id=1)).name == "first"

    def test_reset_forces_clean_reparse(self, repo, tmp_path):
        write_source(tmp_path, "a.json", {"table": "Exhibit", "name": "first"})
        manager = AddonManager(repo, tmp_path)
        manager.parse_all()

        write_source(tmp_path, "a.json", {"table": "Exhibit", "name": "edited"})
        manager.parse_all()
        assert manager.addons[0].name == "first"

        manager.reset()
        assert not manager.is_parsed
        manager.parse_all()
        assert manager.addons[0].name == "edited"

    def test_config_error_leaves_cache_untouched(self, repo, tmp_path):
        write_source(tmp_path, "a.json", {"table": "Exhibit"})
        manager = AddonManager(repo, tmp_path)
        manager.parse_all()

        (tmp_path / "b.json").write_text("[", encoding="utf-8")
        with pytest.raises(ConfigError):
            manager.parse_all(AddonConfigParser())
        assert [a.table for a in manager.addons] == ["Exhibit"]


# ===================================================================
# Lookup and indexing
# ===================================================================


class TestLookup:
    """Tests for find_addon_for_record and get_id."""

    def test_matching_addon(self, manager, repo):
        addon = manager.find_addon_for_record(repo.get("ExhibitPage", 5))
        assert addon.table == "ExhibitPage"

    def test_no_addon_for_items(self, manager, repo):
        assert manager.find_addon_for_record(repo.get("Item", 1)) is None
        assert manager.get_id(repo.get("Item", 1)) is None

    def test_get_id_is_deterministic(self, manager, repo):
        page = repo.get("ExhibitPage", 5)
        assert manager.get_id(page) == "ExhibitPage_5"
        assert manager.get_id(page) == manager.get_id(page)

    def test_document_id_round_trip(self, manager, repo):
        for table, record_id in [("Exhibit", 1), ("ExhibitPage", 5), ("SimplePagesPage", 3)]:
            record = repo.get(table, record_id)
            assert manager.index_record(record).to_dict()["id"] == manager.get_id(record)


class TestIndexing:
    """Tests for index_record and reindex_addons."""

    def test_flagged_off_record_is_not_indexed(self, manager, repo):
        assert manager.index_record(repo.get("SimplePagesPage", 4)) is None
        assert manager.index_record(repo.get("Exhibit", 2)) is None

    def test_unknown_record_is_not_indexed(self, manager):
        assert manager.index_record(Record(table="Tag", id=1)) is None

    def test_reindex_addons(self, manager):
        ids = [doc.id for doc in manager.reindex_addons()]
        assert ids == ["Exhibit_1", "ExhibitPage_5", "SimplePagesPage_3"]


# ===================================================================
# Cascades
# ===================================================================


class TestResaveChildren:
    """Tests for resave_children."""

    def test_children_are_resaved(self, manager, repo, saved):
        report = manager.resave_children(repo.get("Exhibit", 1))
        assert report.resaved == [("ExhibitPage", 5)]
        assert saved == [("ExhibitPage", 5)]
        assert report.ok

    def test_idempotent(self, manager, repo, saved):
        exhibit = repo.get("Exhibit", 1)
        first = manager.resave_children(exhibit)
        second = manager.resave_children(exhibit)
        assert first.resaved == second.resaved == [("ExhibitPage", 5)]
        assert saved == [("ExhibitPage", 5), ("ExhibitPage", 5)]

    def test_no_addon_is_noop(self, manager, repo, saved):
        report = manager.resave_children(repo.get("Item", 1))
        assert report.resaved == []
        assert saved == []

    def test_failure_is_isolated(self, manager, repo):
        repo.put(Record(table="ExhibitPage", id=6, slug="seals", columns={"exhibit_id": 1}))

        def fail_on_page_5(record):
            if record.key == ("ExhibitPage", 5):
                raise RuntimeError("disk full")

        repo.add_save_hook(fail_on_page_5)
        report = manager.resave_children(repo.get("Exhibit", 1))

        assert report.resaved == [("ExhibitPage", 6)]
        [failure] = report.failures
        assert (failure.table, failure.record_id) == ("ExhibitPage", 5)
        assert "disk full" in failure.reason
        assert not report.ok


class TestResaveRemoteParent:
    """Tests for resave_remote_parent."""

    def test_parent_is_resaved(self, manager, repo, saved):
        report = manager.resave_remote_parent(repo.get("ExhibitPageEntry", 7))
        # both remote fields of the page point at the same parent
        assert report.resaved == [("ExhibitPage", 5)]
        assert report.skipped == [("ExhibitPage", 5)]
        assert saved == [("ExhibitPage", 5)]

    def test_dangling_parent_is_reported(self, manager, saved):
        orphan = Record(table="ExhibitPageEntry", id=9, columns={"page_id": 99})
        report = manager.resave_remote_parent(orphan)
        assert saved == []
        # two remote fields name the same missing page
        assert [(f.table, f.record_id) for f in report.failures] == [("ExhibitPage", 99)]

    def test_unreferenced_table_is_noop(self, manager, repo):
        report = manager.resave_remote_parent(repo.get("Item", 1))
        assert report.resaved == [] and report.failures == []


class TestCascadeCycle:
    """Tests for cascades over circular child and remote references."""

    @pytest.fixture
    def cyclic(self, tmp_path):
        write_source(
            tmp_path,
            "a.json",
            {
                "table": "A",
                "fields": [{"name": "y", "remote": {"table": "B", "key": "a_id"}}],
                "children": [{"table": "B", "parentKey": "a_id"}],
            },
        )
        write_source(
            tmp_path,
            "b.json",
            {"table": "B", "fields": [{"name": "x", "remote": {"table": "A", "key": "b_id"}}]},
        )
        repo = InMemoryRepository(
            [
                Record(table="A", id=1, columns={"b_id": 1}),
                Record(table="B", id=1, columns={"a_id": 1}),
            ]
        )
        manager = AddonManager(repo, tmp_path)
        saves: list[tuple[str, int]] = []
        repo.add_save_hook(lambda record: saves.append(record.key))
        repo.add_save_hook(manager.cascade)
        return repo, manager, saves

    def test_cycle_terminates(self, cyclic):
        repo, manager, saves = cyclic
        report = manager.cascade(repo.get("A", 1))
        assert saves == [("B", 1)]
        assert report.resaved == [("B", 1)]
        assert ("B", 1) in report.skipped

    def test_cycle_from_repository_save(self, cyclic):
        repo, manager, saves = cyclic
        repo.save(repo.get("A", 1))
        assert saves.count(("A", 1)) == 1
        assert saves.count(("B", 1)) == 1

    def test_repeated_cascades_match(self, cyclic):
        repo, manager, saves = cyclic
        first = manager.cascade(repo.get("A", 1))
        second = manager.cascade(repo.get("A", 1))
        assert first.resaved == second.resaved


class TestCascadeReport:
    """Tests for CascadeReport serialization."""

    def test_to_dict(self):
        report = CascadeReport(origin=("Exhibit", 1), resaved=[("ExhibitPage", 5)])
        assert report.to_dict() == {
            "origin": ["Exhibit", 1],
            "resaved": [["ExhibitPage", 5]],
            "skipped": [],
            "failures": [],
        }
