"""Tests for warble.imports — the per-entry import graph."""

from warble.imports import ImportGraph


class TestLookup:
    def test_unknown_entry_is_absent(self) -> None:
        graph = ImportGraph()
        assert graph.lookup("/styles/index.scss") is None
        assert "/styles/index.scss" not in graph

    def test_recorded_dependencies_are_returned_in_order(self) -> None:
        graph = ImportGraph()
        graph.record_dependencies("/s/index.scss", ["/s/_b.scss", "/s/_a.scss"])
        assert graph.lookup("/s/index.scss") == ("/s/_b.scss", "/s/_a.scss")

    def test_empty_dependency_list_is_still_tracked(self) -> None:
        graph = ImportGraph()
        graph.record_dependencies("/s/plain.scss", [])
        assert graph.lookup("/s/plain.scss") == ()


class TestPending:
    def test_pending_reads_as_absent(self) -> None:
        graph = ImportGraph()
        graph.record_dependencies("/s/index.scss", ["/s/_a.scss"])
        graph.record_pending("/s/index.scss")

        assert graph.lookup("/s/index.scss") is None
        assert graph.is_pending("/s/index.scss")
        assert "/s/index.scss" in graph

    def test_dependencies_replace_pending(self) -> None:
        graph = ImportGraph()
        graph.record_pending("/s/index.scss")
        graph.record_dependencies("/s/index.scss", ["/s/_c.scss"])

        assert not graph.is_pending("/s/index.scss")
        assert graph.lookup("/s/index.scss") == ("/s/_c.scss",)

    def test_new_record_replaces_old_one(self) -> None:
        graph = ImportGraph()
        graph.record_dependencies("/s/index.scss", ["/s/_a.scss", "/s/_b.scss"])
        graph.record_dependencies("/s/index.scss", ["/s/_b.scss"])
        assert graph.lookup("/s/index.scss") == ("/s/_b.scss",)


class TestIsolation:
    def test_instances_do_not_share_state(self) -> None:
        first = ImportGraph()
        second = ImportGraph()
        first.record_dependencies("/s/index.scss", [])

        assert first.lookup("/s/index.scss") == ()
        assert second.lookup("/s/index.scss") is None
        assert len(first) == 1
        assert len(second) == 0
