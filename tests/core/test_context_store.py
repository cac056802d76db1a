"""Tests for the namespaced context store and its cache file."""

import json
from pathlib import Path

from hypothesis import given
from hypothesis import strategies as st

from sourcebit.core.context_store import ContextStore

_json_values = st.recursive(
    st.none() | st.booleans() | st.integers() | st.text(max_size=8),
    lambda children: st.lists(children, max_size=3)
    | st.dictionaries(st.text(max_size=5), children, max_size=3),
    max_leaves=10,
)


class TestHydrate:
    """Reading the cache file."""

    def test_missing_file_gives_empty_context(self, tmp_path: Path) -> None:
        store = ContextStore(tmp_path / "missing.json")

        assert store.hydrate() == {}

    def test_corrupt_file_gives_empty_context(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        cache.write_text("{not json")
        store = ContextStore(cache)

        assert store.hydrate() == {}

    def test_undecodable_file_gives_empty_context(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        cache.write_bytes(b'{"a": "\xff\xfe"}')
        store = ContextStore(cache)

        assert store.hydrate() == {}

    def test_non_object_root_is_ignored(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        cache.write_text("[1, 2, 3]")
        store = ContextStore(cache)

        assert store.hydrate() == {}

    def test_loads_existing_cache(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        cache.write_text(json.dumps({"plugin-a": {"entries": [1, 2]}}))
        store = ContextStore(cache)

        assert store.hydrate() == {"plugin-a": {"entries": [1, 2]}}
        assert store.get("plugin-a") == {"entries": [1, 2]}

    def test_hydrates_at_most_once(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        cache.write_text(json.dumps({"a": {"v": 1}}))
        store = ContextStore(cache)
        store.hydrate()
        store.set("a", {"v": 2})

        cache.write_text(json.dumps({"a": {"v": 3}}))
        store.hydrate()

        assert store.get("a") == {"v": 2}

    def test_disabled_store_never_reads(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        cache.write_text(json.dumps({"a": {"v": 1}}))
        store = ContextStore(cache, enabled=False)

        assert store.hydrate() == {}


class TestPersist:
    """Writing the cache file."""

    def test_writes_compact_json(self, tmp_path: Path) -> None:
        cache = tmp_path / "nested" / "cache.json"
        store = ContextStore(cache)
        store.set("a", {"v": 1})

        assert store.persist() is True
        assert json.loads(cache.read_text()) == {"a": {"v": 1}}
        assert "\n" not in cache.read_text()

    def test_disabled_store_never_writes(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        store = ContextStore(cache, enabled=False)
        store.set("a", {"v": 1})

        assert store.persist() is False
        assert not cache.exists()

    def test_unserializable_context_is_not_written(self, tmp_path: Path) -> None:
        cache = tmp_path / "cache.json"
        store = ContextStore(cache)
        store.set("a", {"v": object()})

        assert store.persist() is False
        assert not cache.exists()

    def test_unwritable_location_returns_false(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = ContextStore(blocker / "cache.json")
        store.set("a", {"v": 1})

        assert store.persist() is False

    @given(context=st.dictionaries(st.text(max_size=6), _json_values, max_size=4))
    def test_round_trip_through_cache_file(self, tmp_path_factory, context) -> None:
        cache = tmp_path_factory.mktemp("cache") / "cache.json"
        writer = ContextStore(cache)
        for namespace, value in context.items():
            writer.set(namespace, value)
        writer.persist()

        reader = ContextStore(cache)

        assert reader.hydrate() == writer.snapshot()


class TestGetSet:
    """Namespace access semantics."""

    def test_get_absent_namespace_is_empty_dict(self) -> None:
        assert ContextStore(enabled=False).get("nobody") == {}

    def test_set_merges_shallowly(self) -> None:
        store = ContextStore(enabled=False)
        store.set("a", {"x": 1, "nested": {"keep": True}})
        store.set("a", {"y": 2, "nested": {"other": True}})

        assert store.get("a") == {"x": 1, "y": 2, "nested": {"other": True}}

    def test_set_replaces_non_mapping_values(self) -> None:
        store = ContextStore(enabled=False)
        store.set("a", [1, 2])
        store.set("a", {"x": 1})

        assert store.get("a") == {"x": 1}

    def test_namespaces_are_isolated(self) -> None:
        store = ContextStore(enabled=False)
        store.set("a", {"x": 1})
        store.set("b", {"x": 2})

        assert store.get("a") == {"x": 1}
        assert store.get("b") == {"x": 2}

    def test_get_returns_a_copy(self) -> None:
        store = ContextStore(enabled=False)
        store.set("a", {"items": [1]})

        store.get("a")["items"].append(2)

        assert store.get("a") == {"items": [1]}

    def test_set_copies_its_input(self) -> None:
        store = ContextStore(enabled=False)
        value = {"items": [1]}
        store.set("a", value)

        value["items"].append(2)

        assert store.get("a") == {"items": [1]}

    def test_snapshot_is_a_copy(self) -> None:
        store = ContextStore(enabled=False)
        store.set("a", {"x": 1})

        snapshot = store.snapshot()
        snapshot["a"]["x"] = 99

        assert store.get("a") == {"x": 1}
