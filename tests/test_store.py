from types import MappingProxyType

import pytest

from config_bind.exceptions import ConfigConflictError, ConfigSyntaxError
from config_bind.store import PropertyLoaderProtocol, PropertySourceProtocol, PropertyStore


def test_store_flattens_nested_values_on_init(store):
    assert store.get("server.host") == "localhost"
    assert store.get("server.port") == "8080"
    assert store.get("server.debug") == "true"
    assert len(store) == 5


def test_store_has_covers_leaves_and_containers(store):
    assert store.has("server")
    assert store.has("server.port")
    assert not store.has("server.missing")
    assert not store.has("nope")
    assert store.has("")
    assert not PropertyStore().has("")


def test_store_get_default_for_missing_key(store):
    assert store.get("missing") == ""
    assert store.get("missing", "x") == "x"


def test_store_indexed_keys_and_sub_keys():
    s = PropertyStore({"a": ["x", "y", "z"], "m": {"b": 2, "a": 1}})
    assert s.get("a[0]") == "x"
    assert s.get("a[2]") == "z"
    assert not s.has("a[3]")
    assert s.sub_keys("m") == ["a", "b"]
    assert s.sub_keys("a") == ["[0]", "[1]", "[2]"]
    assert s.sub_keys("nope") == []


def test_store_indexes_sort_numerically():
    s = PropertyStore()
    for i in range(12):
        s.set(f"list[{i}]", str(i))
    assert s.sub_keys("list") == [f"[{i}]" for i in range(12)]


def test_store_sub_keys_on_leaf_conflicts(store):
    with pytest.raises(ConfigConflictError):
        store.sub_keys("server.port")


def test_store_rejects_leaf_container_conflicts():
    s = PropertyStore({"a.b": "1"})
    with pytest.raises(ConfigConflictError):
        s.set("a", "2")
    with pytest.raises(ConfigConflictError):
        s.set("a.b.c", "3")
    assert s.get("a.b") == "1"


def test_store_overwrites_leaf_value():
    s = PropertyStore({"a": "1"})
    s.set("a", 2)
    assert s.get("a") == "2"


def test_store_rejects_invalid_keys():
    s = PropertyStore()
    with pytest.raises(ConfigSyntaxError):
        s.set("", "x")
    with pytest.raises(ConfigSyntaxError):
        s.set("a..b", "x")


def test_store_empty_list_flattens_to_empty_value():
    s = PropertyStore({"a": [], "b": {}})
    assert s.has("a")
    assert s.get("a") == ""
    assert not s.has("b")


def test_store_snapshot_is_read_only_copy(store):
    snap = store.snapshot()
    assert isinstance(snap, MappingProxyType)
    store.set("extra", "1")
    assert "extra" not in snap
    with pytest.raises(TypeError):
        snap["extra"] = "2"  # type: ignore[index]


def test_store_clear_and_dunder_access(store):
    assert "server.port" in store
    assert "server.port" in list(store)
    store.clear()
    assert len(store) == 0
    assert "server.port" not in store


def test_store_load_uses_loader_protocol():
    class DictLoader:
        def load(self):
            return {"x": {"y": 1}}

    loader = DictLoader()
    assert isinstance(loader, PropertyLoaderProtocol)
    s = PropertyStore()
    s.load(loader)
    assert s.get("x.y") == "1"


def test_store_load_rejects_non_mapping():
    class BadLoader:
        def load(self):
            return ["x"]

    with pytest.raises(ValueError):
        PropertyStore().load(BadLoader())


def test_store_is_a_property_source(store):
    assert isinstance(store, PropertySourceProtocol)
