"""Unit tests for key-value stores."""

import json

import pytest

from vod_client.storage import InMemoryStore, JsonFileStore


@pytest.fixture(params=["memory", "json"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStore()
    return JsonFileStore(tmp_path / "state" / "store.json")


class TestStores:
    """Behaviour shared by every store."""

    def test_get_default(self, any_store):
        assert any_store.get("missing") is None
        assert any_store.get("missing", []) == []

    def test_set_get_delete(self, any_store):
        any_store.set("custom_ad_patterns", ["midroll"])

        assert any_store.get("custom_ad_patterns") == ["midroll"]
        assert any_store.keys() == ["custom_ad_patterns"]

        any_store.delete("custom_ad_patterns")
        any_store.delete("custom_ad_patterns")

        assert any_store.keys() == []


class TestJsonFileStore:
    """Test the on-disk store."""

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileStore(path).set("custom_ad_patterns", ["midroll"])

        assert JsonFileStore(path).get("custom_ad_patterns") == ["midroll"]
        assert json.loads(path.read_text()) == {"custom_ad_patterns": ["midroll"]}

    def test_corrupt_file_treated_as_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        store = JsonFileStore(path)

        assert store.get("custom_ad_patterns") is None

        store.set("custom_ad_patterns", [])

        assert json.loads(path.read_text()) == {"custom_ad_patterns": []}

    def test_non_object_document(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2]")

        assert JsonFileStore(path).keys() == []


class TestInMemoryStore:
    def test_initial_values_copied(self):
        initial = {"a": 1}
        store = InMemoryStore(initial)
        store.set("b", 2)

        assert initial == {"a": 1}
        assert sorted(store.keys()) == ["a", "b"]
