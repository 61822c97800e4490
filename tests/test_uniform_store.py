import json

import pytest

from uniform_registry.uniform_store import CorruptStoreError, UniformStore


def test_ensure_exists_creates_empty_collection(tmp_path):
    store = UniformStore(tmp_path / "nested" / "data" / "uniforms.json")
    store.ensure_exists()
    assert store.data_file.read_text() == "[]"
    assert store.load_all() == []


def test_ensure_exists_keeps_existing_records(store):
    store.save_all([{"id": "1", "school": "A"}])
    store.ensure_exists()
    assert store.load_all() == [{"id": "1", "school": "A"}]


def test_save_all_writes_indented_json_in_order(store):
    records = [{"id": "2", "school": "B"}, {"id": "1", "school": "A"}]
    store.save_all(records)

    raw = store.data_file.read_text()
    assert json.loads(raw) == records
    assert '\n  {\n    "id": "2"' in raw


def test_save_all_leaves_no_temporary_files(store):
    store.save_all([{"id": "1"}])
    store.save_all([])
    assert [p.name for p in store.data_file.parent.iterdir()] == ["uniforms.json"]


def test_load_all_rejects_invalid_json(store):
    store.data_file.write_text("{not json")
    with pytest.raises(CorruptStoreError):
        store.load_all()


def test_load_all_rejects_non_array(store):
    store.data_file.write_text('{"id": "1"}')
    with pytest.raises(CorruptStoreError):
        store.load_all()


def test_records_keep_unknown_keys(store):
    store.save_all([{"id": "1", "legacy": True}])
    assert store.load_all() == [{"id": "1", "legacy": True}]
