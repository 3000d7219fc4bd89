#!/usr/bin/env python3
"""Tests for the persistence adapter and key-value stores."""

import json

import pytest

from job_tracker.tracking import (
    ApplicationRecord,
    ApplicationStatus,
    ApplicationStorage,
    FileStore,
    MemoryStore,
    RecordStore,
)
from job_tracker.tracking.errors import PersistenceReadError, PersistenceWriteError, StorageQuotaExceeded


def make_records():
    return [
        ApplicationRecord(title="QA", company="Globex", status=ApplicationStatus.IN_PROGRESS),
        ApplicationRecord(title="Dev", company="Acme", status=ApplicationStatus.NOT_STARTED),
        ApplicationRecord(title="Engenheira", company="Ação & Cia", status=ApplicationStatus.REJECTED),
    ]


def test_save_then_load_round_trips(storage):
    records = make_records()
    assert storage.save(records)

    result = storage.load()
    assert result.records == records
    assert not result.migrated
    assert result.error is None


def test_serialized_objects_have_exactly_three_fields(storage, kv):
    storage.save(make_records())
    saved = json.loads(kv.get_item(storage.key))

    assert [set(item) for item in saved] == [{"titulo", "empresa", "status"}] * 3
    assert saved[0] == {"titulo": "QA", "empresa": "Globex", "status": "Em Andamento"}


def test_load_with_no_data_is_empty(storage):
    result = storage.load()
    assert result.records == []
    assert not result.migrated
    assert result.error is None


def test_legacy_key_is_migrated_once(storage, kv):
    kv.set_item(storage.legacy_key, '[{"titulo":"X","empresa":"Y","status":"Aprovado"}]')

    result = storage.load()

    assert result.migrated
    assert result.records == [ApplicationRecord(title="X", company="Y", status=ApplicationStatus.APPROVED)]
    assert kv.get_item(storage.legacy_key) is None
    assert json.loads(kv.get_item(storage.key)) == [{"titulo": "X", "empresa": "Y", "status": "Aprovado"}]

    again = storage.load()
    assert not again.migrated
    assert again.records == result.records


def test_current_key_wins_over_legacy(storage, kv):
    kv.set_item(storage.key, '[{"titulo":"A","empresa":"B","status":"Reprovado"}]')
    kv.set_item(storage.legacy_key, '[{"titulo":"X","empresa":"Y","status":"Aprovado"}]')

    result = storage.load()

    assert [r.title for r in result.records] == ["A"]
    assert not result.migrated
    assert kv.get_item(storage.legacy_key) is not None


def test_legacy_key_kept_when_write_back_fails(notices):
    legacy = '[{"titulo":"X","empresa":"Y","status":"Aprovado"}]'
    small = MemoryStore({"old": legacy}, quota_bytes=len(legacy.encode("utf-8")) + 5)
    storage = ApplicationStorage(small, key="new", legacy_key="old")

    result = storage.load()

    assert result.migrated
    assert len(result.records) == 1
    assert small.get_item("old") == legacy
    assert isinstance(storage.last_error, PersistenceWriteError)

    store = RecordStore(storage, notify=notices)
    assert store.load()
    assert notices.errors == ["Error saving data."]
    assert notices.infos == ["Old data migrated."]


@pytest.mark.parametrize("payload", [
    "{not json",
    '{"titulo": "X"}',
    '[{"titulo": "X", "empresa": "Y", "status": "Hired"}]',
    '[{"titulo": "", "empresa": "Y", "status": "Aprovado"}]',
    '[{"empresa": "Y"}]',
])
def test_corrupt_data_loads_empty_with_error(storage, kv, payload):
    kv.set_item(storage.key, payload)

    result = storage.load()

    assert result.records == []
    assert isinstance(result.error, PersistenceReadError)


def test_save_failure_is_reported_not_raised():
    storage = ApplicationStorage(MemoryStore(quota_bytes=5), key="k", legacy_key="old")

    assert not storage.save(make_records())
    assert isinstance(storage.last_error, PersistenceWriteError)


def test_clear_removes_both_keys(storage, kv):
    kv.set_item(storage.key, "[]")
    kv.set_item(storage.legacy_key, "[]")
    kv.set_item("unrelated", "keep")

    assert storage.clear()
    assert kv.items == {"unrelated": "keep"}


def test_memory_store_quota():
    kv = MemoryStore(quota_bytes=4)
    kv.set_item("a", "1234")
    with pytest.raises(StorageQuotaExceeded):
        kv.set_item("b", "5")
    # Replacing a key only counts the new value
    kv.set_item("a", "abcd")
    assert kv.get_item("a") == "abcd"


def test_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "profile" / "storage.json"
    first = ApplicationStorage(FileStore(path), key="job_applications", legacy_key="gcandidaturas:v1")
    first.save(make_records())

    second = ApplicationStorage(FileStore(path), key="job_applications", legacy_key="gcandidaturas:v1")
    assert second.load().records == make_records()

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert set(raw) == {"job_applications"}


def test_file_store_remove_and_missing_key(tmp_path):
    kv = FileStore(tmp_path / "storage.json")
    assert kv.get_item("missing") is None
    kv.set_item("k", "v")
    kv.remove_item("k")
    kv.remove_item("k")
    assert kv.get_item("k") is None


def test_unreadable_file_store_loads_empty(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("garbage", encoding="utf-8")
    storage = ApplicationStorage(FileStore(path), key="job_applications", legacy_key="gcandidaturas:v1")

    result = storage.load()
    assert result.records == []
    assert isinstance(result.error, PersistenceReadError)


def test_corrupt_file_store_is_replaced_on_next_write(tmp_path, notices):
    path = tmp_path / "storage.json"
    path.write_text("garbage", encoding="utf-8")
    storage = ApplicationStorage(FileStore(path), key="job_applications", legacy_key="gcandidaturas:v1")
    store = RecordStore(storage, notify=notices)

    assert not store.load()
    assert store.create("Dev", "Acme")
    assert notices.errors == ["Failed to load saved applications."]
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "job_applications": '[{"titulo": "Dev", "empresa": "Acme", "status": "Não Iniciado"}]'
    }
    assert (tmp_path / "storage.json.corrupt").read_text(encoding="utf-8") == "garbage"

    assert store.reset()
    assert storage.load().records == []


def test_reset_clears_corrupt_file_store(tmp_path, notices):
    path = tmp_path / "storage.json"
    path.write_text("[1, 2]", encoding="utf-8")
    store = RecordStore(ApplicationStorage(FileStore(path), key="k", legacy_key="old"), notify=notices)
    store.load()

    assert store.reset()
    assert "Data erased." in notices.infos
    assert FileStore(path).get_item("k") is None


@pytest.mark.parametrize("key", ["job_applications", "gcandidaturas:v1"])
def test_duplicate_identities_keep_first_record(storage, kv, key):
    kv.set_item(key, json.dumps([
        {"titulo": "Dev", "empresa": "Acme", "status": "Aprovado"},
        {"titulo": " dev ", "empresa": "ACME", "status": "Reprovado"},
        {"titulo": "QA", "empresa": "Globex", "status": "Em Andamento"},
    ]))

    result = storage.load()

    assert result.duplicates == 1
    assert [(r.title, r.status) for r in result.records] == [
        ("Dev", ApplicationStatus.APPROVED),
        ("QA", ApplicationStatus.IN_PROGRESS),
    ]
