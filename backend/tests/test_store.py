from __future__ import annotations

import json

import pytest

from activity_log.errors import NotFound
from activity_log.schemas import ActivityFields, ActivityUpdate
from activity_log.store import STORAGE_KEY, ActivityStore


def _create(store: ActivityStore, person: str, **fields) -> int:
    draft = {"hour": "10", "minute": "00", "main_person": person, **fields}
    return store.create(draft).id


def test_create_assigns_sequential_ids(store: ActivityStore):
    first = store.create(ActivityFields(hour="08", minute="05", main_person="Alice"))
    second = store.create({"hour": "09", "minute": "10", "mainPerson": "Bob"})
    assert first.id == 1
    assert second.id == 2
    assert first.details == []
    assert second.main_person == "Bob"


def test_list_is_newest_first(store: ActivityStore):
    for name in ("Alice", "Bob", "Carol"):
        _create(store, name)
    records = store.list()
    assert [record.id for record in records] == [3, 2, 1]
    assert [record.main_person for record in records] == ["Carol", "Bob", "Alice"]


def test_list_on_empty_storage(store: ActivityStore):
    assert store.list() == []


def test_delete_renumbers_survivors_in_order(store: ActivityStore):
    for name in ("A", "B", "C", "D"):
        _create(store, name)

    store.delete(2)

    records = store.list()
    assert [record.id for record in records] == [3, 2, 1]
    assert [record.main_person for record in reversed(records)] == ["A", "C", "D"]


def test_delete_unknown_id_is_noop(store: ActivityStore):
    _create(store, "A")
    store.delete(42)
    assert [record.id for record in store.list()] == [1]


def test_ids_restart_after_store_is_emptied(store: ActivityStore):
    assert _create(store, "A") == 1
    store.delete(1)
    assert store.list() == []
    assert _create(store, "B") == 1


def test_update_merges_fields_and_keeps_details(store: ActivityStore):
    activity_id = _create(store, "Alice", participants_count=2, comment="first")
    store.add_detail(activity_id, {"hour": "10", "minute": "15", "main_person": "Scout"})

    updated = store.update(activity_id, ActivityUpdate(comment="second", transport_type="car"))

    assert updated.id == activity_id
    assert updated.comment == "second"
    assert updated.transport_type == "car"
    assert updated.participants_count == 2
    assert updated.main_person == "Alice"
    assert [detail.main_person for detail in updated.details] == ["Scout"]


def test_update_can_clear_optional_field_but_not_required(store: ActivityStore):
    activity_id = _create(store, "Alice", comment="note")
    updated = store.update(activity_id, {"comment": None, "mainPerson": None})
    assert updated.comment is None
    assert updated.main_person == "Alice"


def test_update_unknown_activity_raises(store: ActivityStore):
    with pytest.raises(NotFound):
        store.update(7, {"comment": "nope"})


def test_get_returns_single_record(store: ActivityStore):
    _create(store, "Alice")
    assert store.get(1).main_person == "Alice"
    with pytest.raises(NotFound):
        store.get(2)


def test_add_detail_numbers_within_parent(store: ActivityStore):
    first = _create(store, "A")
    second = _create(store, "B")

    assert store.add_detail(first, {"hour": "11", "minute": "00"}).id == 1
    assert store.add_detail(first, {"hour": "11", "minute": "05"}).id == 2
    assert store.add_detail(second, {"hour": "12", "minute": "00"}).id == 1

    activity = store.get(first)
    assert [detail.id for detail in activity.details] == [2, 1]


def test_add_detail_to_unknown_activity_raises(store: ActivityStore):
    with pytest.raises(NotFound):
        store.add_detail(3, {"hour": "11", "minute": "00"})


def test_delete_detail_renumbers_only_that_activity(store: ActivityStore):
    first = _create(store, "A")
    second = _create(store, "B")
    for minute in ("01", "02", "03"):
        store.add_detail(first, {"hour": "11", "minute": minute})
    for minute in ("04", "05"):
        store.add_detail(second, {"hour": "12", "minute": minute})

    store.delete_detail(first, 1)

    first_details = store.get(first).details
    assert [detail.id for detail in first_details] == [2, 1]
    assert [detail.minute for detail in first_details] == ["03", "02"]
    second_details = store.get(second).details
    assert [detail.id for detail in second_details] == [2, 1]
    assert [detail.minute for detail in second_details] == ["05", "04"]
    assert [record.id for record in store.list()] == [2, 1]


def test_delete_detail_unknown_detail_is_noop(store: ActivityStore):
    activity_id = _create(store, "A")
    store.add_detail(activity_id, {"hour": "11", "minute": "00"})
    store.delete_detail(activity_id, 9)
    assert [detail.id for detail in store.get(activity_id).details] == [1]


def test_delete_detail_unknown_activity_raises(store: ActivityStore):
    with pytest.raises(NotFound):
        store.delete_detail(5, 1)


def test_corrupt_blob_is_treated_as_empty(json_storage):
    json_storage.write(STORAGE_KEY, "{not json")
    store = ActivityStore(json_storage)
    assert store.list() == []
    assert store.create({"hour": "07", "minute": "00", "main_person": "Fresh"}).id == 1


def test_undecodable_blob_is_treated_as_empty(json_storage):
    (json_storage.directory / f"{STORAGE_KEY}.json").write_bytes(b"[\xff\xfe garbage")
    store = ActivityStore(json_storage)
    assert store.list() == []
    with pytest.raises(NotFound):
        store.get(1)
    assert store.create({"hour": "07", "minute": "00", "main_person": "Fresh"}).id == 1
    assert [record.main_person for record in store.list()] == ["Fresh"]


def test_wrong_shape_blob_is_treated_as_empty(json_storage):
    json_storage.write(STORAGE_KEY, json.dumps({"id": 1}))
    assert ActivityStore(json_storage).list() == []


def test_persisted_blob_uses_camel_case_keys(json_storage):
    store = ActivityStore(json_storage)
    store.create({"hour": "07", "minute": "45", "main_person": "Alice", "participants_count": 2})
    payload = json.loads(json_storage.read(STORAGE_KEY))
    assert payload[0]["mainPerson"] == "Alice"
    assert payload[0]["participantsCount"] == 2
    assert payload[0]["details"] == []


def test_store_works_on_sql_storage(sql_storage):
    store = ActivityStore(sql_storage)
    store.create({"hour": "07", "minute": "45", "main_person": "Alice"})
    store.create({"hour": "08", "minute": "45", "main_person": "Bob"})
    store.delete(1)
    assert [(record.id, record.main_person) for record in store.list()] == [(1, "Bob")]


def test_separate_keys_do_not_share_records(json_storage):
    ActivityStore(json_storage, key="one").create({"hour": "01", "minute": "00", "main_person": "A"})
    assert ActivityStore(json_storage, key="two").list() == []
