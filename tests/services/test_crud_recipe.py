"""CRUD Recipe - create/read/update/delete against a real SQLite store.

Tests cover:
    - create assigns a fresh id, strips unknown fields, rejects a second create
    - invalid input -> VALIDATION_ERROR with field errors
    - read/update/delete without an id -> MISSING_ID; unknown id -> RECORD_NOT_FOUND
    - malformed id -> INVALID_ID
    - round trip create -> read, repeated reads are identical
    - update changes only supplied fields, delete acknowledges with "OK"
    - create applies schema defaults that read returns; update never resets them
"""

import pytest
from uuid import UUID, uuid4

from recordcrud.core.errors import (
    InvalidIdError, MissingDataError, MissingIdError, RecordExistsError,
    RecordNotFoundError, ValidationFailedError,
)
from recordcrud.services.crud_recipe import default_recipe
from recordcrud.services.record_crud import RecordCrud
from tests.sample_records import DefaultedSampleSchema, SampleRecordSchema


# ─── CREATE ──────────────────────────────────────────────────────

async def test_create_returns_record_with_fresh_id(crud, valid_data):
    record = await crud.create({"data": valid_data})
    assert isinstance(record["id"], UUID)
    assert record["name"] == "tito"
    assert record["number"] == 7
    assert record["required_field"] == "req"


async def test_second_create_with_same_record_fails(crud, valid_data):
    record = await crud.create({"data": valid_data})
    with pytest.raises(RecordExistsError) as exc:
        await crud.create({"data": record})
    assert exc.value.code == "RECORD_EXISTS"


async def test_create_with_envelope_id_uses_it(crud, valid_data):
    rid = uuid4()
    record = await crud.create({"id": str(rid), "data": valid_data})
    assert record["id"] == rid


async def test_create_with_malformed_id_fails(crud, valid_data):
    with pytest.raises(InvalidIdError):
        await crud.create({"id": "55566f586c74cc3152aad3b8", "data": valid_data})


async def test_create_with_missing_required_field_reports_it(crud):
    with pytest.raises(ValidationFailedError) as exc:
        await crud.create({"data": {"name": "tito", "number": 7}})
    assert exc.value.code == "VALIDATION_ERROR"
    assert exc.value.field_errors["required_field"] == "Required input"


async def test_create_strips_fields_not_in_schema(crud):
    record = await crud.create(
        {"data": {"name": "tito", "required_field": "req", "extra_field": "random"}},
    )
    assert "extra_field" not in record
    fetched = await crud.read({"id": str(record["id"])})
    assert "extra_field" not in fetched


async def test_create_without_data_fails(crud):
    with pytest.raises(MissingDataError):
        await crud.create({})


# ─── READ ────────────────────────────────────────────────────────

async def test_read_without_input_fails_with_missing_id(crud):
    with pytest.raises(MissingIdError):
        await crud.read({})


async def test_read_unknown_id_fails(crud):
    with pytest.raises(RecordNotFoundError):
        await crud.read({"id": str(uuid4())})


async def test_read_round_trip_matches_created_record(crud, valid_data):
    record = await crud.create({"data": valid_data})
    fetched = await crud.read({"id": str(record["id"])})
    for key, value in record.items():
        assert fetched[key] == value


async def test_repeated_reads_are_identical(crud, valid_data):
    record = await crud.create({"data": valid_data})
    first = await crud.read({"id": record["id"]})
    second = await crud.read({"id": record["id"]})
    assert first == second


async def test_read_not_found_carries_label(store, valid_data):
    crud = RecordCrud(default_recipe(store, SampleRecordSchema, record_label="Sample"))
    with pytest.raises(RecordNotFoundError) as exc:
        await crud.read({"id": str(uuid4())})
    assert exc.value.label == "Sample"
    assert exc.value.message == "Sample not found"


# ─── UPDATE ──────────────────────────────────────────────────────

async def test_update_without_id_fails(crud):
    with pytest.raises(MissingIdError):
        await crud.update({"data": {"name": "tito 2", "required_field": "req"}})


async def test_update_unknown_id_fails(crud):
    with pytest.raises(RecordNotFoundError):
        await crud.update({
            "id": str(uuid4()),
            "data": {"name": "tito 2", "required_field": "req"},
        })


async def test_update_changes_supplied_fields_only(crud, valid_data):
    record = await crud.create({"data": valid_data})
    updated = await crud.update({
        "id": str(record["id"]),
        "data": {"name": "tito 2", "required_field": "req", "extra_field": "random"},
    })
    assert updated["name"] == "tito 2"
    assert updated["number"] == 7
    assert "extra_field" not in updated

    fetched = await crud.read({"id": str(record["id"])})
    assert fetched["name"] == "tito 2"
    assert fetched["number"] == 7


async def test_update_runs_backend_hooks(crud, valid_data):
    record = await crud.create({"data": valid_data})
    before = await crud.read({"id": record["id"]})
    updated = await crud.update({
        "id": record["id"], "data": {"name": "later", "required_field": "req"},
    })
    assert updated["updated_at"] >= before["updated_at"]
    assert updated["created_at"] == before["created_at"]


async def test_update_with_record_id_ignores_envelope_id(crud, valid_data):
    first = await crud.create({"data": valid_data})
    second = await crud.create({"data": valid_data})
    updated = await crud.update({
        "id": str(second["id"]),
        "data": {"id": str(first["id"]), "name": "first only", "required_field": "req"},
    })
    assert updated["id"] == first["id"]
    assert (await crud.read({"id": second["id"]}))["name"] == "tito"


async def test_create_then_read_returns_schema_defaults(store):
    defaulted = RecordCrud(default_recipe(store, DefaultedSampleSchema))
    record = await defaulted.create({"data": {"required_field": "req"}})
    assert record["number"] == 5

    fetched = await defaulted.read({"id": record["id"]})
    assert fetched["number"] == 5
    assert fetched["name"] == "draft"


async def test_update_leaves_unsupplied_fields_alone_despite_defaults(store):
    defaulted = RecordCrud(default_recipe(store, DefaultedSampleSchema))
    record = await defaulted.create({"data": {"required_field": "req", "number": 9}})
    updated = await defaulted.update({
        "id": record["id"], "data": {"name": "renamed", "required_field": "req"},
    })
    assert updated["number"] == 9
    assert updated["name"] == "renamed"


# ─── DELETE ──────────────────────────────────────────────────────

async def test_delete_without_id_fails(crud):
    with pytest.raises(MissingIdError):
        await crud.delete({})


async def test_delete_unknown_id_fails(crud):
    with pytest.raises(RecordNotFoundError):
        await crud.delete({"id": str(uuid4())})


async def test_delete_removes_record(crud, valid_data):
    record = await crud.create({"data": valid_data})
    assert await crud.delete({"id": str(record["id"])}) == "OK"
    with pytest.raises(RecordNotFoundError):
        await crud.read({"id": str(record["id"])})
