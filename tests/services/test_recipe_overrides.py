"""Recipe Overrides - multi-tenant scoping and alternate-key lookup.

Tests cover:
    - tenant b cannot create over, update, or delete tenant a's record
    - tenant a keeps full access to its own record
    - two tenants may hold records with the same custom_id
    - custom_id lookups are scoped per tenant; id wins over custom_id
"""

import pytest

from recordcrud.core.errors import (
    InvalidIdError, MissingIdError, RecordExistsError, RecordNotFoundError,
)


# ─── owner_scoped ────────────────────────────────────────────────

@pytest.fixture
async def record_a(tenant_crud):
    return await tenant_crud.create({"data": {"custom_id": "abged", "required_field": "req"}}, "a")


async def test_created_record_is_stamped_with_owner(record_a):
    assert record_a["user_id"] == "a"


async def test_other_tenant_create_with_same_id_fails(tenant_crud, record_a):
    with pytest.raises(RecordExistsError):
        await tenant_crud.create({"data": record_a}, "b")


async def test_other_tenant_update_is_not_found(tenant_crud, record_a):
    with pytest.raises(RecordNotFoundError):
        await tenant_crud.update({"data": {**record_a, "custom_id": "changed"}}, "b")


async def test_other_tenant_delete_is_not_found(tenant_crud, record_a):
    with pytest.raises(RecordNotFoundError):
        await tenant_crud.delete({"id": str(record_a["id"])}, "b")


async def test_other_tenant_read_is_not_found(tenant_crud, record_a):
    with pytest.raises(RecordNotFoundError):
        await tenant_crud.read({"id": str(record_a["id"])}, "b")


async def test_owner_updates_reads_and_deletes(tenant_crud, record_a):
    await tenant_crud.update({"data": {**record_a, "custom_id": "UPDATED_ID"}}, "a")
    fetched = await tenant_crud.read({"id": str(record_a["id"])}, "a")
    assert fetched["id"] == record_a["id"]
    assert fetched["custom_id"] == "UPDATED_ID"
    assert await tenant_crud.delete({"id": str(record_a["id"])}, "a") == "OK"


async def test_owner_field_cannot_be_spoofed(tenant_crud, valid_data):
    record = await tenant_crud.create({"data": {**valid_data, "user_id": "a"}}, "b")
    assert record["user_id"] == "b"


async def test_mismatched_write_access_does_not_leak_record(tenant_crud, record_a):
    """Same query, different write access: second caller gets not-found, not a's row."""
    query_input = {"id": str(record_a["id"]), "data": {"required_field": "mine"}}
    updated = await tenant_crud.update(query_input, "a")
    assert updated["required_field"] == "mine"
    with pytest.raises(RecordNotFoundError):
        await tenant_crud.update(query_input, "b")


# ─── alternate_key ───────────────────────────────────────────────

def _data(name):
    return {"name": name, "number": 7, "required_field": "req", "custom_id": "myref"}


async def test_custom_id_shared_across_tenants(keyed_crud):
    a = await keyed_crud.create({"data": _data("tito a")}, "a")
    assert a["custom_id"] == "myref"

    with pytest.raises(RecordExistsError):
        await keyed_crud.create({"id": str(a["id"]), "data": _data("tito")}, "b")

    with pytest.raises(RecordNotFoundError):
        await keyed_crud.update({"data": _data("tito")}, "b")

    b = await keyed_crud.create({"data": _data("tito")}, "b")
    assert b["custom_id"] == "myref"

    updated = await keyed_crud.update({"data": _data("tito updated")}, "b")
    assert updated["id"] == b["id"]
    assert updated["name"] == "tito updated"

    assert (await keyed_crud.read({"custom_id": "myref"}, "a"))["name"] == "tito a"
    assert (await keyed_crud.read({"custom_id": "myref"}, "b"))["name"] == "tito updated"


async def test_id_wins_over_custom_id(keyed_crud):
    a = await keyed_crud.create({"data": _data("first")}, "a")
    await keyed_crud.create({"data": {**_data("second"), "custom_id": "other"}}, "a")
    fetched = await keyed_crud.read({"id": str(a["id"]), "custom_id": "other"}, "a")
    assert fetched["name"] == "first"


async def test_no_id_and_no_custom_id_is_missing_id(keyed_crud):
    with pytest.raises(MissingIdError):
        await keyed_crud.read({}, "a")


async def test_malformed_id_is_not_replaced_by_custom_id(keyed_crud):
    await keyed_crud.create({"data": _data("tito")}, "a")
    with pytest.raises(InvalidIdError):
        await keyed_crud.read({"id": "bogus", "custom_id": "myref"}, "a")


async def test_save_by_custom_id_upserts(keyed_crud):
    created = await keyed_crud.save({"data": _data("v1")}, "a")
    saved = await keyed_crud.save({"data": _data("v2")}, "a")
    assert saved["id"] == created["id"]
    assert saved["name"] == "v2"
