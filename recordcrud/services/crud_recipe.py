"""CRUD Recipe - the standard stage graph for single-record lifecycles.

Invariants:
    - Access stages (user_access, read_access, write_access) never touch storage
    - valid_input never touches storage and never invents an id
    - Every primitive makes exactly one store call and raises on no-match
    - read filters by read_access AND query; update/delete by write_access AND query
    - update narrows to the validated record's own id when it carries one
    - create stores the schema-defaulted record; update writes only supplied fields
    - Composites try the primary branch first; the fallback branch runs only when
      the primary failed, and its error is the one surfaced

Design Decisions:
    - Stage functions are plain module-level functions: overrides replace them by
      name through RecipeBuilder, tests call them directly
    - Composite stages are built by fallback_stage() so every fallback shares the
      same Result handling and logging
"""

import logging
from typing import Any, Mapping
from uuid import uuid4

from pydantic import BaseModel

from recordcrud.core.domain_types import DELETE_ACK, Record, StageName
from recordcrud.core.errors import (
    CouldNotCreateRecordError,
    MissingDataError,
    MissingIdError,
    RecordExistsError,
    RecordNotFoundError,
)
from recordcrud.core.identifiers import ID_FIELD, pick_raw_id, to_native_id
from recordcrud.core.predicates import Predicate, all_of, as_predicate, by_id
from recordcrud.core.recipe import (
    Recipe, RecipeBuilder, Stage, constant, deferred, needs, optional, stage,
    stage_key,
)
from recordcrud.core.repository_protocols import RecordStore
from recordcrud.core.result import Ok, Result, first_success
from recordcrud.core.validation import supplied_fields, validate_record
from recordcrud.services.resolver import DeferredResult

logger = logging.getLogger(__name__)


# ─── Access composer ─────────────────────────────────────────────

def user_access(identity: Any) -> Predicate:
    return as_predicate(identity)


def read_access(user_access: Predicate) -> Predicate:
    return user_access


def write_access(user_access: Predicate) -> Predicate:
    return user_access


# ─── Input validator ─────────────────────────────────────────────

def input_data(input: Mapping[str, Any]) -> Mapping[str, Any]:
    """Select the record payload from the input envelope."""
    data = input.get("data") if input else None
    if not isinstance(data, Mapping):
        raise MissingDataError()
    return data


def valid_input(schema: type[BaseModel], input_data: Mapping[str, Any]) -> Record:
    return validate_record(schema, input_data)


# ─── Identifier resolver + query builder ─────────────────────────

def record_id(valid_input: Result, input: Mapping[str, Any]) -> Any:
    validated = valid_input.value if isinstance(valid_input, Ok) else None
    return pick_raw_id(validated, input)


def native_id(raw_id: Any) -> Any:
    return to_native_id(raw_id)


def query(native_id: Any) -> Predicate:
    return by_id(native_id)


# ─── Primitives ──────────────────────────────────────────────────

async def create(store: RecordStore, valid_input: Record, native_id: Result) -> Record:
    """Insert the validated record under the asserted id, or a fresh one."""
    if isinstance(native_id, Ok):
        new_id = native_id.value
    elif isinstance(native_id.error, MissingIdError):
        new_id = uuid4()
    else:
        raise native_id.error

    record = {**valid_input, ID_FIELD: new_id}
    outcome = await store.insert(record)
    if outcome.duplicate:
        raise RecordExistsError(str(new_id))
    if not outcome.acknowledged:
        raise CouldNotCreateRecordError()
    logger.info("Record created", extra={"record_id": str(new_id)})
    return record


async def read(
    store: RecordStore, read_access: Predicate, query: Predicate,
    record_label: str | None = None,
) -> Record:
    found = await store.find_one(all_of(read_access, query))
    if found is None:
        raise RecordNotFoundError(record_label)
    return found


async def update(
    store: RecordStore, query: Predicate, write_access: Predicate, valid_input: Record,
) -> Record:
    """Apply the validated fields to the one record write_access lets us touch."""
    own_id = valid_input.get(ID_FIELD)
    target = by_id(to_native_id(own_id)) if own_id is not None else query
    changes = {k: v for k, v in supplied_fields(valid_input).items() if k != ID_FIELD}
    updated = await store.update_matching(
        all_of(write_access, target), changes, return_updated=True,
    )
    if updated is None:
        raise RecordNotFoundError()
    logger.info("Record updated", extra={"record_id": str(updated.get(ID_FIELD))})
    return updated


async def delete(store: RecordStore, query: Predicate, write_access: Predicate) -> str:
    outcome = await store.delete_matching(all_of(write_access, query))
    if not outcome.matched_count:
        raise RecordNotFoundError()
    return DELETE_ACK


# ─── Composites ──────────────────────────────────────────────────

def fallback_stage(name: str, primary: str, fallback: str) -> Stage:
    """Stage resolving `primary`, or `fallback` when primary fails for any reason."""
    name, primary, fallback = stage_key(name), stage_key(primary), stage_key(fallback)

    async def run(primary_result: Result, fallback_result: DeferredResult) -> Any:
        if isinstance(primary_result, Ok):
            return primary_result.value
        logger.info(
            f"{name}: {primary} failed ({primary_result.code}), trying {fallback}",
            extra={"stage": name, "error_code": primary_result.code},
        )
        return first_success(primary_result, await fallback_result()).unwrap()

    return stage(
        name, run,
        optional(primary, as_="primary_result"),
        deferred(fallback, as_="fallback_result"),
    )


def record_saved(save: Any) -> str:
    return "ok"


# ─── Recipe ──────────────────────────────────────────────────────

STANDARD_STAGES: tuple[Stage, ...] = (
    constant(StageName.RECORD_LABEL, None),
    stage(StageName.USER_ACCESS, user_access, needs(StageName.IDENTITY)),
    stage(StageName.READ_ACCESS, read_access, needs(StageName.USER_ACCESS)),
    stage(StageName.WRITE_ACCESS, write_access, needs(StageName.USER_ACCESS)),
    stage(StageName.INPUT_DATA, input_data, needs(StageName.INPUT)),
    stage(
        StageName.VALID_INPUT, valid_input,
        needs(StageName.SCHEMA), needs(StageName.INPUT_DATA),
    ),
    stage(
        StageName.ID, record_id,
        optional(StageName.VALID_INPUT), needs(StageName.INPUT),
    ),
    stage(StageName.NATIVE_ID, native_id, needs(StageName.ID, as_="raw_id")),
    stage(StageName.QUERY, query, needs(StageName.NATIVE_ID)),
    stage(
        StageName.CREATE, create,
        needs(StageName.STORE), needs(StageName.VALID_INPUT),
        optional(StageName.NATIVE_ID),
    ),
    stage(
        StageName.READ, read,
        needs(StageName.STORE), needs(StageName.READ_ACCESS),
        needs(StageName.QUERY), needs(StageName.RECORD_LABEL),
    ),
    stage(
        StageName.UPDATE, update,
        needs(StageName.STORE), needs(StageName.QUERY),
        needs(StageName.WRITE_ACCESS), needs(StageName.VALID_INPUT),
    ),
    stage(
        StageName.DELETE, delete,
        needs(StageName.STORE), needs(StageName.QUERY), needs(StageName.WRITE_ACCESS),
    ),
    fallback_stage(StageName.SAVE, StageName.UPDATE, StageName.CREATE),
    fallback_stage(StageName.DATA, StageName.SAVE, StageName.READ),
    stage(StageName.RECORD_SAVED, record_saved, needs(StageName.SAVE)),
)


def default_recipe(
    store: RecordStore,
    schema: type[BaseModel],
    *overrides: Stage,
    record_label: str | None = None,
) -> Recipe:
    """Standard recipe bound to a store and schema, with optional stage overrides."""
    builder = (
        RecipeBuilder()
        .override(*STANDARD_STAGES)
        .constant(StageName.STORE, store)
        .constant(StageName.SCHEMA, schema)
        .constant(StageName.RECORD_LABEL, record_label)
    )
    return builder.override(*overrides).build()
