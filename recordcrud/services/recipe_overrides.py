"""Recipe Overrides - ready-made stage replacements for common deployments.

owner_scoped(field):
    Scopes every read and write to records whose `field` equals the caller
    identity, and stamps that field onto every validated record.

alternate_key(field):
    Lets callers target a record by a natural key when no id is given. The
    id still wins when both are present.

Both return a tuple of stages for RecipeBuilder.override() / Recipe.extend().
"""

from typing import Any, Mapping

from pydantic import BaseModel

from recordcrud.core.domain_types import Record, StageName
from recordcrud.core.errors import MissingIdError
from recordcrud.core.predicates import Predicate, by_id
from recordcrud.core.recipe import Stage, needs, optional, stage
from recordcrud.core.result import Ok, Result
from recordcrud.core.validation import validate_record


def owner_scoped(field: str = "user_id") -> tuple[Stage, ...]:
    def scoped_access(identity: Any) -> Predicate:
        return {field: identity}

    def owned_input(
        schema: type[BaseModel], input_data: Mapping[str, Any], identity: Any,
    ) -> Record:
        return validate_record(schema, {**input_data, field: identity})

    return (
        stage(StageName.USER_ACCESS, scoped_access, needs(StageName.IDENTITY)),
        stage(
            StageName.VALID_INPUT, owned_input,
            needs(StageName.SCHEMA), needs(StageName.INPUT_DATA),
            needs(StageName.IDENTITY),
        ),
    )


def alternate_key(field: str) -> tuple[Stage, ...]:
    def key_value(input: Mapping[str, Any], valid_input: Result) -> Any:
        if input and input.get(field) not in (None, ""):
            return input[field]
        if isinstance(valid_input, Ok) and valid_input.value.get(field) not in (None, ""):
            return valid_input.value[field]
        raise MissingIdError()

    def key_query(native_id: Result, key: Result) -> Predicate:
        if isinstance(native_id, Ok):
            return by_id(native_id.value)
        if not isinstance(native_id.error, MissingIdError):
            raise native_id.error
        if isinstance(key, Ok):
            return {field: key.value}
        raise MissingIdError()

    return (
        stage(field, key_value, needs(StageName.INPUT), optional(StageName.VALID_INPUT)),
        stage(
            StageName.QUERY, key_query,
            optional(StageName.NATIVE_ID), optional(field, as_="key"),
        ),
    )
