"""Input Validation - schema-checks candidate records with pydantic models.

Invariants:
    - Output never holds a field the schema does not declare
    - Output holds every declared field; those the caller left out carry the
      schema default, so a created record is always schema-shaped
    - Output.fields_set names the fields the caller actually supplied; partial
      updates write only those
    - `id` appears in the output only when the caller supplied a non-null one
    - Failure raises ValidationFailedError with a field -> message map

Design Decisions:
    - Schemas are plain pydantic models; unknown keys are dropped by validating with
      the model's own config, then dumping only declared fields
    - ValidatedRecord is a plain dict for every consumer; fields_set rides along
      instead of a second validation pass
    - Message mapping follows three kinds: missing -> "Required input",
      custom validator -> its own message, anything else -> "Invalid input"
"""

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from recordcrud.core.domain_types import FieldErrorMap, Record
from recordcrud.core.errors import ValidationFailedError
from recordcrud.core.identifiers import ID_FIELD

REQUIRED_MESSAGE = "Required input"
INVALID_MESSAGE = "Invalid input"
_CUSTOM_ERROR_TYPES = frozenset({"value_error", "assertion_error"})


class ValidatedRecord(dict):
    """Schema-normalized record plus the names of the caller-supplied fields."""

    def __init__(self, data: Mapping[str, Any], fields_set: Iterable[str]):
        super().__init__(data)
        self.fields_set = frozenset(fields_set)


def validate_record(schema: type[BaseModel], data: Mapping[str, Any]) -> ValidatedRecord:
    """Validate `data` against `schema`; return the normalized record dict."""
    declared = schema.model_fields
    candidate = {key: value for key, value in data.items() if key in declared}
    try:
        model = schema.model_validate(candidate)
    except ValidationError as e:
        raise ValidationFailedError(field_errors(e)) from e
    record = model.model_dump()
    if record.get(ID_FIELD) is None:
        record.pop(ID_FIELD, None)
    return ValidatedRecord(record, model.model_fields_set & record.keys())


def supplied_fields(record: Record) -> Record:
    """The part of `record` the caller supplied; all of it for a plain mapping."""
    fields_set = getattr(record, "fields_set", None)
    if fields_set is None:
        return dict(record)
    return {key: value for key, value in record.items() if key in fields_set}


def field_errors(error: ValidationError) -> FieldErrorMap:
    """Flatten pydantic errors into {field: message}. First error per field wins."""
    result: FieldErrorMap = {}
    for e in error.errors():
        loc = e.get("loc") or ("__root__",)
        key = ".".join(str(part) for part in loc)
        if key in result:
            continue
        result[key] = _message_for(e)
    return result


def _message_for(e: dict) -> str:
    if e["type"] == "missing":
        return REQUIRED_MESSAGE
    if e["type"] in _CUSTOM_ERROR_TYPES:
        cause = (e.get("ctx") or {}).get("error")
        return str(cause) if cause is not None else e["msg"]
    return INVALID_MESSAGE
