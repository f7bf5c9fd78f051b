"""Identifier Resolution - picks and converts the canonical record identifier.

Invariants:
    - Validated record id wins over the envelope's `id`; nothing else is consulted
    - Absent identifier raises MissingIdError, malformed one raises InvalidIdError
    - All functions are PURE: no IO, no async
"""

from typing import Any, Mapping
from uuid import UUID

from recordcrud.core.domain_types import RecordId
from recordcrud.core.errors import InvalidIdError, MissingIdError

ID_FIELD = "id"


def pick_raw_id(valid_input: Mapping[str, Any] | None, input: Mapping[str, Any] | None) -> Any:
    """Return the caller-asserted identifier, or raise MissingIdError."""
    if valid_input and valid_input.get(ID_FIELD) is not None:
        return valid_input[ID_FIELD]
    if input and input.get(ID_FIELD) not in (None, ""):
        return input[ID_FIELD]
    raise MissingIdError()


def to_native_id(raw_id: Any) -> RecordId:
    """Convert a raw identifier (UUID, hex or canonical string) into a RecordId."""
    if isinstance(raw_id, UUID):
        return RecordId(raw_id)
    if isinstance(raw_id, str):
        try:
            return RecordId(UUID(raw_id.strip()))
        except ValueError:
            raise InvalidIdError(raw_id) from None
    raise InvalidIdError(raw_id)
