"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - RecordId wraps UUID; raw caller identifiers stay `object` until converted
    - Predicate is a read-only mapping or an AllOf conjunction (core/predicates.py)
    - Stage names for the standard recipe live in StageName, never as scattered literals

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stage names compare equal to plain strings, so overrides may use either
"""

from enum import Enum
from typing import Any, NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

RecordId = NewType("RecordId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Record = dict[str, Any]
FieldErrorMap = dict[str, str]


# ─── Enums ───────────────────────────────────────────────────────

class StageName(str, Enum):
    """Stages of the standard CRUD recipe, in rough dependency order."""
    # Seeds (supplied per request)
    INPUT = "input"
    IDENTITY = "identity"

    # Constants (supplied per deployment)
    STORE = "store"
    SCHEMA = "schema"
    RECORD_LABEL = "record_label"

    # Access composer
    USER_ACCESS = "user_access"
    READ_ACCESS = "read_access"
    WRITE_ACCESS = "write_access"

    # Input validator
    INPUT_DATA = "input_data"
    VALID_INPUT = "valid_input"

    # Identifier resolver + query builder
    ID = "id"
    NATIVE_ID = "native_id"
    QUERY = "query"

    # Primitives
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    # Composites
    SAVE = "save"
    DATA = "data"
    RECORD_SAVED = "record_saved"


class DependencyMode(str, Enum):
    """How a stage consumes one of its dependencies."""
    REQUIRED = "required"    # failure propagates
    OPTIONAL = "optional"    # failure arrives as Err
    DEFERRED = "deferred"    # resolved only when awaited, as a Result


DELETE_ACK = "OK"
