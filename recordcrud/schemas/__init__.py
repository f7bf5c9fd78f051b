"""Pydantic Schemas - validation contracts for candidate records.

Invariants:
    - Schemas validate at the input boundary; ORM models handle persistence
"""

from recordcrud.schemas.record import RecordSchema  # noqa: F401
