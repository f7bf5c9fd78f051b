"""Record Schemas - pydantic base for the schemas handed to valid_input.

Invariants:
    - Unknown keys are ignored, never stored
    - id is optional and only present in validated output when the caller sent it
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class RecordSchema(BaseModel):
    """Subclass and declare the record's writable fields."""
    model_config = ConfigDict(extra="ignore")

    id: UUID | None = None
