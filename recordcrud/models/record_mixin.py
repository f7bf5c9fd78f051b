"""Record Mixin - columns every CRUD-managed table carries.

Invariants:
    - id is a UUID primary key; the store relies on it for duplicate detection
    - id never changes after insert (stores strip it from update changes)
    - updated_at is refreshed by the ORM onupdate hook on every update_matching call
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordMixin:
    """Mix into a Base subclass to make it usable with SqlRecordStore."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=_utcnow, onupdate=_utcnow,
    )
