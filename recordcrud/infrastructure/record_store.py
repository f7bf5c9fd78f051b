"""SQL Record Store - RecordStore implementation over an async SQLAlchemy model.

Invariants:
    - Each call opens its own session; nothing is shared between calls
    - Predicates compile to an AND of column equalities; unknown columns raise
      InvalidQueryError before any SQL runs
    - insert() reports duplicate=True only when a row with the same id exists;
      other integrity failures propagate as DatabaseError
    - update_matching() and delete_matching() go through the ORM unit of work so
      mapper events and onupdate hooks fire; the id column is never updated

Design Decisions:
    - Load-then-mutate over bulk UPDATE: touches at most one row and keeps ORM
      hooks in the path
    - with_for_update() on the lookup: row lock on PostgreSQL, no-op on SQLite
"""

import logging
from typing import Any

from sqlalchemy import and_, inspect as sa_inspect, select, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql.elements import ColumnElement

from recordcrud.core.domain_types import Record
from recordcrud.core.errors import InvalidQueryError
from recordcrud.core.identifiers import ID_FIELD
from recordcrud.core.predicates import Predicate, iter_conditions
from recordcrud.core.repository_protocols import DeleteOutcome, InsertOutcome
from recordcrud.infrastructure.database import DatabaseSessionManager

logger = logging.getLogger(__name__)


class SqlRecordStore:
    """Stores records of one ORM model. Model must have an `id` primary key."""

    def __init__(self, model: type, db: DatabaseSessionManager):
        self._model = model
        self._db = db
        self._columns = [attr.key for attr in sa_inspect(model).column_attrs]
        if ID_FIELD not in self._columns:
            raise TypeError(f"{model.__name__} has no '{ID_FIELD}' column")

    @property
    def model(self) -> type:
        return self._model

    async def insert(self, record: Record) -> InsertOutcome:
        row = self._model(**self._checked(record))
        async with self._db.session() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                record_id = record.get(ID_FIELD)
                if record_id is not None and await session.get(self._model, record_id):
                    logger.info(
                        f"Insert rejected, {self._model.__name__} {record_id} exists",
                        extra={"record_id": str(record_id)},
                    )
                    return InsertOutcome(acknowledged=False, duplicate=True)
                raise
        return InsertOutcome(acknowledged=True)

    async def find_one(self, predicate: Predicate) -> Record | None:
        stmt = select(self._model).where(self._where(predicate)).limit(1)
        async with self._db.session() as session:
            row = (await session.execute(stmt)).scalars().first()
            return self._to_record(row) if row is not None else None

    async def update_matching(
        self, predicate: Predicate, changes: dict[str, Any], return_updated: bool = True,
    ) -> Record | None:
        changes = {k: v for k, v in self._checked(changes).items() if k != ID_FIELD}
        stmt = (
            select(self._model).where(self._where(predicate))
            .limit(1).with_for_update()
        )
        async with self._db.session() as session:
            row = (await session.execute(stmt)).scalars().first()
            if row is None:
                return None
            before = self._to_record(row)
            for key, value in changes.items():
                setattr(row, key, value)
            await session.flush()
            await session.refresh(row)
            after = self._to_record(row)
            await session.commit()
        return after if return_updated else before

    async def delete_matching(self, predicate: Predicate) -> DeleteOutcome:
        stmt = select(self._model).where(self._where(predicate)).limit(1)
        async with self._db.session() as session:
            row = (await session.execute(stmt)).scalars().first()
            if row is None:
                return DeleteOutcome(matched_count=0)
            await session.delete(row)
            await session.commit()
        return DeleteOutcome(matched_count=1)

    # ─── helpers ────────────────────────────────────────────────

    def _checked(self, fields: dict[str, Any]) -> dict[str, Any]:
        for key in fields:
            if key not in self._columns:
                raise InvalidQueryError(key)
        return dict(fields)

    def _where(self, predicate: Predicate) -> ColumnElement[bool]:
        conditions = []
        for key, value in iter_conditions(predicate):
            if key not in self._columns:
                raise InvalidQueryError(key)
            conditions.append(getattr(self._model, key) == value)
        return and_(*conditions) if conditions else true()

    def _to_record(self, row: Any) -> Record:
        return {key: getattr(row, key) for key in self._columns}
