"""Boundary Protocols - contract between the CRUD recipe and its record store.

Invariants:
    - Recipe stages only touch storage through RecordStore
    - Every method operates on at most one record
    - Records cross the boundary as plain dicts keyed by field name
    - Outcomes report match/no-match; stages decide which error that means

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Async in Protocol: implementations do IO, the recipe awaits them
"""

from dataclasses import dataclass
from typing import Any, Protocol

from recordcrud.core.domain_types import Record
from recordcrud.core.predicates import Predicate


@dataclass(frozen=True)
class InsertOutcome:
    """Result of an insert. `duplicate` means the identifier already existed."""
    acknowledged: bool
    duplicate: bool = False


@dataclass(frozen=True)
class DeleteOutcome:
    matched_count: int


class RecordStore(Protocol):
    """Contract for single-record persistence - implemented by infrastructure."""
    async def insert(self, record: Record) -> InsertOutcome: ...
    async def find_one(self, predicate: Predicate) -> Record | None: ...
    async def update_matching(
        self, predicate: Predicate, changes: dict[str, Any], return_updated: bool = True,
    ) -> Record | None: ...
    async def delete_matching(self, predicate: Predicate) -> DeleteOutcome: ...
