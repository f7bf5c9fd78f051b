"""Predicates - storage filters composed from access rules and lookup queries.

Invariants:
    - A predicate is a field->value mapping (equality on every pair) or an AllOf
    - Empty mappings and None mean "no restriction" and vanish from conjunctions
    - Conjunctions are never merged into one dict: {"a": 1} AND {"a": 2} matches nothing
    - All functions are PURE: no IO, no async
"""

from dataclasses import dataclass
from typing import Any, Mapping, Union

from recordcrud.core.errors import MissingIdError, RecipeError


@dataclass(frozen=True)
class AllOf:
    """Conjunction of predicates."""
    clauses: tuple["Predicate", ...]


Predicate = Union[Mapping[str, Any], AllOf]


def all_of(*predicates: "Predicate | None") -> Predicate:
    """AND the given predicates, flattening nested AllOf and dropping empty ones."""
    clauses: list[Predicate] = []
    for predicate in predicates:
        if predicate is None:
            continue
        if isinstance(predicate, AllOf):
            clauses.extend(predicate.clauses)
        elif predicate:
            clauses.append(dict(predicate))
    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return AllOf(tuple(clauses))


def by_id(record_id: Any) -> dict[str, Any]:
    """Predicate matching exactly one identifier."""
    if record_id is None:
        raise MissingIdError()
    return {"id": record_id}


def as_predicate(identity: Any) -> Predicate:
    """Coerce a caller identity into a predicate. None becomes unrestricted."""
    if identity is None:
        return {}
    if isinstance(identity, (AllOf, Mapping)):
        return identity
    raise RecipeError(
        f"identity of type {type(identity).__name__} is not a predicate; override user_access"
    )


def iter_conditions(predicate: Predicate):
    """Yield (field, value) pairs of a predicate, depth-first."""
    if isinstance(predicate, AllOf):
        for clause in predicate.clauses:
            yield from iter_conditions(clause)
        return
    yield from predicate.items()
