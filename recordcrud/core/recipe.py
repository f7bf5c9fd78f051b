"""Recipe - immutable graph of named stages that define the record lifecycle.

Invariants:
    - A Recipe never changes after build(); extending one produces a new Recipe
    - Every dependency names a stage or a declared seed (checked at build time)
    - The graph is acyclic, counting optional and deferred edges (checked at build time)
    - Stage functions receive dependencies as keyword arguments named explicitly by
      each Dependency, never by introspecting parameter names

Design Decisions:
    - Builder over in-place mutation: a deployment assembles its recipe once
      (base defaults + overrides) and shares it read-only across requests
    - Seeds (input, identity, ...) are part of the recipe's declared surface so a
      typo in a dependency name fails at build time instead of per request
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from recordcrud.core.domain_types import DependencyMode, StageName
from recordcrud.core.errors import RecipeError

DEFAULT_SEEDS = frozenset({StageName.INPUT.value, StageName.IDENTITY.value})


def stage_key(name: object) -> str:
    """Normalize a stage name given as str or StageName."""
    if isinstance(name, Enum):
        return str(name.value)
    return str(name)


# ─── Dependencies ────────────────────────────────────────────────

@dataclass(frozen=True)
class Dependency:
    """One edge of the stage graph."""
    name: str
    mode: DependencyMode = DependencyMode.REQUIRED
    param: str | None = None

    @property
    def keyword(self) -> str:
        return self.param or self.name


def needs(name: str, as_: str | None = None) -> Dependency:
    """Required dependency: its failure fails the consumer."""
    return Dependency(stage_key(name), DependencyMode.REQUIRED, as_)


def optional(name: str, as_: str | None = None) -> Dependency:
    """Optional dependency: consumer receives Ok or Err."""
    return Dependency(stage_key(name), DependencyMode.OPTIONAL, as_)


def deferred(name: str, as_: str | None = None) -> Dependency:
    """Deferred dependency: consumer receives an awaitable returning Ok or Err."""
    return Dependency(stage_key(name), DependencyMode.DEFERRED, as_)


# ─── Stages ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Stage:
    """A named producer. `fn` may be sync or async."""
    name: str
    fn: Callable[..., Any]
    inputs: tuple[Dependency, ...] = ()

    @property
    def dependency_names(self) -> tuple[str, ...]:
        return tuple(dep.name for dep in self.inputs)


def stage(name: str, fn: Callable[..., Any], *inputs: Dependency) -> Stage:
    return Stage(stage_key(name), fn, tuple(inputs))


def constant(name: str, value: Any) -> Stage:
    """Stage that always yields `value`."""
    return Stage(stage_key(name), lambda: value)


# ─── Recipe ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Recipe:
    """Validated, read-only stage graph. Build through RecipeBuilder."""
    stages: Mapping[str, Stage]
    seeds: frozenset[str] = field(default=DEFAULT_SEEDS)

    def __contains__(self, name: object) -> bool:
        return stage_key(name) in self.stages or stage_key(name) in self.seeds

    def get(self, name: str) -> Stage | None:
        return self.stages.get(stage_key(name))

    def extend(self, *stages: Stage, **constants: Any) -> "Recipe":
        """Shortcut for RecipeBuilder(self).override(...).build()."""
        builder = RecipeBuilder(self).override(*stages)
        for name, value in constants.items():
            builder.constant(name, value)
        return builder.build()


class RecipeBuilder:
    """Assembles a Recipe from an optional base plus named overrides."""

    def __init__(self, base: Recipe | None = None):
        self._stages: dict[str, Stage] = dict(base.stages) if base else {}
        self._seeds: set[str] = set(base.seeds) if base else set(DEFAULT_SEEDS)

    def override(self, *stages: Stage) -> "RecipeBuilder":
        """Add stages, replacing any existing stage of the same name."""
        for s in stages:
            if s.name in self._seeds:
                raise RecipeError(f"Stage '{s.name}' shadows a request seed")
            self._stages[s.name] = s
        return self

    def constant(self, name: str, value: Any) -> "RecipeBuilder":
        return self.override(constant(name, value))

    def seed(self, *names: str) -> "RecipeBuilder":
        """Declare extra per-request values (e.g. a tenant id)."""
        for name in names:
            name = stage_key(name)
            if name in self._stages:
                raise RecipeError(f"Seed '{name}' shadows a stage")
            self._seeds.add(name)
        return self

    def without(self, *names: str) -> "RecipeBuilder":
        for name in names:
            self._stages.pop(stage_key(name), None)
        return self

    def build(self) -> Recipe:
        check_dependencies(self._stages, self._seeds)
        check_acyclic(self._stages)
        return Recipe(MappingProxyType(dict(self._stages)), frozenset(self._seeds))


# ─── Graph checks (pure) ─────────────────────────────────────────

def check_dependencies(stages: Mapping[str, Stage], seeds: Iterable[str]) -> None:
    """Raise RecipeError listing every dependency that names nothing."""
    known = set(stages) | set(seeds)
    missing = sorted(
        f"{s.name} -> {dep}"
        for s in stages.values()
        for dep in s.dependency_names
        if dep not in known
    )
    if missing:
        raise RecipeError(f"Unknown dependencies: {', '.join(missing)}")


def check_acyclic(stages: Mapping[str, Stage]) -> None:
    """Raise RecipeError naming the first dependency cycle found."""
    visiting: list[str] = []
    done: set[str] = set()

    def visit(name: str) -> None:
        if name in done or name not in stages:
            return
        if name in visiting:
            cycle = visiting[visiting.index(name):] + [name]
            raise RecipeError(f"Dependency cycle: {' -> '.join(cycle)}")
        visiting.append(name)
        for dep in stages[name].dependency_names:
            visit(dep)
        visiting.pop()
        done.add(name)

    for name in sorted(stages):
        visit(name)
