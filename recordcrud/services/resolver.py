"""Stage Resolver - evaluates a recipe target with per-request memoization.

Invariants:
    - Resolver holds no state; every resolve() call gets a fresh _Resolution
    - Each stage runs at most once per resolution, however many consumers it has
    - Independent dependencies of a stage are awaited concurrently
    - Optional dependencies arrive as Ok/Err; deferred ones as an awaitable Result
      that starts the stage only when called
    - resolve() returns only after every stage task it started has finished

Design Decisions:
    - asyncio.Task per stage as the memo entry: concurrent consumers await the same
      task instead of racing to compute it twice
    - Only Exception subclasses become Err; cancellation propagates
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from recordcrud.core.domain_types import DependencyMode
from recordcrud.core.errors import CrudError, RecipeError, UnknownStageError
from recordcrud.core.recipe import Recipe, Stage, stage_key
from recordcrud.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)

DeferredResult = Callable[[], Awaitable[Result]]


@dataclass(frozen=True)
class RequestContext:
    """Per-request seed values."""
    input: Mapping[str, Any] = field(default_factory=dict)
    identity: Any = None
    seeds: Mapping[str, Any] = field(default_factory=dict)

    def seed_values(self) -> dict[str, Any]:
        return {**self.seeds, "input": self.input, "identity": self.identity}


class Resolver:
    """Resolves recipe targets. Safe to share across requests."""

    async def resolve(self, recipe: Recipe, target: str, context: RequestContext) -> Any:
        """Resolve `target`, raising the failure of the first required stage that fails."""
        name = stage_key(target)
        if name not in recipe:
            raise UnknownStageError(name)
        resolution = _Resolution(recipe, context)
        try:
            return await resolution.value(name)
        finally:
            await resolution.settle()

    async def resolve_result(
        self, recipe: Recipe, target: str, context: RequestContext,
    ) -> Result:
        """Like resolve() but returns Ok/Err instead of raising."""
        try:
            return Ok(await self.resolve(recipe, target, context))
        except Exception as e:
            return Err(e)


class _Resolution:
    """Memo table for one request."""

    def __init__(self, recipe: Recipe, context: RequestContext):
        self._recipe = recipe
        self._seeds = context.seed_values()
        self._tasks: dict[str, asyncio.Task] = {}

    async def value(self, name: str) -> Any:
        if name in self._recipe.seeds:
            if name not in self._seeds:
                raise RecipeError(f"Seed '{name}' was not supplied with the request")
            return self._seeds[name]
        task = self._tasks.get(name)
        if task is None:
            s = self._recipe.get(name)
            if s is None:
                raise UnknownStageError(name)
            task = asyncio.ensure_future(self._run(s))
            self._tasks[name] = task
        return await task

    async def result(self, name: str) -> Result:
        try:
            return Ok(await self.value(name))
        except Exception as e:
            return Err(e)

    def deferred(self, name: str) -> DeferredResult:
        async def run() -> Result:
            return await self.result(name)
        return run

    async def settle(self) -> None:
        pending = [t for t in self._tasks.values() if not t.done()]
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self, s: Stage) -> Any:
        kwargs = await self._collect(s)
        try:
            produced = s.fn(**kwargs)
            if inspect.isawaitable(produced):
                produced = await produced
        except CrudError as e:
            if e.context.stage is None:
                e.context.stage = s.name
            logger.debug(
                f"Stage {s.name} failed: {e.code}",
                extra={"stage": s.name, "error_code": e.code},
            )
            raise
        except Exception as e:
            logger.debug(f"Stage {s.name} failed: {e!r}", extra={"stage": s.name})
            raise
        return produced

    async def _collect(self, s: Stage) -> dict[str, Any]:
        awaited_keys: list[str] = []
        awaited: list[Awaitable[Any]] = []
        kwargs: dict[str, Any] = {}
        for dep in s.inputs:
            if dep.mode is DependencyMode.DEFERRED:
                kwargs[dep.keyword] = self.deferred(dep.name)
            elif dep.mode is DependencyMode.OPTIONAL:
                awaited_keys.append(dep.keyword)
                awaited.append(self.result(dep.name))
            else:
                awaited_keys.append(dep.keyword)
                awaited.append(self.value(dep.name))
        values = await asyncio.gather(*awaited)
        kwargs.update(zip(awaited_keys, values))
        return kwargs
