"""Record CRUD Facade - binds a recipe to a resolver and exposes the operations.

Invariants:
    - Holds no per-request state; one instance serves any number of requests
    - extend() returns a new facade over an extended recipe, the original is untouched
    - Failures are logged once here with their error code, then re-raised unchanged
"""

import logging
from typing import Any, Mapping

from recordcrud.core.domain_types import StageName
from recordcrud.core.errors import CrudError
from recordcrud.core.recipe import Recipe, Stage, stage_key
from recordcrud.core.result import Result
from recordcrud.services.resolver import RequestContext, Resolver

logger = logging.getLogger(__name__)


class RecordCrud:
    """Entry point: `await crud.save({"data": {...}}, identity)`."""

    def __init__(self, recipe: Recipe, resolver: Resolver | None = None):
        self._recipe = recipe
        self._resolver = resolver or Resolver()

    @property
    def recipe(self) -> Recipe:
        return self._recipe

    def extend(self, *stages: Stage, **constants: Any) -> "RecordCrud":
        return RecordCrud(self._recipe.extend(*stages, **constants), self._resolver)

    async def execute(
        self,
        target: str,
        input: Mapping[str, Any] | None = None,
        identity: Any = None,
        **seeds: Any,
    ) -> Any:
        """Resolve any recipe stage for one request."""
        name = stage_key(target)
        context = RequestContext(input or {}, identity, seeds)
        try:
            return await self._resolver.resolve(self._recipe, name, context)
        except CrudError as e:
            logger.warning(
                f"{name} failed: {e.code} {e.message}",
                extra={"target": name, "error_code": e.code, "stage": e.context.stage},
            )
            raise

    async def execute_result(
        self,
        target: str,
        input: Mapping[str, Any] | None = None,
        identity: Any = None,
        **seeds: Any,
    ) -> Result:
        context = RequestContext(input or {}, identity, seeds)
        return await self._resolver.resolve_result(self._recipe, target, context)

    async def create(self, input: Mapping[str, Any], identity: Any = None, **seeds: Any):
        return await self.execute(StageName.CREATE, input, identity, **seeds)

    async def read(self, input: Mapping[str, Any], identity: Any = None, **seeds: Any):
        return await self.execute(StageName.READ, input, identity, **seeds)

    async def update(self, input: Mapping[str, Any], identity: Any = None, **seeds: Any):
        return await self.execute(StageName.UPDATE, input, identity, **seeds)

    async def delete(self, input: Mapping[str, Any], identity: Any = None, **seeds: Any):
        return await self.execute(StageName.DELETE, input, identity, **seeds)

    async def save(self, input: Mapping[str, Any], identity: Any = None, **seeds: Any):
        return await self.execute(StageName.SAVE, input, identity, **seeds)

    async def data(self, input: Mapping[str, Any], identity: Any = None, **seeds: Any):
        return await self.execute(StageName.DATA, input, identity, **seeds)
