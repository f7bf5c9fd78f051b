"""Bootstrap - wires settings, logging, database and the default recipe.

Invariants:
    - Nothing runs at import time; create_record_crud() does all wiring
    - The returned facade owns no global state: two calls give two independent stacks
"""

import logging

from pydantic import BaseModel

from recordcrud.config import Settings, get_settings
from recordcrud.core.recipe import Stage
from recordcrud.infrastructure.database import DatabaseSessionManager
from recordcrud.infrastructure.observability import setup_logging
from recordcrud.infrastructure.record_store import SqlRecordStore
from recordcrud.services.crud_recipe import default_recipe
from recordcrud.services.record_crud import RecordCrud

logger = logging.getLogger(__name__)


def create_record_crud(
    model: type,
    schema: type[BaseModel],
    *overrides: Stage,
    settings: Settings | None = None,
    db: DatabaseSessionManager | None = None,
    record_label: str | None = None,
    configure_logging: bool = False,
) -> RecordCrud:
    """Build a RecordCrud for one ORM model / pydantic schema pair."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, settings.log_format)
    if db is None:
        db = DatabaseSessionManager(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
    store = SqlRecordStore(model, db)
    recipe = default_recipe(store, schema, *overrides, record_label=record_label)
    logger.info(f"Record CRUD ready for {model.__name__}")
    return RecordCrud(recipe)
