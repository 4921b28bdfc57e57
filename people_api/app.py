"""FastAPI application wiring for the People API."""
from __future__ import annotations

import logging

from fastapi import FastAPI

from people_api.core.cache import TagCache, get_tag_cache
from people_api.core.config import Settings, get_settings
from people_api.core.logging_config import configure_logging
from people_api.repositories.person_repository import PersonRepository
from people_api.repositories.sql_repository import SQLRepository
from people_api.routers import people as people_router
from people_api.services.person_service import PersonService

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, cache: TagCache | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``uvicorn people_api.app:create_app --factory``)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="People API")
    repository = PersonRepository(
        cache if cache is not None else get_tag_cache(),
        SQLRepository(),
        settings=settings,
    )
    app.state.settings = settings
    app.state.person_service = PersonService(repository)
    app.include_router(people_router.router)

    logger.info("People API configured (env=%s)", settings.app_env)
    return app
