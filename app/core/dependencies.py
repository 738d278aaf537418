# app/core/dependencies.py
import logging

from fastapi import HTTPException, Request, status

from app.core.config import ConfigValidator, Settings, StoreBackendEnum
from app.database import create_engine, create_session_factory, init_db
from app.domains.project.postgrest import PostgrestRowStore
from app.domains.project.service import ProjectService
from app.domains.project.store import RowStore, SqlAlchemyRowStore

logger = logging.getLogger(__name__)


async def create_project_store(config: Settings) -> RowStore:
    """Build the configured row-store.

    Raises:
        ValueError: If the selected backend is missing required settings
    """
    ConfigValidator.validate_required_settings(config)

    if config.store_backend == StoreBackendEnum.postgrest:
        logger.info("Using PostgREST row-store at %s", config.postgrest_url)
        return PostgrestRowStore(
            base_url=config.postgrest_url,
            api_key=config.supabase_key,
            table=config.projects_table,
            timeout=config.store_timeout,
        )

    engine = create_engine(config)
    if not config.is_production:
        # Production schemas are managed outside the application
        await init_db(engine)
    logger.info("Using SQL row-store (%s)", engine.url.render_as_string(hide_password=True))
    return SqlAlchemyRowStore(create_session_factory(engine), engine=engine)


def get_project_service(request: Request) -> ProjectService:
    """Return the collection mounted on the application.

    Raises:
        HTTPException: If the application has not finished starting
    """
    service = getattr(request.app.state, "project_service", None)
    if service is None or service.closed:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Project collection is not available",
        )
    return service
