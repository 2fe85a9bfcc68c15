# access_control/main.py
"""
Application factory for the access-control engine.

Startup connects the store, seeds the permission template when needed and
starts the two cache invalidation listeners; shutdown stops them and closes
the store client.
"""

from contextlib import asynccontextmanager
import logging
from typing import Any, AsyncGenerator, Optional

from fastapi import APIRouter, FastAPI

from . import __version__
from .container import AccessControl
from .core.cache_redis import close_redis_client, connect_redis_client
from .core.config import Settings, get_settings, is_running_tests
from .routes.v1 import access as access_v1
from .routes.v1 import auth as auth_v1
from .routes.v1 import authorization as authorization_v1
from .routes.v1 import prometheus as prometheus_v1

logger = logging.getLogger(__name__)

API_TITLE = "Access Control Engine"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Optional[Settings] = None, redis_client: Optional[Any] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Explicit settings (defaults to the environment)
        redis_client: Pre-built store client; the caller keeps ownership of it
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"{API_TITLE} starting up (environment: {settings.environment})")
        if is_running_tests():
            logger.info("Running under pytest (test mode active)")

        redis = await connect_redis_client(settings, redis_client)
        access_control = AccessControl.build(settings, redis)
        app.state.access_control = access_control
        try:
            seeded = await access_control.templates.initialize(
                force=settings.force_template_reload
            )
            if seeded:
                logger.info(f"[TEMPLATE] Loaded {seeded} modules from {settings.template_dir}")
            access_control.start_listeners()
            yield
        finally:
            logger.info(f"{API_TITLE} shutting down...")
            await access_control.stop_listeners()
            if redis_client is None:
                await close_redis_client(redis)

    app = FastAPI(
        title=API_TITLE,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )

    api = APIRouter(prefix="/api")
    api.include_router(access_v1.router, prefix="/access")
    api.include_router(authorization_v1.router, prefix="/authorization")
    api.include_router(auth_v1.router, prefix="/auth")
    app.include_router(api)
    app.include_router(prometheus_v1.router)
    return app
