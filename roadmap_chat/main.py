from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from roadmap_chat.api.router import api_router
from roadmap_chat.api.routers.health import router as health_router
from roadmap_chat.core.logging import configure_logging
from roadmap_chat.core.settings import get_settings
from roadmap_chat.dependency_injection import build_container

settings = get_settings()
configure_logging(settings.effective_log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "starting roadmap chat relay",
        extra={"app_env": settings.app_env, "use_mock_model": settings.chat_use_mock},
    )
    if not settings.chat_configured:
        logger.warning("no model credentials configured; chat requests will be rejected with 503")

    app.state.settings = settings
    app.state.container = build_container(settings)

    try:
        yield
    finally:
        logger.info("roadmap chat relay shutdown complete")


app = FastAPI(
    title="Roadmap Chat Relay",
    version="0.1.0",
    docs_url="/docs" if settings.enable_swagger else None,
    redoc_url="/redoc" if settings.enable_swagger else None,
    openapi_url="/openapi.json" if settings.enable_swagger else None,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(api_router, prefix="/api")
