from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from rewards_api.core.settings import settings
from rewards_api.db.session import async_session
from rewards_api.domain.rewards.source_letters import ProviderLetterRegistry
from .api.routes import api_router
from .core.logging import configure_logging


APP_VERSION = "0.1.0"


def build_letter_registry() -> ProviderLetterRegistry:
    return ProviderLetterRegistry(
        ttl_seconds=settings.provider_letter_cache_ttl_seconds,
        offer_letter=settings.offer_source_letter,
        unknown_letter=settings.unknown_source_letter,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    registry = build_letter_registry()
    app.state.provider_letters = registry

    try:
        async with async_session() as session:
            letters = await registry.refresh(session, force=True)
    except (OSError, SQLAlchemyError) as exc:
        logger.warning("Provider source letters not preloaded", error=str(exc))
    else:
        logger.info("Provider source letters preloaded", provider_count=len(letters))

    yield


def create_app() -> FastAPI:
    """Application factory for the rewards catalog API."""
    configure_logging(
        service_name="rewards-api",
        environment=settings.environment,
        version=APP_VERSION,
        level=settings.log_level,
    )

    app = FastAPI(
        title="Rewards Catalog API",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(api_router)

    @app.get("/healthz", tags=["Health"])
    async def health_check() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": APP_VERSION,
        }

    return app
