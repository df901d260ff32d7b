"""Shared FastAPI dependencies for catalog endpoints."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rewards_api.core.settings import settings
from rewards_api.db.session import get_session, get_session_factory
from rewards_api.domain.rewards.source_letters import ProviderLetterRegistry
from rewards_api.services.catalogs import (
    CatalogMembershipResolver,
    CatalogOverviewService,
    SqlRewardSourceStore,
)


def get_letter_registry(request: Request) -> ProviderLetterRegistry:
    """Return the registry installed on the application by its lifespan."""

    return request.app.state.provider_letters


async def get_overview_service(
    session: AsyncSession = Depends(get_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    registry: ProviderLetterRegistry = Depends(get_letter_registry),
) -> CatalogOverviewService:
    resolver = await registry.resolver(session)
    return CatalogOverviewService(
        store=SqlRewardSourceStore(
            session_factory,
            min_giftcard_value=settings.overview_min_giftcard_value,
        ),
        memberships=CatalogMembershipResolver(session_factory),
        resolver=resolver,
    )
