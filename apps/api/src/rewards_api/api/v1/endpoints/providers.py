from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.api.dependencies import get_letter_registry
from rewards_api.db.session import get_session
from rewards_api.domain.rewards.source_letters import ProviderLetterRegistry
from rewards_api.schemas.catalog_overview import ProviderLettersResponse

router = APIRouter(prefix="/providers", tags=["Providers"])


@router.get("/letters", summary="Current provider source letters", response_model=ProviderLettersResponse)
async def get_provider_letters(
    session: AsyncSession = Depends(get_session),
    registry: ProviderLetterRegistry = Depends(get_letter_registry),
) -> ProviderLettersResponse:
    letters = await registry.refresh(session)
    return ProviderLettersResponse(letters=dict(letters))


@router.post("/letters/refresh", summary="Reload provider source letters", response_model=ProviderLettersResponse)
async def refresh_provider_letters(
    session: AsyncSession = Depends(get_session),
    registry: ProviderLetterRegistry = Depends(get_letter_registry),
) -> ProviderLettersResponse:
    letters = await registry.refresh(session, force=True)
    return ProviderLettersResponse(letters=dict(letters))
