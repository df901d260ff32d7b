from fastapi import APIRouter, Depends, HTTPException, Query

from rewards_api.db.session import get_session
from rewards_api.domain.rewards.errors import UnknownProviderError
from rewards_api.schemas.catalog_overview import SourceItemResponse
from rewards_api.services.catalogs import RewardSourceItemService

router = APIRouter(prefix="/rewards/source-items", tags=["Reward Sources"])


async def get_source_item_service(session=Depends(get_session)) -> RewardSourceItemService:
    return RewardSourceItemService(session)


@router.get("/", summary="List imported provider items", response_model=list[SourceItemResponse])
async def list_source_items(
    source_fk: str | None = Query(None, alias="sourceFk"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: RewardSourceItemService = Depends(get_source_item_service),
) -> list[SourceItemResponse]:
    try:
        items = await service.list_items(source_fk=source_fk, limit=limit, offset=offset)
    except UnknownProviderError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return [SourceItemResponse.model_validate(item.as_dict()) for item in items]
