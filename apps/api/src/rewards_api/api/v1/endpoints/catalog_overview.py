from fastapi import APIRouter, Depends, HTTPException, Path, status

from rewards_api.api.dependencies import get_overview_service
from rewards_api.domain.rewards.errors import SourceFetchError
from rewards_api.schemas.catalog_overview import CatalogOverviewResponse, GroupedRewardResponse
from rewards_api.services.catalogs import CatalogOverviewService

router = APIRouter(prefix="/tenants/{tenant_id}", tags=["Catalog Overview"])


# meta: route: tenants/catalogs/overview


@router.get(
    "/catalogs/overview",
    summary="Grouped reward catalog with enterprise memberships",
    response_model=CatalogOverviewResponse,
)
async def get_catalog_overview(
    tenant_id: int = Path(..., ge=1),
    service: CatalogOverviewService = Depends(get_overview_service),
) -> CatalogOverviewResponse:
    try:
        overview = await service.build_overview(tenant_id)
    except SourceFetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch catalog overview",
        ) from exc
    return CatalogOverviewResponse.model_validate(overview.as_dict())


@router.get(
    "/rewards/{cpid}",
    summary="Grouped gift card for a catalog product identifier",
    response_model=GroupedRewardResponse,
)
async def get_reward_by_cpid(
    cpid: str,
    tenant_id: int = Path(..., ge=1),
    service: CatalogOverviewService = Depends(get_overview_service),
) -> GroupedRewardResponse:
    try:
        group = await service.get_reward_group(tenant_id, cpid)
    except SourceFetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch reward",
        ) from exc
    if group is None:
        raise HTTPException(status_code=404, detail="Reward not found")
    return GroupedRewardResponse.model_validate(group.as_dict())
