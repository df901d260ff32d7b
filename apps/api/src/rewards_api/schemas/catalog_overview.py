from pydantic import BaseModel, ConfigDict, Field

# meta: schema: catalog-overview


class CatalogMembershipResponse(BaseModel):
    catalog_id: int | str
    catalog_name: str
    enterprise_id: int | str
    enterprise_name: str
    display_order: int | None = None


class RewardItemResponse(BaseModel):
    redemption_id: str
    redemption_registries_id: str | None = None
    tenant_id: str
    type: str
    cpidx: str
    cpid: str
    title: str
    name: str | None = None
    value: int
    points: int
    reward_status: str
    reward_availability: str
    language: str
    tags: str | None = None
    priority: int
    reward_image: str | None = None
    source_letter: str
    value_type: str
    utid: str
    inventory_remaining: str
    startdate: str | None = None
    enddate: str | None = None
    provider_id: str | None = None


class GroupedRewardResponse(BaseModel):
    cpid: str
    type: str
    title: str
    brand_name: str
    language: str
    value: int
    points: int
    source_count: int
    reward_status: str
    reward_availability: str
    tags: str | None = None
    startdate: str | None = None
    enddate: str | None = None
    is_enabled: bool
    value_type: str
    items: list[RewardItemResponse] = Field(default_factory=list)
    catalogs: list[CatalogMembershipResponse] = Field(default_factory=list)


class CatalogOverviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: list[GroupedRewardResponse] = Field(default_factory=list)
    success: bool = True
    memberships_degraded: bool = Field(False, alias="membershipsDegraded")


class ValueRangeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    currency: str | None = None
    min_value: float | None = Field(None, alias="minValue")
    max_value: float | None = Field(None, alias="maxValue")
    fixed_values: list[float] | None = Field(None, alias="fixedValues")


class SourceItemResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    source_fk: str = Field(..., alias="sourceFk")
    source_identifier: str = Field(..., alias="sourceIdentifier")
    reward_fk: str | None = Field(None, alias="rewardFk")
    priority: int
    status: str
    value_range: ValueRangeResponse = Field(..., alias="valueRange")


class ProviderLettersResponse(BaseModel):
    letters: dict[str, str] = Field(default_factory=dict)
