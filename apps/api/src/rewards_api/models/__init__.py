"""SQLAlchemy models package."""

from .rewards import (  # noqa: F401
    Enterprise,
    GiftCard,
    GiftCardBrand,
    GiftCardItem,
    RedemptionRegistry,
    RedemptionTypeEnum,
    RegistryGroup,
    RewardOffer,
    RewardProvider,
    RewardSourceItem,
    RewardStatusEnum,
    TenantRegistryRedemption,
)
