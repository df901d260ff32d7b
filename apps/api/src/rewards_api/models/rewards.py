"""Reward catalog models read by the catalog overview."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from rewards_api.db.base import Base, IdentifierType


class RedemptionTypeEnum(str, Enum):
    """Kinds of redeemable rewards."""

    OFFER = "offer"
    GIFTCARD = "giftcard"


class RewardStatusEnum(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class RewardProvider(Base):
    """Gift-card provider with the single-letter source code shown in catalogs."""

    __tablename__ = "reward_providers"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    code = Column(String(1), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True, server_default="1")

    items = relationship("GiftCardItem", back_populates="provider")


class RewardOffer(Base):
    """Bespoke offer placement; every offer is presented on its own."""

    __tablename__ = "reward_offers"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    cpid = Column(String, nullable=True, index=True)
    value = Column(String, nullable=True)
    points = Column(Numeric(14, 2), nullable=True)
    brand_name = Column(String, nullable=True)
    inventory_remaining = Column(Integer, nullable=True)
    title = Column(String, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    reward_status = Column(String, nullable=True, default=RewardStatusEnum.ACTIVE.value)
    language = Column(String, nullable=True)
    reward_availability = Column(String, nullable=True)
    tags = Column(String, nullable=True)
    image_url = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default="0")


class GiftCardBrand(Base):
    __tablename__ = "giftcard_brands"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    brand_name = Column(String, nullable=False)
    image_urls_json = Column(Text, nullable=True)

    items = relationship("GiftCardItem", back_populates="brand")


class GiftCardItem(Base):
    """Provider catalog item; denominations inherit its status and availability."""

    __tablename__ = "giftcard_items"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    brand_id = Column(IdentifierType, ForeignKey("giftcard_brands.id"), nullable=False)
    provider_id = Column(IdentifierType, ForeignKey("reward_providers.id"), nullable=True)
    reward_name = Column(String, nullable=True)
    utid = Column(String, nullable=True)
    value_type = Column(String, nullable=True)
    reward_status = Column(String, nullable=True, default=RewardStatusEnum.ACTIVE.value)
    reward_availability = Column(String, nullable=True)

    brand = relationship("GiftCardBrand", back_populates="items")
    provider = relationship("RewardProvider", back_populates="items")
    giftcards = relationship("GiftCard", back_populates="item")


class GiftCard(Base):
    """Purchasable gift-card denomination."""

    __tablename__ = "giftcards"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    item_id = Column(IdentifierType, ForeignKey("giftcard_items.id"), nullable=False)
    cpid = Column(String, nullable=True, index=True)
    value = Column(Numeric(12, 2), nullable=False, default=0)
    points = Column(Numeric(14, 2), nullable=False, default=0)
    inventory_remaining = Column(Integer, nullable=False, default=0)
    language = Column(String, nullable=True)
    tags = Column(String, nullable=True)
    priority = Column(Integer, nullable=True)

    item = relationship("GiftCardItem", back_populates="giftcards")


class TenantRegistryRedemption(Base):
    """Rewards a tenant has enabled for its enterprises."""

    __tablename__ = "tenant_registry_redemptions"
    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "redemption_id", "redemption_type", name="uq_tenant_registry_redemption"
        ),
    )

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    tenant_id = Column(IdentifierType, nullable=False, index=True)
    redemption_id = Column(IdentifierType, nullable=False)
    redemption_type = Column(String, nullable=False)


class Enterprise(Base):
    __tablename__ = "enterprises"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    tenant_id = Column(IdentifierType, nullable=True, index=True)
    name = Column(String, nullable=False)

    catalogs = relationship("RegistryGroup", back_populates="enterprise")


class RegistryGroup(Base):
    """Enterprise catalog; soft-deleted catalogs are invisible to lookups."""

    __tablename__ = "registry_groups"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    enterprise_id = Column(IdentifierType, ForeignKey("enterprises.id"), nullable=False)
    name = Column(String, nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    enterprise = relationship("Enterprise", back_populates="catalogs")
    entries = relationship("RedemptionRegistry", back_populates="registry_group")


class RedemptionRegistry(Base):
    """Placement of a reward item into an enterprise catalog."""

    __tablename__ = "redemption_registries"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    registry_group_id = Column(IdentifierType, ForeignKey("registry_groups.id"), nullable=False)
    redemption_id = Column(IdentifierType, nullable=False, index=True)
    redemption_type = Column(String, nullable=False)
    display_order = Column(Integer, nullable=True)

    registry_group = relationship("RegistryGroup", back_populates="entries")


class RewardSourceItem(Base):
    """Provider catalog entry imported with its raw payload."""

    __tablename__ = "reward_source_items"

    id = Column(IdentifierType, primary_key=True, autoincrement=True)
    source_fk = Column(String, nullable=False, index=True)
    source_identifier = Column(String, nullable=False)
    reward_fk = Column(String, nullable=True)
    priority = Column(Integer, nullable=False, default=0)
    raw_data = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default="active")
    last_synced_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
