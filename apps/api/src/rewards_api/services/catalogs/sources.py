"""Reads of raw offer and gift-card records for the catalog overview."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from rewards_api.domain.rewards.records import ACTIVE, RawRewardRecord, RewardKind, membership_key
from rewards_api.models.rewards import (
    GiftCard,
    GiftCardItem,
    RewardOffer,
    TenantRegistryRedemption,
)


class RewardSourceStore(Protocol):
    async def find_offers(self, tenant_id: int) -> list[RawRewardRecord]: ...

    async def find_gift_cards(self, tenant_id: int) -> list[RawRewardRecord]: ...

    async def find_registry_links(
        self, tenant_id: int, kind: RewardKind, redemption_ids: Sequence[str]
    ) -> dict[str, str]: ...


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format(value.normalize(), "f") if value == value.to_integral_value() else str(value)
    return str(value)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def offer_record(offer: RewardOffer, tenant_id: int) -> RawRewardRecord:
    return RawRewardRecord(
        redemption_id=str(offer.id),
        kind=RewardKind.OFFER,
        cpid=offer.cpid,
        value=_text(offer.value),
        points=_text(offer.points),
        title=offer.title or "",
        brand_name=offer.brand_name,
        inventory_remaining=_text(offer.inventory_remaining),
        start_date=_isoformat(offer.start_date),
        end_date=_isoformat(offer.end_date),
        reward_status=offer.reward_status or ACTIVE,
        reward_availability=offer.reward_availability or "",
        language=offer.language or "",
        tags=offer.tags,
        priority="0",
        image_payload=offer.image_url,
        tenant_id=str(tenant_id),
    )


def gift_card_record(giftcard: GiftCard, tenant_id: int) -> RawRewardRecord:
    item = giftcard.item
    brand = item.brand if item is not None else None
    return RawRewardRecord(
        redemption_id=str(giftcard.id),
        kind=RewardKind.GIFTCARD,
        cpid=giftcard.cpid,
        value=_text(giftcard.value),
        points=_text(giftcard.points),
        title=(item.reward_name if item is not None else None) or "",
        brand_name=brand.brand_name if brand is not None else None,
        inventory_remaining=_text(giftcard.inventory_remaining),
        reward_status=(item.reward_status if item is not None else None) or ACTIVE,
        reward_availability=(item.reward_availability if item is not None else None) or "",
        language=giftcard.language or "",
        utid=(item.utid if item is not None else None) or "",
        value_type=(item.value_type if item is not None else None) or "",
        tags=giftcard.tags,
        priority=_text(giftcard.priority) if giftcard.priority is not None else "1",
        image_payload=brand.image_urls_json if brand is not None else None,
        provider_id=_text(item.provider_id) if item is not None and item.provider_id is not None else None,
        tenant_id=str(tenant_id),
    )


def with_registry_links(records: Iterable[RawRewardRecord], links: Mapping[str, str]) -> list[RawRewardRecord]:
    return [
        replace(record, registry_id=links.get(membership_key(record.redemption_id, record.kind)))
        for record in records
    ]


class SqlRewardSourceStore:
    """SQLAlchemy-backed reads; each call runs in its own short session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        min_giftcard_value: int = 0,
    ) -> None:
        self._session_factory = session_factory
        self._min_giftcard_value = min_giftcard_value

    async def find_offers(self, tenant_id: int) -> list[RawRewardRecord]:
        stmt = select(RewardOffer).where(RewardOffer.is_deleted.is_(False)).order_by(RewardOffer.id)
        async with self._session_factory() as session:
            offers = (await session.execute(stmt)).scalars().all()
        return [offer_record(offer, tenant_id) for offer in offers]

    async def find_gift_cards(self, tenant_id: int) -> list[RawRewardRecord]:
        stmt = (
            select(GiftCard)
            .options(selectinload(GiftCard.item).selectinload(GiftCardItem.brand))
            .where(GiftCard.value > self._min_giftcard_value)
            .order_by(GiftCard.id)
        )
        async with self._session_factory() as session:
            giftcards = (await session.execute(stmt)).scalars().all()
        return [gift_card_record(giftcard, tenant_id) for giftcard in giftcards]

    async def find_registry_links(
        self, tenant_id: int, kind: RewardKind, redemption_ids: Sequence[str]
    ) -> dict[str, str]:
        """Map ``"<redemption_id>-<kind>"`` to the tenant registry row id."""

        ids = [int(redemption_id) for redemption_id in redemption_ids if str(redemption_id).isdigit()]
        if not ids:
            return {}
        stmt = select(TenantRegistryRedemption.id, TenantRegistryRedemption.redemption_id).where(
            TenantRegistryRedemption.tenant_id == tenant_id,
            TenantRegistryRedemption.redemption_type == kind.value,
            TenantRegistryRedemption.redemption_id.in_(ids),
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).all()
        return {membership_key(redemption_id, kind): str(registry_id) for registry_id, redemption_id in rows}
