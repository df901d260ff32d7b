"""Bulk lookup of the enterprise catalogs reward items belong to."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from loguru import logger
from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rewards_api.domain.rewards.errors import MembershipLookupError
from rewards_api.domain.rewards.records import (
    UNTITLED_CATALOG,
    CatalogMembership,
    RewardKind,
    membership_key,
)
from rewards_api.models.rewards import Enterprise, RedemptionRegistry, RegistryGroup
from rewards_api.services.catalogs.formatters import to_json_safe

MembershipItem = Tuple[str, RewardKind]


class MembershipMap(dict):
    """``"<redemption_id>-<kind>"`` to memberships.

    ``lookup_failed`` distinguishes an empty result caused by a failed query
    from one where no memberships exist.
    """

    lookup_failed: bool = False

    @classmethod
    def failed(cls) -> "MembershipMap":
        result = cls()
        result.lookup_failed = True
        return result


def _numeric_ids(items: Iterable[MembershipItem], kind: RewardKind) -> list[int]:
    ids: set[int] = set()
    for redemption_id, item_kind in items:
        if RewardKind(item_kind) is kind and str(redemption_id).isdigit():
            ids.add(int(redemption_id))
    return sorted(ids)


class CatalogMembershipResolver:
    """Resolve catalog memberships for a whole batch with a single query."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def _statement(self, giftcard_ids: Sequence[int], offer_ids: Sequence[int]):
        return (
            select(
                RedemptionRegistry.redemption_id,
                RedemptionRegistry.redemption_type,
                RedemptionRegistry.display_order,
                RegistryGroup.id,
                RegistryGroup.name,
                Enterprise.id,
                Enterprise.name,
            )
            .join(RegistryGroup, RedemptionRegistry.registry_group_id == RegistryGroup.id)
            .join(Enterprise, RegistryGroup.enterprise_id == Enterprise.id)
            .where(
                or_(
                    and_(
                        RedemptionRegistry.redemption_id.in_(giftcard_ids),
                        RedemptionRegistry.redemption_type == RewardKind.GIFTCARD.value,
                    ),
                    and_(
                        RedemptionRegistry.redemption_id.in_(offer_ids),
                        RedemptionRegistry.redemption_type == RewardKind.OFFER.value,
                    ),
                ),
                RegistryGroup.deleted_at.is_(None),
            )
            .order_by(RedemptionRegistry.id)
        )

    async def _fetch_rows(self, giftcard_ids: Sequence[int], offer_ids: Sequence[int]) -> Sequence:
        try:
            async with self._session_factory() as session:
                result = await session.execute(self._statement(giftcard_ids, offer_ids))
                return result.all()
        except Exception as exc:
            raise MembershipLookupError(str(exc)) from exc

    async def resolve_all(self, items: Sequence[MembershipItem]) -> MembershipMap:
        if not items:
            return MembershipMap()

        giftcard_ids = _numeric_ids(items, RewardKind.GIFTCARD)
        offer_ids = _numeric_ids(items, RewardKind.OFFER)

        try:
            rows = await self._fetch_rows(giftcard_ids, offer_ids)
        except MembershipLookupError as exc:
            logger.error(
                "Bulk catalog membership lookup failed",
                error=str(exc),
                item_count=len(items),
            )
            return MembershipMap.failed()

        memberships = MembershipMap()
        seen: set[tuple[str, str, str]] = set()
        for redemption_id, redemption_type, display_order, catalog_id, catalog_name, enterprise_id, enterprise_name in rows:
            dedupe = (str(redemption_id), redemption_type, str(catalog_id))
            if dedupe in seen:
                continue
            seen.add(dedupe)
            memberships.setdefault(membership_key(redemption_id, redemption_type), []).append(
                CatalogMembership(
                    catalog_id=to_json_safe(catalog_id),
                    catalog_name=catalog_name or UNTITLED_CATALOG,
                    enterprise_id=to_json_safe(enterprise_id),
                    enterprise_name=enterprise_name or "",
                    display_order=display_order or None,
                )
            )

        logger.debug(
            "Bulk catalog memberships resolved",
            item_count=len(items),
            row_count=len(rows),
            keyed_items=len(memberships),
        )
        return memberships
