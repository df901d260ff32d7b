"""Tenant-scoped catalog overview assembly."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Protocol, Sequence

from loguru import logger

from rewards_api.domain.rewards.errors import SourceFetchError
from rewards_api.domain.rewards.grouping import attach_catalogs, group_rewards, sort_grouped_rewards
from rewards_api.domain.rewards.identifiers import normalize_cpid
from rewards_api.domain.rewards.records import (
    DELETED,
    GroupedReward,
    NormalizedReward,
    RawRewardRecord,
    RewardKind,
)
from rewards_api.domain.rewards.source_letters import SourceLetterResolver
from rewards_api.domain.rewards.transformer import transform_rewards
from rewards_api.services.catalogs.formatters import to_json_safe
from rewards_api.services.catalogs.memberships import MembershipItem, MembershipMap
from rewards_api.services.catalogs.sources import RewardSourceStore, with_registry_links


class MembershipResolver(Protocol):
    async def resolve_all(self, items: Sequence[MembershipItem]) -> MembershipMap: ...


@dataclass(slots=True)
class CatalogOverview:
    """Assembled overview plus whether membership enrichment was unavailable."""

    rewards: list[GroupedReward] = field(default_factory=list)
    memberships_degraded: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "data": [reward.as_dict() for reward in self.rewards],
            "success": True,
            "membershipsDegraded": self.memberships_degraded,
        }


def keep_for_grouping(reward: NormalizedReward) -> bool:
    return bool(reward.cpidx) and reward.reward_status != DELETED


class CatalogOverviewService:
    """Merge offers and gift cards into one deduplicated, catalog-annotated list."""

    def __init__(
        self,
        store: RewardSourceStore,
        memberships: MembershipResolver,
        resolver: SourceLetterResolver,
    ) -> None:
        self._store = store
        self._memberships = memberships
        self._resolver = resolver

    async def _fetch(self, kind: RewardKind, tenant_id: int, call: Awaitable[list[RawRewardRecord]]) -> list[RawRewardRecord]:
        try:
            return await call
        except Exception as exc:
            logger.exception("Reward source fetch failed", kind=kind.value, tenant_id=tenant_id)
            raise SourceFetchError(kind.value, tenant_id) from exc

    async def _link_registries(self, tenant_id: int, kind: RewardKind, records: list[RawRewardRecord]) -> list[RawRewardRecord]:
        if not records:
            return records
        call = self._store.find_registry_links(tenant_id, kind, [record.redemption_id for record in records])
        links = await self._fetch(kind, tenant_id, call)
        return with_registry_links(records, links)

    async def load_rewards(self, tenant_id: int) -> list[NormalizedReward]:
        """Fetch, join and transform every raw record; drop unusable ones."""

        offers, giftcards = await asyncio.gather(
            self._fetch(RewardKind.OFFER, tenant_id, self._store.find_offers(tenant_id)),
            self._fetch(RewardKind.GIFTCARD, tenant_id, self._store.find_gift_cards(tenant_id)),
        )
        offers, giftcards = await asyncio.gather(
            self._link_registries(tenant_id, RewardKind.OFFER, offers),
            self._link_registries(tenant_id, RewardKind.GIFTCARD, giftcards),
        )

        transformed = transform_rewards([*offers, *giftcards], self._resolver)
        kept = [reward for reward in transformed if keep_for_grouping(reward)]
        logger.debug(
            "Catalog rewards normalized",
            tenant_id=tenant_id,
            offers=len(offers),
            giftcards=len(giftcards),
            dropped=len(transformed) - len(kept),
        )
        return kept

    async def _finalize(self, groups: list[GroupedReward]) -> CatalogOverview:
        items: list[MembershipItem] = [
            (item.redemption_id, item.kind) for group in groups for item in group.items
        ]
        memberships = await self._memberships.resolve_all(items)
        if memberships.lookup_failed:
            logger.warning("Catalog overview served without catalog memberships", group_count=len(groups))

        attached = sort_grouped_rewards(attach_catalogs(groups, memberships))
        return CatalogOverview(
            rewards=[to_json_safe(group) for group in attached],
            memberships_degraded=memberships.lookup_failed,
        )

    async def build_overview(self, tenant_id: int) -> CatalogOverview:
        rewards = await self.load_rewards(tenant_id)
        overview = await self._finalize(group_rewards(rewards))
        logger.info(
            "Catalog overview assembled",
            tenant_id=tenant_id,
            group_count=len(overview.rewards),
            memberships_degraded=overview.memberships_degraded,
        )
        return overview

    async def assemble(self, tenant_id: int) -> list[GroupedReward]:
        """Return the sorted grouped rewards for ``tenant_id``.

        Raises :class:`SourceFetchError` when offers or gift cards cannot be
        read. A failed membership lookup yields groups with empty catalogs.
        """

        overview = await self.build_overview(tenant_id)
        return overview.rewards

    async def get_reward_group(self, tenant_id: int, cpid: str) -> GroupedReward | None:
        """Return the gift-card group for ``cpid`` with its catalog memberships."""

        canonical = normalize_cpid(cpid).canonical
        if not canonical:
            return None
        rewards = [
            reward
            for reward in await self.load_rewards(tenant_id)
            if reward.kind is RewardKind.GIFTCARD and not reward.cpid_fallback and reward.cpidx == canonical
        ]
        if not rewards:
            return None
        overview = await self._finalize(group_rewards(rewards))
        return overview.rewards[0] if overview.rewards else None
