"""Group normalized rewards into catalog entries.

Providers issue several SKUs of the same physical gift card, so gift cards
sharing a canonical CPID collapse into one entry with several denominations.
Offers are one-off placements and always stay on their own, even when their
CPIDs coincide.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from rewards_api.domain.rewards.identifiers import is_placeholder_cpid
from rewards_api.domain.rewards.records import (
    ACTIVE,
    INACTIVE,
    MIXED_AVAILABILITY,
    SUSPENDED,
    UNKNOWN_BRAND,
    CatalogMembership,
    GroupedReward,
    NormalizedReward,
    RewardKind,
)
from rewards_api.domain.rewards.transformer import coerce_int


def aggregate_status(statuses: Iterable[str]) -> str:
    values = list(statuses)
    if any(status == ACTIVE for status in values):
        return ACTIVE
    if values and all(status == SUSPENDED for status in values):
        return SUSPENDED
    return INACTIVE


def aggregate_availability(availabilities: Sequence[str]) -> str:
    distinct = set(availabilities)
    if len(distinct) == 1:
        return availabilities[0]
    return MIXED_AVAILABILITY


def group_key(reward: NormalizedReward) -> str:
    if reward.kind is RewardKind.OFFER:
        return f"offer-{reward.redemption_id}"
    if reward.cpid_fallback or is_placeholder_cpid(reward.cpidx):
        return f"giftcard-placeholder-{reward.redemption_id}"
    return reward.cpidx


def _build_group(items: Sequence[NormalizedReward]) -> GroupedReward:
    first = items[0]
    return GroupedReward(
        cpid=first.cpidx,
        kind=first.kind,
        title=first.title,
        brand_name=first.brand_name or UNKNOWN_BRAND,
        language=first.language,
        value=coerce_int(first.value),
        points=coerce_int(first.points),
        source_count=len(items),
        reward_status=aggregate_status(item.reward_status for item in items),
        reward_availability=aggregate_availability([item.reward_availability for item in items]),
        is_enabled=any(item.registry_id is not None for item in items),
        value_type=first.value_type,
        items=tuple(items),
        tags=first.tags,
        start_date=first.start_date,
        end_date=first.end_date,
    )


def group_rewards(rewards: Iterable[NormalizedReward]) -> list[GroupedReward]:
    """Group gift cards by canonical CPID and keep every offer separate.

    Groups are returned in first-seen order; use :func:`sort_grouped_rewards`
    for display order.
    """

    giftcards: list[NormalizedReward] = []
    offers: list[NormalizedReward] = []
    for reward in rewards:
        (offers if reward.kind is RewardKind.OFFER else giftcards).append(reward)

    grouped: dict[str, list[NormalizedReward]] = {}
    for reward in giftcards:
        grouped.setdefault(group_key(reward), []).append(reward)
    for reward in offers:
        grouped[group_key(reward)] = [reward]

    return [_build_group(items) for items in grouped.values()]


def _sort_key(group: GroupedReward) -> tuple[int, str, str]:
    return (0 if group.kind is RewardKind.GIFTCARD else 1, group.title.casefold(), group.title)


def sort_grouped_rewards(groups: Iterable[GroupedReward]) -> list[GroupedReward]:
    """Gift cards before offers, each alphabetical by title."""

    return sorted(groups, key=_sort_key)


def attach_catalogs(
    groups: Iterable[GroupedReward],
    memberships: Mapping[str, Sequence[CatalogMembership]],
) -> list[GroupedReward]:
    """Return copies of ``groups`` carrying their members' catalog memberships.

    Memberships are unique per ``(catalog_id, enterprise_id)`` across all of
    a group's items and ordered by enterprise name.
    """

    attached: list[GroupedReward] = []
    for group in groups:
        unique: dict[tuple[str, str], CatalogMembership] = {}
        for item in group.items:
            for membership in memberships.get(item.lookup_key, ()):
                unique[membership.dedupe_key] = membership
        catalogs = sorted(unique.values(), key=lambda entry: entry.enterprise_name.casefold())
        attached.append(replace(group, catalogs=tuple(catalogs)))
    return attached
