from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from rewards_api.domain.rewards.grouping import (
    aggregate_availability,
    aggregate_status,
    attach_catalogs,
    group_key,
    group_rewards,
    sort_grouped_rewards,
)
from rewards_api.domain.rewards.records import CatalogMembership, NormalizedReward, RawRewardRecord, RewardKind
from rewards_api.domain.rewards.source_letters import SourceLetterResolver
from rewards_api.domain.rewards.transformer import transform_rewards


def make_reward(redemption_id: str, kind: RewardKind = RewardKind.GIFTCARD, **overrides) -> NormalizedReward:
    fields = {
        "redemption_id": redemption_id,
        "kind": kind,
        "cpidx": "GC-ACME-US-EN",
        "cpid": "GC-ACME-US-EN-25",
        "title": "Acme Coffee eGift",
        "brand_name": "Acme Coffee",
        "value": 25,
        "points": 2500,
        "reward_status": "active",
        "reward_availability": "US",
        "language": "en",
        "tags": None,
        "priority": 0,
        "reward_image": None,
        "source_letter": "O" if kind is RewardKind.OFFER else "T",
    }
    fields.update(overrides)
    return NormalizedReward(**fields)


@pytest.mark.parametrize(
    ("statuses", "expected"),
    [
        (["active", "suspended"], "active"),
        (["suspended", "suspended"], "suspended"),
        (["inactive", "suspended"], "inactive"),
        (["suspended"], "suspended"),
        ([], "inactive"),
    ],
)
def test_status_aggregation(statuses, expected) -> None:
    assert aggregate_status(statuses) == expected


def test_availability_aggregation() -> None:
    assert aggregate_availability(["US", "US"]) == "US"
    assert aggregate_availability(["US", "CA"]) == "mixed"


def test_gift_cards_sharing_canonical_cpid_form_one_group() -> None:
    rewards = [
        make_reward("10", value=25, registry_id=None),
        make_reward("11", cpid="GC-ACME-US-EN-50", value=50, reward_availability="CA", registry_id="300"),
    ]

    [group] = group_rewards(rewards)

    assert group.source_count == 2
    assert group.cpid == "GC-ACME-US-EN"
    assert group.value == 25
    assert group.reward_availability == "mixed"
    assert group.is_enabled is True
    assert [item.redemption_id for item in group.items] == ["10", "11"]


def test_placeholder_gift_cards_never_merge() -> None:
    rewards = [make_reward("12", cpidx="-", cpid="-"), make_reward("13", cpidx="-", cpid="-")]

    groups = group_rewards(rewards)

    assert len(groups) == 2
    assert {group.source_count for group in groups} == {1}


def test_fallback_identifier_never_joins_a_real_cpid() -> None:
    records = [
        RawRewardRecord(redemption_id="12", kind=RewardKind.GIFTCARD, cpid="-", title="Mystery", provider_id="1"),
        RawRewardRecord(redemption_id="99", kind=RewardKind.GIFTCARD, cpid="12", title="Short Code", provider_id="1"),
        RawRewardRecord(redemption_id="40", kind=RewardKind.GIFTCARD, cpid=None, title="Unlabelled", provider_id="1"),
        RawRewardRecord(redemption_id="41", kind=RewardKind.GIFTCARD, cpid="40", title="Other Short Code", provider_id="1"),
    ]

    groups = group_rewards(transform_rewards(records, SourceLetterResolver({"1": "T"})))

    assert len(groups) == 4
    assert sorted(tuple(item.redemption_id for item in group.items) for group in groups) == [
        ("12",),
        ("40",),
        ("41",),
        ("99",),
    ]


def test_fallback_gift_cards_get_placeholder_keys() -> None:
    reward = make_reward("12", cpidx="12", cpid="12", cpid_fallback=True)

    assert group_key(reward) == "giftcard-placeholder-12"
    assert group_key(make_reward("99", cpidx="12", cpid="12")) == "12"


def test_offers_never_merge_even_with_identical_cpids() -> None:
    rewards = [
        make_reward("20", RewardKind.OFFER, cpidx="OF-SPA-US-EN"),
        make_reward("21", RewardKind.OFFER, cpidx="OF-SPA-US-EN"),
    ]

    groups = group_rewards(rewards)

    assert len(groups) == 2
    assert [group.items[0].redemption_id for group in groups] == ["20", "21"]


def test_offer_and_gift_card_with_same_cpid_stay_apart() -> None:
    rewards = [make_reward("10"), make_reward("10", RewardKind.OFFER)]

    groups = group_rewards(rewards)

    assert sorted(group.kind.value for group in groups) == ["giftcard", "offer"]


def test_grouping_keeps_every_record() -> None:
    rewards = [
        make_reward("1"),
        make_reward("2"),
        make_reward("3", cpidx="GC-OTHER-US-EN"),
        make_reward("4", cpidx="-"),
        make_reward("5", cpidx="-"),
        make_reward("6", RewardKind.OFFER),
        make_reward("7", RewardKind.OFFER),
    ]

    groups = group_rewards(rewards)

    assert sum(group.source_count for group in groups) == len(rewards)
    assert len(groups) == 6


def test_missing_brand_is_reported_as_unknown() -> None:
    [group] = group_rewards([make_reward("1", brand_name=None)])

    assert group.brand_name == "unknown"


def test_sort_puts_gift_cards_first_then_titles() -> None:
    groups = group_rewards(
        [
            make_reward("20", RewardKind.OFFER, title="Zebra"),
            make_reward("21", RewardKind.OFFER, title="Apple"),
            make_reward("10", cpidx="GC-BETA", title="Beta"),
            make_reward("11", cpidx="GC-ALPHA", title="Alpha"),
        ]
    )

    ordered = sort_grouped_rewards(groups)

    assert [(group.title, group.kind.value) for group in ordered] == [
        ("Alpha", "giftcard"),
        ("Beta", "giftcard"),
        ("Apple", "offer"),
        ("Zebra", "offer"),
    ]


def test_attach_catalogs_dedupes_across_items_and_sorts_by_enterprise() -> None:
    [group] = group_rewards([make_reward("1"), make_reward("2"), make_reward("3")])
    wellness = CatalogMembership(catalog_id=5, catalog_name="Wellness", enterprise_id=9, enterprise_name="Zeta Health")
    clinics = CatalogMembership(catalog_id=6, catalog_name="Clinics", enterprise_id=8, enterprise_name="alpha clinics")
    memberships = {
        "1-giftcard": [wellness],
        "2-giftcard": [wellness, clinics],
        "3-giftcard": [wellness],
        "1-offer": [CatalogMembership(catalog_id=99, catalog_name="Wrong", enterprise_id=1, enterprise_name="Offer Co")],
    }

    [annotated] = attach_catalogs([group], memberships)

    assert [catalog.catalog_id for catalog in annotated.catalogs] == [6, 5]
    assert group.catalogs == ()


def test_groups_are_immutable() -> None:
    [group] = group_rewards([make_reward("1")])

    with pytest.raises(FrozenInstanceError):
        group.title = "changed"  # type: ignore[misc]
