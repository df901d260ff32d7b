from __future__ import annotations

from typing import Sequence

import pytest

from rewards_api.domain.rewards import transformer
from rewards_api.domain.rewards.errors import SourceFetchError
from rewards_api.domain.rewards.records import CatalogMembership, RawRewardRecord, RewardKind, membership_key
from rewards_api.domain.rewards.source_letters import SourceLetterResolver
from rewards_api.services.catalogs.memberships import CatalogMembershipResolver, MembershipMap
from rewards_api.services.catalogs.overview import CatalogOverviewService
from rewards_api.services.catalogs.sources import SqlRewardSourceStore
from tests.factories import TENANT_ID, seed_catalog

WELLNESS = CatalogMembership(catalog_id=5, catalog_name="Wellness", enterprise_id=9, enterprise_name="Zeta Health")


def giftcard(redemption_id: str, cpid: str | None, **overrides) -> RawRewardRecord:
    fields = {
        "redemption_id": redemption_id,
        "kind": RewardKind.GIFTCARD,
        "cpid": cpid,
        "value": "25",
        "points": "2500",
        "title": "Acme Coffee eGift",
        "brand_name": "Acme Coffee",
        "reward_availability": "US",
        "provider_id": "1",
    }
    fields.update(overrides)
    return RawRewardRecord(**fields)


def offer(redemption_id: str, title: str, **overrides) -> RawRewardRecord:
    fields = {
        "redemption_id": redemption_id,
        "kind": RewardKind.OFFER,
        "cpid": "OF-SPA-US-EN",
        "value": "100",
        "title": title,
        "brand_name": "Spa Co",
    }
    fields.update(overrides)
    return RawRewardRecord(**fields)


class FakeStore:
    def __init__(self, offers=(), giftcards=(), links=None, fail: RewardKind | None = None) -> None:
        self.offers = list(offers)
        self.giftcards = list(giftcards)
        self.links = links or {}
        self.fail = fail

    async def find_offers(self, tenant_id: int) -> list[RawRewardRecord]:
        if self.fail is RewardKind.OFFER:
            raise ConnectionError("offers unavailable")
        return list(self.offers)

    async def find_gift_cards(self, tenant_id: int) -> list[RawRewardRecord]:
        if self.fail is RewardKind.GIFTCARD:
            raise ConnectionError("gift cards unavailable")
        return list(self.giftcards)

    async def find_registry_links(self, tenant_id: int, kind: RewardKind, redemption_ids: Sequence[str]) -> dict[str, str]:
        return {
            key: value
            for key, value in self.links.items()
            if key in {membership_key(redemption_id, kind) for redemption_id in redemption_ids}
        }


class CountingMemberships:
    def __init__(self, memberships: dict | None = None, failed: bool = False) -> None:
        self.memberships = memberships or {}
        self.failed = failed
        self.calls: list[list] = []

    async def resolve_all(self, items) -> MembershipMap:
        self.calls.append(list(items))
        if self.failed:
            return MembershipMap.failed()
        return MembershipMap(self.memberships)


def build_service(store: FakeStore, memberships: CountingMemberships | None = None) -> CatalogOverviewService:
    return CatalogOverviewService(
        store=store,
        memberships=memberships or CountingMemberships(),
        resolver=SourceLetterResolver({"1": "T"}),
    )


def sample_store(**overrides) -> FakeStore:
    fields = {
        "offers": [offer("20", "Zebra Spa Day"), offer("21", "Apple Picking"), offer("22", "Gone", reward_status="deleted")],
        "giftcards": [
            giftcard("10", "GC-ACME-US-EN-25"),
            giftcard("11", "GC-ACME-US-EN-50", value="50"),
            giftcard("12", "-"),
            giftcard("13", "-"),
        ],
        "links": {"10-giftcard": "300", "20-offer": "301"},
    }
    fields.update(overrides)
    return FakeStore(**fields)


@pytest.mark.asyncio
async def test_every_kept_record_lands_in_exactly_one_group() -> None:
    overview = await build_service(sample_store()).build_overview(TENANT_ID)

    members = [item.redemption_id for group in overview.rewards for item in group.items]
    assert sorted(members) == ["10", "11", "12", "13", "20", "21"]
    assert sum(group.source_count for group in overview.rewards) == 6


@pytest.mark.asyncio
async def test_overview_order_and_enablement() -> None:
    overview = await build_service(sample_store()).build_overview(TENANT_ID)

    summary = [(group.kind.value, group.cpid, group.is_enabled) for group in overview.rewards]
    assert summary == [
        ("giftcard", "GC-ACME-US-EN", True),
        ("giftcard", "12", False),
        ("giftcard", "13", False),
        ("offer", "OF-SPA-US-EN", False),
        ("offer", "OF-SPA-US-EN", True),
    ]
    assert overview.rewards[-1].title == "Zebra Spa Day"


@pytest.mark.asyncio
async def test_memberships_are_resolved_once_for_all_items() -> None:
    memberships = CountingMemberships({"10-giftcard": [WELLNESS], "11-giftcard": [WELLNESS]})

    overview = await build_service(sample_store(), memberships).build_overview(TENANT_ID)

    assert len(memberships.calls) == 1
    assert len(memberships.calls[0]) == 6
    assert [catalog.catalog_id for catalog in overview.rewards[0].catalogs] == [5]
    assert overview.memberships_degraded is False


@pytest.mark.asyncio
async def test_offer_fetch_failure_fails_the_request() -> None:
    service = build_service(sample_store(fail=RewardKind.OFFER))

    with pytest.raises(SourceFetchError) as excinfo:
        await service.build_overview(TENANT_ID)

    assert excinfo.value.kind == "offer"
    assert isinstance(excinfo.value.__cause__, ConnectionError)


@pytest.mark.asyncio
async def test_membership_failure_degrades_to_empty_catalogs() -> None:
    overview = await build_service(sample_store(), CountingMemberships(failed=True)).build_overview(TENANT_ID)

    assert overview.memberships_degraded is True
    assert len(overview.rewards) == 5
    assert all(group.catalogs == () for group in overview.rewards)
    assert overview.as_dict()["membershipsDegraded"] is True


@pytest.mark.asyncio
async def test_degraded_record_without_cpid_is_dropped_before_grouping(monkeypatch) -> None:
    real_normalize = transformer.normalize_cpid

    def flaky(raw_cpid, fallback_id=None):
        if fallback_id == "15":
            raise RuntimeError("corrupt cpid")
        return real_normalize(raw_cpid, fallback_id)

    monkeypatch.setattr(transformer, "normalize_cpid", flaky)
    memberships = CountingMemberships()
    store = sample_store(giftcards=[giftcard("10", "GC-ACME-US-EN-25"), giftcard("15", None)])

    overview = await build_service(store, memberships).build_overview(TENANT_ID)

    members = [item.redemption_id for group in overview.rewards for item in group.items]
    assert "15" not in members
    assert sorted(members) == ["10", "20", "21"]
    assert ("15", RewardKind.GIFTCARD) not in memberships.calls[0]
    assert len(memberships.calls[0]) == 3


@pytest.mark.asyncio
async def test_empty_sources_produce_empty_overview() -> None:
    memberships = CountingMemberships()

    overview = await build_service(FakeStore(), memberships).build_overview(TENANT_ID)

    assert overview.rewards == []
    assert overview.as_dict() == {"data": [], "success": True, "membershipsDegraded": False}


@pytest.mark.asyncio
async def test_wide_identifiers_are_serialized_as_strings() -> None:
    wide = CatalogMembership(catalog_id=2**60, catalog_name="Big", enterprise_id=1, enterprise_name="Wide Co")
    store = sample_store(offers=[], giftcards=[giftcard("10", "GC-ACME-US-EN-25")])

    overview = await build_service(store, CountingMemberships({"10-giftcard": [wide]})).build_overview(TENANT_ID)

    assert overview.rewards[0].catalogs[0].catalog_id == str(2**60)


@pytest.mark.asyncio
async def test_reward_group_lookup_by_variant_cpid() -> None:
    service = build_service(sample_store(), CountingMemberships({"11-giftcard": [WELLNESS]}))

    group = await service.get_reward_group(TENANT_ID, "GC-ACME-US-EN-50")

    assert group is not None
    assert group.source_count == 2
    assert [catalog.catalog_name for catalog in group.catalogs] == ["Wellness"]


@pytest.mark.asyncio
@pytest.mark.parametrize("cpid", ["GC-NONE-US-EN", "-", "OF-SPA-US-EN", "12"])
async def test_reward_group_lookup_misses(cpid) -> None:
    assert await build_service(sample_store()).get_reward_group(TENANT_ID, cpid) is None


@pytest.mark.asyncio
async def test_overview_from_persistence(session_factory) -> None:
    await seed_catalog(session_factory)
    service = CatalogOverviewService(
        store=SqlRewardSourceStore(session_factory),
        memberships=CatalogMembershipResolver(session_factory),
        resolver=SourceLetterResolver({"1": "T", "2": "B"}),
    )

    groups = await service.assemble(TENANT_ID)

    assert [group.title for group in groups] == [
        "Acme Coffee eGift",
        "Mystery Card",
        "Mystery Card",
        "Apple Picking",
        "Zebra Spa Day",
    ]
    acme = groups[0]
    assert [item.redemption_id for item in acme.items] == ["10", "11"]
    assert acme.items[0].registry_id == "300"
    assert acme.items[0].source_letter == "T"
    assert [catalog.enterprise_name for catalog in acme.catalogs] == ["Alpha Clinics", "Zeta Health"]
    assert groups[1].items[0].source_letter == "B"
    assert groups[3].catalogs == ()
    assert [catalog.catalog_id for catalog in groups[4].catalogs] == [6]
