"""Value types flowing through the catalog reconciliation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class RewardKind(str, Enum):
    OFFER = "offer"
    GIFTCARD = "giftcard"


ACTIVE = "active"
SUSPENDED = "suspended"
DELETED = "deleted"
INACTIVE = "inactive"
MIXED_AVAILABILITY = "mixed"
UNTITLED_CATALOG = "Untitled Catalog"
UNKNOWN_BRAND = "unknown"


@dataclass(frozen=True, slots=True)
class RawRewardRecord:
    """A single offer or gift-card row as read from the store.

    Numeric columns are carried as strings so that the transformer owns all
    coercion; ``registry_id`` is filled in by the tenant registry join.
    """

    redemption_id: str
    kind: RewardKind
    cpid: str | None = None
    value: str = ""
    points: str = ""
    title: str = ""
    brand_name: str | None = None
    inventory_remaining: str = ""
    start_date: str | None = None
    end_date: str | None = None
    reward_status: str = ACTIVE
    reward_availability: str = ""
    language: str = ""
    utid: str = ""
    value_type: str = ""
    tags: str | None = None
    priority: str = "0"
    image_payload: str | None = None
    provider_id: str | None = None
    registry_id: str | None = None
    tenant_id: str = ""


@dataclass(frozen=True, slots=True)
class NormalizedReward:
    redemption_id: str
    kind: RewardKind
    cpidx: str
    cpid: str
    title: str
    brand_name: str | None
    value: int
    points: int
    reward_status: str
    reward_availability: str
    language: str
    tags: str | None
    priority: int
    reward_image: str | None
    source_letter: str
    registry_id: str | None = None
    tenant_id: str = ""
    value_type: str = ""
    utid: str = ""
    inventory_remaining: str = ""
    start_date: str | None = None
    end_date: str | None = None
    provider_id: str | None = None
    # True when the CPID was absent or the placeholder and an id stands in for it.
    cpid_fallback: bool = False

    @property
    def lookup_key(self) -> str:
        return membership_key(self.redemption_id, self.kind)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "redemption_id": self.redemption_id,
            "redemption_registries_id": self.registry_id,
            "tenant_id": self.tenant_id,
            "type": self.kind.value,
            "cpidx": self.cpidx,
            "cpid": self.cpid,
            "title": self.title,
            "name": self.brand_name,
            "value": self.value,
            "points": self.points,
            "reward_status": self.reward_status,
            "reward_availability": self.reward_availability,
            "language": self.language,
            "tags": self.tags,
            "priority": self.priority,
            "reward_image": self.reward_image,
            "source_letter": self.source_letter,
            "value_type": self.value_type,
            "utid": self.utid,
            "inventory_remaining": self.inventory_remaining,
            "startdate": self.start_date,
            "enddate": self.end_date,
            "provider_id": self.provider_id,
        }


@dataclass(frozen=True, slots=True)
class CatalogMembership:
    """One enterprise catalog a reward item has been placed into."""

    catalog_id: int | str
    catalog_name: str
    enterprise_id: int | str
    enterprise_name: str
    display_order: int | None = None

    @property
    def dedupe_key(self) -> Tuple[str, str]:
        return (str(self.catalog_id), str(self.enterprise_id))

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "catalog_id": self.catalog_id,
            "catalog_name": self.catalog_name,
            "enterprise_id": self.enterprise_id,
            "enterprise_name": self.enterprise_name,
        }
        if self.display_order is not None:
            payload["display_order"] = self.display_order
        return payload


@dataclass(frozen=True, slots=True)
class GroupedReward:
    """Deduplicated unit of display: one brand's denominations, or one offer."""

    cpid: str
    kind: RewardKind
    title: str
    brand_name: str
    language: str
    value: int
    points: int
    source_count: int
    reward_status: str
    reward_availability: str
    is_enabled: bool
    value_type: str
    items: Tuple[NormalizedReward, ...]
    tags: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    catalogs: Tuple[CatalogMembership, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "cpid": self.cpid,
            "type": self.kind.value,
            "title": self.title,
            "brand_name": self.brand_name,
            "language": self.language,
            "value": self.value,
            "points": self.points,
            "source_count": self.source_count,
            "reward_status": self.reward_status,
            "reward_availability": self.reward_availability,
            "tags": self.tags,
            "startdate": self.start_date,
            "enddate": self.end_date,
            "is_enabled": self.is_enabled,
            "value_type": self.value_type,
            "items": [item.as_dict() for item in self.items],
            "catalogs": [catalog.as_dict() for catalog in self.catalogs],
        }


def membership_key(redemption_id: str | int, kind: RewardKind | str) -> str:
    """Return the ``"<redemption_id>-<kind>"`` key used by membership lookups."""

    kind_value = kind.value if isinstance(kind, RewardKind) else str(kind)
    return f"{redemption_id}-{kind_value}"
