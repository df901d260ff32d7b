"""Error taxonomy for catalog reconciliation."""

from __future__ import annotations


class RewardCatalogError(RuntimeError):
    """Base error for the reward catalog domain."""


class RecordTransformError(RewardCatalogError):
    """A single raw record could not be normalized."""

    def __init__(self, redemption_id: str, reason: str) -> None:
        super().__init__(f"Failed to transform reward {redemption_id}: {reason}")
        self.redemption_id = redemption_id


class ImageParseError(RewardCatalogError):
    """Malformed image payload."""


class MembershipLookupError(RewardCatalogError):
    """The bulk catalog membership query failed."""


class SourceFetchError(RewardCatalogError):
    """Offer or gift-card records could not be read for a tenant."""

    def __init__(self, kind: str, tenant_id: int | str) -> None:
        super().__init__(f"Failed to fetch {kind} records for tenant {tenant_id}")
        self.kind = kind
        self.tenant_id = tenant_id


class UnknownProviderError(RewardCatalogError, ValueError):
    """A source key does not name a supported provider."""
