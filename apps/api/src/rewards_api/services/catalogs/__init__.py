"""Catalog overview services."""

from .memberships import CatalogMembershipResolver, MembershipMap  # noqa: F401
from .overview import CatalogOverview, CatalogOverviewService  # noqa: F401
from .source_items import RewardSourceItemService  # noqa: F401
from .sources import RewardSourceStore, SqlRewardSourceStore  # noqa: F401
