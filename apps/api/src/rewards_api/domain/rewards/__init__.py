"""Catalog reconciliation domain: normalization, grouping and source letters."""

from .errors import (  # noqa: F401
    ImageParseError,
    MembershipLookupError,
    RecordTransformError,
    RewardCatalogError,
    SourceFetchError,
    UnknownProviderError,
)
from .grouping import attach_catalogs, group_rewards, sort_grouped_rewards  # noqa: F401
from .identifiers import CpidPair, is_placeholder_cpid, normalize_cpid, resolve_image_url  # noqa: F401
from .records import (  # noqa: F401
    CatalogMembership,
    GroupedReward,
    NormalizedReward,
    RawRewardRecord,
    RewardKind,
)
from .source_letters import ProviderLetterRegistry, SourceLetterResolver  # noqa: F401
from .transformer import transform_reward, transform_rewards  # noqa: F401
