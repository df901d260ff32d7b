"""Imported provider catalog items with decoded denomination ranges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.domain.rewards.errors import UnknownProviderError
from rewards_api.domain.rewards.value_ranges import (
    UNKNOWN_RANGE,
    ProviderKind,
    ValueRange,
    decode_value_range,
)
from rewards_api.models.rewards import RewardSourceItem


@dataclass(frozen=True, slots=True)
class SourceItemView:
    item: RewardSourceItem
    value_range: ValueRange

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.item.id),
            "sourceFk": self.item.source_fk,
            "sourceIdentifier": self.item.source_identifier,
            "rewardFk": self.item.reward_fk,
            "priority": self.item.priority,
            "status": self.item.status,
            "valueRange": self.value_range.as_dict(),
        }


def describe_value_range(item: RewardSourceItem) -> ValueRange:
    try:
        kind = ProviderKind.from_source(item.source_fk)
    except UnknownProviderError:
        logger.warning("Source item from unsupported provider", source_fk=item.source_fk, item_id=item.id)
        return UNKNOWN_RANGE
    return decode_value_range(kind, item.raw_data)


class RewardSourceItemService:
    """List imported provider catalog items with decoded denomination ranges."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_items(
        self,
        *,
        source_fk: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[SourceItemView]:
        stmt = select(RewardSourceItem).order_by(RewardSourceItem.priority.asc(), RewardSourceItem.id.asc())
        if source_fk:
            # Validate before querying so callers get a client error, not an empty page.
            kind = ProviderKind.from_source(source_fk)
            stmt = stmt.where(RewardSourceItem.source_fk.in_([source_fk, f"source-{kind.value}"]))
        stmt = stmt.limit(limit).offset(offset)
        result = await self._session.execute(stmt)
        return [SourceItemView(item=item, value_range=describe_value_range(item)) for item in result.scalars()]
