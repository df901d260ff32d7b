"""Raw record to normalized reward conversion."""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Iterable

from loguru import logger

from rewards_api.domain.rewards.errors import RecordTransformError
from rewards_api.domain.rewards.identifiers import is_placeholder_cpid, normalize_cpid, resolve_image_url
from rewards_api.domain.rewards.records import NormalizedReward, RawRewardRecord
from rewards_api.domain.rewards.source_letters import SourceLetterResolver

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def lacks_cpid(raw_cpid: str | None) -> bool:
    return raw_cpid is None or not raw_cpid.strip() or is_placeholder_cpid(raw_cpid)


def coerce_int(value: Any, default: int = 0) -> int:
    """Parse the leading integer of ``value``; ``default`` when there is none."""

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        if isinstance(value, float) and not math.isfinite(value):
            return default
        if isinstance(value, Decimal) and not value.is_finite():
            return default
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return default
    return int(match.group(1))


def _build(record: RawRewardRecord, *, cpidx: str, cpid: str, reward_image: str | None, source_letter: str) -> NormalizedReward:
    return NormalizedReward(
        redemption_id=record.redemption_id,
        kind=record.kind,
        cpidx=cpidx,
        cpid=cpid,
        title=record.title,
        brand_name=record.brand_name,
        value=coerce_int(record.value),
        points=coerce_int(record.points),
        reward_status=record.reward_status,
        reward_availability=record.reward_availability,
        language=record.language,
        tags=record.tags,
        priority=coerce_int(record.priority),
        reward_image=reward_image,
        source_letter=source_letter,
        registry_id=record.registry_id,
        tenant_id=record.tenant_id,
        value_type=record.value_type,
        utid=record.utid,
        inventory_remaining=record.inventory_remaining,
        start_date=record.start_date,
        end_date=record.end_date,
        provider_id=record.provider_id,
        cpid_fallback=lacks_cpid(record.cpid),
    )


def transform_reward(record: RawRewardRecord, resolver: SourceLetterResolver) -> NormalizedReward:
    """Normalize one record; raises :class:`RecordTransformError` on failure."""

    try:
        reward_image = resolve_image_url(record.image_payload, record.redemption_id, clean=True)
        source_letter = resolver.resolve(record.kind, record.provider_id)
        display, canonical = normalize_cpid(record.cpid, record.redemption_id)
        return _build(
            record,
            cpidx=canonical,
            cpid=display,
            reward_image=reward_image,
            source_letter=source_letter,
        )
    except Exception as exc:
        raise RecordTransformError(record.redemption_id, str(exc)) from exc


def degrade_reward(record: RawRewardRecord, resolver: SourceLetterResolver) -> NormalizedReward:
    """Fallback form of a record that failed to transform: raw CPID, no image."""

    raw_cpid = record.cpid or ""
    return _build(
        record,
        cpidx=raw_cpid,
        cpid=raw_cpid,
        reward_image=None,
        source_letter=resolver.resolve(record.kind, record.provider_id),
    )


def transform_rewards(records: Iterable[RawRewardRecord], resolver: SourceLetterResolver) -> list[NormalizedReward]:
    """Transform a batch, isolating failures so each input yields one output."""

    transformed: list[NormalizedReward] = []
    for record in records:
        try:
            transformed.append(transform_reward(record, resolver))
        except RecordTransformError as exc:
            logger.warning(
                "Reward transform degraded",
                redemption_id=exc.redemption_id,
                kind=record.kind.value,
                error=str(exc.__cause__ or exc),
            )
            transformed.append(degrade_reward(record, resolver))
    return transformed
