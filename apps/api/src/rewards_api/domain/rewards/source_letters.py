"""Provider source letters.

Every catalog item carries a single-letter code naming where it came from:
``O`` for offers, and a per-provider code for gift cards. Letters are loaded
from persistence by a :class:`ProviderLetterRegistry` owned by the
application and handed to request-scoped resolvers as an immutable mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Mapping

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rewards_api.domain.rewards.records import RewardKind
from rewards_api.models.rewards import RewardProvider

OFFER_SOURCE_LETTER = "O"
UNKNOWN_SOURCE_LETTER = "?"

EMPTY_LETTERS: Mapping[str, str] = MappingProxyType({})


class SourceLetterResolver:
    """Map a reward kind and provider id to its source letter."""

    def __init__(
        self,
        letters: Mapping[str, str],
        *,
        offer_letter: str = OFFER_SOURCE_LETTER,
        unknown_letter: str = UNKNOWN_SOURCE_LETTER,
    ) -> None:
        self._letters = letters if isinstance(letters, MappingProxyType) else MappingProxyType(dict(letters))
        self._offer_letter = offer_letter
        self._unknown_letter = unknown_letter

    @property
    def letters(self) -> Mapping[str, str]:
        return self._letters

    def resolve(self, kind: RewardKind | str, provider_id: str | int | None) -> str:
        if RewardKind(kind) is RewardKind.OFFER:
            return self._offer_letter
        if provider_id is None or str(provider_id).strip() == "":
            return self._unknown_letter
        return self._letters.get(str(provider_id).strip(), self._unknown_letter)


@dataclass(frozen=True, slots=True)
class _LetterSnapshot:
    letters: Mapping[str, str]
    loaded_at: datetime


class ProviderLetterRegistry:
    """Time-bounded cache of provider id to source letter mappings."""

    def __init__(
        self,
        *,
        ttl_seconds: int = 300,
        offer_letter: str = OFFER_SOURCE_LETTER,
        unknown_letter: str = UNKNOWN_SOURCE_LETTER,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._offer_letter = offer_letter
        self._unknown_letter = unknown_letter
        self._snapshot: _LetterSnapshot | None = None

    @property
    def letters(self) -> Mapping[str, str]:
        if self._snapshot is None:
            return EMPTY_LETTERS
        return self._snapshot.letters

    def is_fresh(self, now: datetime | None = None) -> bool:
        if self._snapshot is None:
            return False
        current = now or datetime.now(timezone.utc)
        return current - self._snapshot.loaded_at < self._ttl

    def invalidate(self) -> None:
        self._snapshot = None

    async def refresh(self, session: AsyncSession, *, force: bool = False) -> Mapping[str, str]:
        """Reload enabled provider codes unless the cached snapshot is still fresh.

        Database failures are logged and yield an empty mapping so every gift
        card resolves to the unknown letter; the failure is not cached.
        """

        now = datetime.now(timezone.utc)
        if not force and self.is_fresh(now):
            return self.letters

        stmt = select(RewardProvider.id, RewardProvider.code).where(
            RewardProvider.enabled.is_(True),
            RewardProvider.code.is_not(None),
            RewardProvider.code != self._offer_letter,
        )
        try:
            rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to load provider source letters", error=str(exc))
            return EMPTY_LETTERS

        letters = MappingProxyType({str(provider_id): code for provider_id, code in rows if code})
        self._snapshot = _LetterSnapshot(letters=letters, loaded_at=now)
        logger.debug("Provider source letters refreshed", provider_count=len(letters))
        return letters

    async def resolver(self, session: AsyncSession) -> SourceLetterResolver:
        letters = await self.refresh(session)
        return SourceLetterResolver(
            letters,
            offer_letter=self._offer_letter,
            unknown_letter=self._unknown_letter,
        )
