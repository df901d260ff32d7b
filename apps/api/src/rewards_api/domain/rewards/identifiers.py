"""CPID and image payload normalization.

Catalog product identifiers (CPIDs) arrive from several record shapes. A full
CPID encodes a product and its variant as dash-separated segments; the first
four segments identify the product across providers and form the canonical
identifier used for grouping.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, NamedTuple

from loguru import logger

from rewards_api.domain.rewards.errors import ImageParseError


PLACEHOLDER_CPID = "-"
CANONICAL_SEGMENTS = 4
PREFERRED_IMAGE_SIZE = "300w-326ppi"

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")
_WHITESPACE_CONTROLS = re.compile(r"[\n\r\t]")
_IMAGE_WIDTH = re.compile(r"(\d+)w-")


class CpidPair(NamedTuple):
    display: str
    canonical: str


def is_placeholder_cpid(value: str | None) -> bool:
    """Return True for the single-dash placeholder meaning "no real identifier".

    A product legitimately named ``-`` would be misclassified; the value is
    kept for compatibility with existing catalog data.
    """

    return value is not None and value.strip() == PLACEHOLDER_CPID


def canonicalize_cpid(cpid: str) -> str:
    segments = cpid.split("-")
    if len(segments) < CANONICAL_SEGMENTS:
        return cpid
    return "-".join(segments[:CANONICAL_SEGMENTS])


def normalize_cpid(raw_cpid: str | None, fallback_id: str | None = None) -> CpidPair:
    """Return ``(display, canonical)`` identifiers for a raw CPID.

    Absent, blank and placeholder CPIDs fall back to ``fallback_id`` for both
    outputs. An empty pair means the caller must drop the record.
    """

    try:
        if raw_cpid is None or not raw_cpid.strip() or is_placeholder_cpid(raw_cpid):
            fallback = (fallback_id or "").strip()
            return CpidPair(fallback, fallback)

        if raw_cpid.count("-") < CANONICAL_SEGMENTS - 1:
            logger.debug("Short CPID kept as canonical", cpid=raw_cpid, redemption_id=fallback_id)
        return CpidPair(raw_cpid, canonicalize_cpid(raw_cpid))
    except Exception as exc:  # noqa: BLE001 - normalization never fails a record
        logger.warning("CPID normalization failed", cpid=raw_cpid, redemption_id=fallback_id, error=str(exc))
        raw = raw_cpid if isinstance(raw_cpid, str) else ""
        return CpidPair(raw, raw)


def _clean_json(payload: str) -> str:
    stripped = _CONTROL_CHARS.sub("", payload)
    return _WHITESPACE_CONTROLS.sub(" ", stripped).strip()


def _is_direct_url(value: str) -> bool:
    return value.startswith(("http", "/", "data:image"))


def _select_best_image(image_urls: Any) -> str | None:
    if isinstance(image_urls, list):
        image_urls = {str(index): url for index, url in enumerate(image_urls)}
    if not isinstance(image_urls, Mapping):
        raise ImageParseError(f"Unsupported image payload type {type(image_urls).__name__}")
    if not image_urls:
        return None

    preferred = image_urls.get(PREFERRED_IMAGE_SIZE)
    if preferred:
        return str(preferred)

    largest_width = 0
    largest_url: str | None = None
    for key, url in image_urls.items():
        match = _IMAGE_WIDTH.search(str(key))
        if match is None:
            continue
        width = int(match.group(1))
        if width > largest_width and url:
            largest_width = width
            largest_url = str(url)

    if largest_url:
        return largest_url
    first = next(iter(image_urls.values()))
    return str(first) if first else None


def resolve_image_url(payload: str | None, reward_id: str | None = None, *, clean: bool = False) -> str | None:
    """Pick a display URL from a raw image payload.

    The payload is either a direct URL or a JSON map of size labels to URLs.
    Malformed payloads yield ``None``.
    """

    if not payload:
        return None
    if _is_direct_url(payload):
        return payload
    if not payload.startswith(("{", "[")):
        return payload

    try:
        parsed = json.loads(_clean_json(payload) if clean else payload)
        return _select_best_image(parsed)
    except (ValueError, ImageParseError) as exc:
        logger.warning("Image payload could not be parsed", redemption_id=reward_id, error=str(exc))
        return None
