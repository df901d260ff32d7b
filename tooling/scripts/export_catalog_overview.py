#!/usr/bin/env python3
"""Export a tenant's grouped reward catalog for offline review."""

from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List

import httpx


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export the catalog overview (grouped rewards + enterprise catalogs) for a tenant."
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Base URL of the rewards API service.",
    )
    parser.add_argument("--tenant-id", type=int, required=True, help="Tenant whose overview to export.")
    parser.add_argument(
        "--format",
        choices=("json", "md"),
        default="json",
        help="Export format (json or md).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Optional path to write the export. If omitted, prints to stdout.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="HTTP request timeout in seconds.",
    )
    return parser.parse_args()


def summarize(payload: Dict[str, Any]) -> Dict[str, Any]:
    rewards: List[Dict[str, Any]] = payload.get("data", []) or []
    statuses = Counter(reward.get("reward_status", "unknown") for reward in rewards)
    kinds = Counter(reward.get("type", "unknown") for reward in rewards)
    uncataloged = [reward.get("title", "") for reward in rewards if not reward.get("catalogs")]
    return {
        "groups": len(rewards),
        "items": sum(int(reward.get("source_count", 0)) for reward in rewards),
        "by_type": dict(kinds),
        "by_status": dict(statuses),
        "uncataloged": uncataloged,
        "memberships_degraded": bool(payload.get("membershipsDegraded")),
    }


def _format_markdown(payload: Dict[str, Any], summary: Dict[str, Any], tenant_id: int) -> str:
    rows = "\n".join(
        f"| {reward.get('type')} | {reward.get('title')} | {reward.get('cpid')} | "
        f"{reward.get('source_count')} | {reward.get('reward_status')} | "
        f"{', '.join(catalog['catalog_name'] for catalog in reward.get('catalogs', [])) or '-'} |"
        for reward in payload.get("data", [])
    ) or "| - | - | - | - | - | - |"
    warning = (
        "\n> Catalog memberships were unavailable when this export was taken.\n"
        if summary["memberships_degraded"]
        else ""
    )
    return (
        f"# Catalog Overview: tenant {tenant_id}\n\n"
        f"- Groups: **{summary['groups']}** ({summary['items']} purchasable items)\n"
        f"- By type: {summary['by_type']}\n"
        f"- By status: {summary['by_status']}\n"
        f"- Not in any catalog: **{len(summary['uncataloged'])}**\n"
        f"{warning}\n"
        "| Type | Title | CPID | Items | Status | Catalogs |\n"
        "| --- | --- | --- | --- | --- | --- |\n"
        f"{rows}\n"
    )


def main() -> None:
    args = parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        response = client.get(f"/api/v1/tenants/{args.tenant_id}/catalogs/overview")
        response.raise_for_status()
        payload = response.json()

    summary = summarize(payload)
    if args.format == "json":
        content = json.dumps({"summary": summary, **payload}, indent=2)
    else:
        content = _format_markdown(payload, summary, args.tenant_id)

    if args.output:
        args.output.write_text(content)
        print(f"[export-catalog-overview] wrote export to {args.output}")
    else:
        print(content)


if __name__ == "__main__":
    try:
        main()
    except httpx.HTTPStatusError as exc:  # pragma: no cover
        print(
            f"[export-catalog-overview] HTTP {exc.response.status_code} while calling {exc.request.url}",
            file=sys.stderr,
        )
        sys.exit(1)
    except httpx.HTTPError as exc:  # pragma: no cover
        print(f"[export-catalog-overview] Request failed: {exc}", file=sys.stderr)
        sys.exit(1)
