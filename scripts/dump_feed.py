#!/usr/bin/env python3
"""Dump the live vehicle feed and what the cache makes of it.

Fetches the SIRI feed once, then prints the reconciled snapshot together
with duplicate statistics from the raw document, so the effect of the
deduplication policy can be checked against real data.

Usage
-----
Set environment variables and run::

    export GRANDLYON_API_URL="https://.../vehicle-monitoring.json"
    export GRANDLYON_USERNAME="you"
    export GRANDLYON_PASSWORD="your-password"
    python scripts/dump_feed.py

Options::

    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --raw                Include the raw feed document in JSON output
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pygrandlyon import GrandLyonClient, GrandLyonConfig  # noqa: E402
from pygrandlyon.ingestion.vehicles import map_activities, parse_feed  # noqa: E402


def _duplicate_stats(document: Any) -> dict[str, Any]:
    deliveries = parse_feed(document).deliveries or []
    positions, dropped = map_activities(deliveries)
    counts = Counter(p.vehicle_id for p in positions if p.vehicle_id is not None)
    group_sizes = Counter(n for n in counts.values() if n > 1)
    return {
        "records": len(positions),
        "dropped": dropped,
        "anonymous": sum(1 for p in positions if p.vehicle_id is None),
        "distinct_vehicles": len(counts),
        "duplicate_groups_by_size": {str(size): n for size, n in sorted(group_sizes.items())},
    }


async def main() -> None:
    parser = argparse.ArgumentParser(description="Dump the live vehicle feed and the reconciled snapshot")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--raw", action="store_true", help="Include the raw feed document in JSON output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = GrandLyonConfig.from_env()

    async with GrandLyonClient(config) as client:
        snapshot = await client.get_vehicle_positions()
        # The cache keeps no raw document; fetch it again for the statistics.
        document = await client.transport.get_json(config.api_url)

    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "feed": config.api_url,
        "stats": _duplicate_stats(document),
        "snapshot": snapshot.to_payload(),
    }
    if args.raw:
        result["raw"] = document

    if args.json_mode or args.output:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
        return

    stats = result["stats"]
    print(f"feed      : {config.api_url}")
    print(f"status    : {snapshot.api_status}")
    print(f"upstream  : {snapshot.api_response_timestamp}")
    print(f"records   : {stats['records']} (dropped {stats['dropped']}, anonymous {stats['anonymous']})")
    print(f"vehicles  : {len(snapshot.vehicles)} published, {stats['distinct_vehicles']} distinct ids")
    print(f"dup groups: {stats['duplicate_groups_by_size'] or 'none'}")
    for vehicle in snapshot.vehicles:
        print(
            f"  {vehicle.vehicle_id or '-':<28} line={vehicle.line_id or '-':<24} "
            f"delay={vehicle.delay or '-':<10} ({vehicle.latitude:.5f}, {vehicle.longitude:.5f})"
        )


if __name__ == "__main__":
    asyncio.run(main())
