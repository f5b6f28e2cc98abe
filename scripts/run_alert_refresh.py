#!/usr/bin/env python3
"""
One-off script to manually refresh maintenance alerts for every project.

Usage (inside the API container):
    python scripts/run_alert_refresh.py

Or from the host:
    docker exec greenwork-api-1 python scripts/run_alert_refresh.py
"""
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s: %(message)s",
    stream=sys.stdout,
)

from app.tasks.maintenance_alerts import refresh_maintenance_alerts


async def main() -> None:
    print("Starting maintenance alert refresh...\n")
    await refresh_maintenance_alerts(ctx={})
    print("\nRefresh finished.")


if __name__ == "__main__":
    asyncio.run(main())
