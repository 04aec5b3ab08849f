"""Manually ping the heartbeat endpoint with the configured cron secret."""

from __future__ import annotations

import argparse
import sys

import httpx

from astrolog.core.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Ping /api/heartbeat with the cron bearer secret.")
    parser.add_argument("--base-url", type=str, default=settings.public_base_url, help="Server base URL.")
    parser.add_argument("--secret", type=str, default=settings.cron_secret, help="Override CRON_SECRET.")
    args = parser.parse_args()

    url = f"{args.base_url.rstrip('/')}{settings.api_prefix}/heartbeat"
    try:
        response = httpx.get(url, headers={"Authorization": f"Bearer {args.secret}"}, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Heartbeat request failed: {exc}")
        sys.exit(1)

    print(f"{response.status_code} {response.text}")
    sys.exit(0 if response.is_success else 1)


if __name__ == "__main__":
    main()
