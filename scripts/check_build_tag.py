"""Compare the deployed build tag against the last one seen on this machine."""

from __future__ import annotations

import argparse

import httpx

from astrolog.core.config import settings
from astrolog.services.build_tag import BuildTagStore, fetch_remote_build_tag


def main() -> None:
    parser = argparse.ArgumentParser(description="Detect a newly deployed astrolog build.")
    parser.add_argument("--base-url", type=str, default=settings.public_base_url, help="Server base URL.")
    parser.add_argument("--state", type=str, default=None, help="Override the seen-tag state file.")
    args = parser.parse_args()

    store = BuildTagStore(args.state)
    try:
        remote = fetch_remote_build_tag(args.base_url)
    except httpx.HTTPError as exc:
        print(f"Build (api): ? ({exc})")
        return

    seen = store.load()
    print(f"Build (seen): {seen or '?'}")
    print(f"Build (api): {remote}")
    if store.check(remote):
        print("New version available: clear cached assets and reload.")


if __name__ == "__main__":
    main()
