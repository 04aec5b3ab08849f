"""Client-side "last seen build tag" used to detect a newly deployed version."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx

from astrolog.core.config import settings

logger = logging.getLogger(__name__)

STATE_KEY = "seen_build_tag"


class BuildTagStore:
    """Persist the last build tag reported by the server in a small JSON file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path or settings.build_tag_state_path).expanduser()

    def load(self) -> str | None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("Unreadable build tag state at %s; treating as unseen", self.path)
            return None
        value = data.get(STATE_KEY) if isinstance(data, dict) else None
        return value or None

    def save(self, tag: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({STATE_KEY: tag}), encoding="utf-8")

    def check(self, remote_tag: str) -> bool:
        """Record ``remote_tag``; True when it differs from a previously seen tag."""

        seen = self.load()
        self.save(remote_tag)
        needs_reload = bool(seen) and seen != remote_tag
        if needs_reload:
            logger.info("Build tag changed from %s to %s", seen, remote_tag)
        return needs_reload


def fetch_remote_build_tag(base_url: str, client: httpx.Client | None = None, timeout: float = 10.0) -> str:
    url = f"{base_url.rstrip('/')}{settings.api_prefix}/version"
    headers = {"Cache-Control": "no-store"}
    if client is not None:
        response = client.get(url, headers=headers)
    else:
        response = httpx.get(url, headers=headers, timeout=timeout)
    response.raise_for_status()
    return str(response.json()["buildTag"])


__all__ = ["BuildTagStore", "fetch_remote_build_tag"]
