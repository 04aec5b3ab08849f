"""Signed-in session state and the magic-link callback bootstrap."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs

from astrolog.core.config import settings
from astrolog.services.auth_provider import AuthProviderClient, AuthProviderError, AuthSession

logger = logging.getLogger(__name__)

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
SESSION_EXPIRED = "SESSION_EXPIRED"

AuthListener = Callable[[str, Optional[AuthSession]], None]


class AuthContext:
    """Observable registry of signed-in sessions keyed by an opaque cookie id.

    The context is created once per application and handed to request
    handlers explicitly. Listeners receive ``(event, session)`` for every
    sign-in, sign-out and expiry; :meth:`subscribe` returns the matching
    unsubscribe callable.

    A session lives for the provider's ``expires_in`` seconds, or
    ``settings.auth_session_ttl`` when the provider did not say. Expired
    sessions are dropped on lookup and whenever someone signs in.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._sessions: dict[str, tuple[AuthSession, float]] = {}
        self._listeners: list[AuthListener] = []
        self._lock = threading.Lock()
        self._clock = clock

    def active_count(self) -> int:
        """Number of stored sessions, expired ones included until swept."""
        with self._lock:
            return len(self._sessions)

    def get(self, session_id: str | None) -> AuthSession | None:
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            session, expires_at = entry
            if self._clock() < expires_at:
                return session
            del self._sessions[session_id]
        self._notify(SESSION_EXPIRED, session)
        return None

    def sign_in(self, session: AuthSession) -> str:
        session_id = secrets.token_urlsafe(32)
        lifetime = session.expires_in if session.expires_in is not None else settings.auth_session_ttl
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._sessions.items() if now >= expires_at]
            dropped = [self._sessions.pop(key)[0] for key in expired]
            self._sessions[session_id] = (session, now + lifetime)
        for old in dropped:
            self._notify(SESSION_EXPIRED, old)
        self._notify(SIGNED_IN, session)
        return session_id

    def sign_out(self, session_id: str | None) -> AuthSession | None:
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.pop(session_id, None)
        if entry is None:
            return None
        session = entry[0]
        self._notify(SIGNED_OUT, session)
        return session

    def subscribe(self, listener: AuthListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def subscription(self, listener: AuthListener) -> Iterator[None]:
        """Keep ``listener`` subscribed for the lifetime of the block."""
        unsubscribe = self.subscribe(listener)
        try:
            yield
        finally:
            unsubscribe()

    def _notify(self, event: str, session: AuthSession | None) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, session)
            except Exception:
                logger.exception("Auth listener failed on %s", event)


@dataclass(frozen=True)
class CallbackOutcome:
    redirect_to: str
    session: AuthSession | None = None
    error: str | None = None


def parse_fragment(fragment: str | None) -> dict[str, str]:
    """Parse ``#access_token=...&refresh_token=...`` into a flat dict."""

    if not fragment:
        return {}
    parsed = parse_qs(fragment.lstrip("#"), keep_blank_values=False)
    return {key: values[0] for key, values in parsed.items() if values}


def _seconds(value: str | None) -> int | None:
    try:
        return int(value) if value else None
    except ValueError:
        return None


def bootstrap_callback(
    provider: AuthProviderClient,
    code: str | None = None,
    code_verifier: str | None = None,
    access_token: str | None = None,
    refresh_token: str | None = None,
    fragment: str | None = None,
) -> CallbackOutcome:
    """Turn a magic-link callback into a session and a redirect target.

    An authorization code is exchanged first; implicit-flow tokens (passed
    directly or inside the URL fragment) are the fallback. With neither the
    user goes back to the login page. A failed exchange is not retried.
    """
    failed = f"{settings.login_path}?e=auth"

    if code:
        try:
            session = provider.exchange_code_for_session(code, code_verifier)
        except AuthProviderError as exc:
            logger.warning("Code exchange failed: %s", exc)
            return CallbackOutcome(redirect_to=failed, error=str(exc))
        return CallbackOutcome(redirect_to=settings.landing_path, session=session)

    tokens = parse_fragment(fragment)
    access_token = access_token or tokens.get("access_token")
    refresh_token = refresh_token or tokens.get("refresh_token")
    if access_token and refresh_token:
        try:
            session = provider.session_from_tokens(
                access_token, refresh_token, expires_in=_seconds(tokens.get("expires_in"))
            )
        except AuthProviderError as exc:
            logger.warning("Token validation failed: %s", exc)
            return CallbackOutcome(redirect_to=failed, error=str(exc))
        return CallbackOutcome(redirect_to=settings.landing_path, session=session)

    return CallbackOutcome(redirect_to=settings.login_path)


__all__ = [
    "AuthContext",
    "AuthListener",
    "CallbackOutcome",
    "SIGNED_IN",
    "SIGNED_OUT",
    "SESSION_EXPIRED",
    "bootstrap_callback",
    "parse_fragment",
]
