"""Client for the hosted authentication provider (magic links, code exchange)."""

from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from astrolog.core.config import settings

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """The provider rejected a request or could not be reached."""


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: Optional[str]
    user_id: Optional[str] = None
    email: Optional[str] = None
    expires_in: Optional[int] = None


def new_code_verifier() -> str:
    return secrets.token_urlsafe(48)


def code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        if isinstance(payload, dict) and payload.get(key):
            return str(payload[key])
    return f"HTTP {response.status_code}"


class AuthProviderClient:
    """Thin wrapper over the provider's REST endpoints.

    Every call is a single round trip; failures raise
    :class:`AuthProviderError` and are never retried.
    """

    def __init__(
        self,
        base_url: str | None = None,
        anon_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.auth_url).rstrip("/")
        self.anon_key = anon_key if anon_key is not None else settings.auth_anon_key
        self.timeout = timeout or settings.auth_timeout
        self._client = httpx.Client(
            base_url=f"{self.base_url}/auth/v1",
            timeout=self.timeout,
            transport=transport,
            headers={"apikey": self.anon_key},
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, token: str | None = None, **kwargs: Any) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token or self.anon_key}"}
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Auth provider request %s %s failed: %s", method, path, exc)
            raise AuthProviderError(str(exc)) from exc
        if response.is_error:
            message = _error_message(response)
            logger.warning("Auth provider rejected %s %s: %s", method, path, message)
            raise AuthProviderError(message)
        return response

    def send_magic_link(self, email: str, redirect_to: str, verifier: str | None = None) -> None:
        body: dict[str, Any] = {"email": email, "create_user": True}
        if verifier:
            body["code_challenge"] = code_challenge(verifier)
            body["code_challenge_method"] = "s256"
        self._request("POST", "/otp", json=body, params={"redirect_to": redirect_to})
        logger.info("Magic link requested for %s", email)

    def exchange_code_for_session(self, code: str, verifier: str | None = None) -> AuthSession:
        response = self._request(
            "POST",
            "/token",
            params={"grant_type": "pkce"},
            json={"auth_code": code, "code_verifier": verifier or ""},
        )
        return self._session_from_payload(response.json())

    def get_user(self, access_token: str) -> dict[str, Any]:
        return self._request("GET", "/user", token=access_token).json()

    def session_from_tokens(
        self, access_token: str, refresh_token: str | None, expires_in: int | None = None
    ) -> AuthSession:
        """Validate implicit-flow tokens by asking the provider who they belong to."""

        user = self.get_user(access_token)
        return AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            user_id=user.get("id"),
            email=user.get("email"),
            expires_in=expires_in,
        )

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", token=access_token)

    @staticmethod
    def _session_from_payload(payload: dict[str, Any]) -> AuthSession:
        token = payload.get("access_token")
        if not token:
            raise AuthProviderError("Provider response carried no access token")
        user = payload.get("user") or {}
        return AuthSession(
            access_token=token,
            refresh_token=payload.get("refresh_token"),
            user_id=user.get("id"),
            email=user.get("email"),
            expires_in=payload.get("expires_in"),
        )


__all__ = [
    "AuthProviderClient",
    "AuthProviderError",
    "AuthSession",
    "new_code_verifier",
    "code_challenge",
]
