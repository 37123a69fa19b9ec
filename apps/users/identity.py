"""
Identity provider integration (Clerk-compatible backend API).

The provider owns credentials and sessions. The client below mirrors a
member's role into the provider user's metadata and deletes provider
users when a member is removed. The module-level helpers verify webhook
signatures and session tokens.

Without ``IDENTITY_SECRET_KEY`` the client runs offline: calls are logged
and skipped.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import time
from functools import lru_cache
from typing import Any, Mapping

import jwt  # type: ignore
import requests
from django.conf import settings

logger = logging.getLogger(__name__)

WEBHOOK_TOLERANCE_SECONDS = 5 * 60


class IdentityProviderError(Exception):
    """The identity provider rejected a request or could not be reached."""


class InvalidSessionToken(IdentityProviderError):
    """A session token failed signature, issuer or expiry validation."""


class InvalidWebhookSignature(IdentityProviderError):
    """A webhook delivery is unsigned, stale or signed with another secret."""


class IdentityProviderClient:
    """Thin wrapper over the provider's user endpoints."""

    def __init__(
        self,
        api_url: str | None = None,
        secret_key: str | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ):
        self.api_url = (api_url if api_url is not None else settings.IDENTITY_API_URL).rstrip("/") + "/"
        self.secret_key = secret_key if secret_key is not None else settings.IDENTITY_SECRET_KEY
        self.timeout = timeout or settings.IDENTITY_REQUEST_TIMEOUT
        self.session = session or requests.Session()

    @property
    def offline(self) -> bool:
        return not self.secret_key

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        url = f"{self.api_url}{path.lstrip('/')}"
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Identity provider %s %s failed: %s", method, path, exc)
            raise IdentityProviderError(f"{method} {path} failed: {exc}") from exc

        if not response.content:
            return {}
        return response.json()

    def get_user(self, external_id: str) -> dict[str, Any] | None:
        if self.offline:
            logger.warning("Identity provider offline, skipping get_user(%s)", external_id)
            return None
        return self._request("GET", f"users/{external_id}")

    def update_user_metadata(self, external_id: str, metadata: Mapping[str, Any]) -> dict[str, Any]:
        """Replace the user's unsafe metadata with ``metadata``."""
        if self.offline:
            logger.warning("Identity provider offline, metadata for %s not pushed: %s", external_id, dict(metadata))
            return {"unsafe_metadata": dict(metadata)}
        result = self._request("PATCH", f"users/{external_id}/metadata", json={"unsafe_metadata": dict(metadata)})
        logger.info("Identity metadata updated for %s", external_id)
        return result

    def delete_user(self, external_id: str) -> None:
        if self.offline:
            logger.warning("Identity provider offline, user %s not deleted", external_id)
            return
        self._request("DELETE", f"users/{external_id}")
        logger.info("Identity provider user %s deleted", external_id)


def get_client() -> IdentityProviderClient:
    return IdentityProviderClient()


def _header(headers: Mapping[str, str], *names: str) -> str:
    for name in names:
        value = headers.get(name)
        if value:
            return value
    return ""


def verify_webhook_signature(
    body: bytes,
    headers: Mapping[str, str],
    secret: str,
    *,
    now: float | None = None,
) -> None:
    """Verify a Svix-style signed webhook delivery.

    The signed content is ``"{id}.{timestamp}.{body}"`` hashed with
    HMAC-SHA256 under the base64 secret that follows ``whsec_``. The
    signature header carries space separated ``v1,<base64>`` entries.
    """
    message_id = _header(headers, "svix-id", "webhook-id")
    timestamp = _header(headers, "svix-timestamp", "webhook-timestamp")
    signatures = _header(headers, "svix-signature", "webhook-signature")
    if not (message_id and timestamp and signatures):
        raise InvalidWebhookSignature("Missing signature headers")

    try:
        sent_at = int(timestamp)
    except ValueError as exc:
        raise InvalidWebhookSignature("Invalid timestamp") from exc

    current = time.time() if now is None else now
    if abs(current - sent_at) > WEBHOOK_TOLERANCE_SECONDS:
        raise InvalidWebhookSignature("Timestamp outside tolerance")

    raw_secret = secret[len("whsec_"):] if secret.startswith("whsec_") else secret
    try:
        key = base64.b64decode(raw_secret)
    except (ValueError, TypeError) as exc:
        raise InvalidWebhookSignature("Malformed webhook secret") from exc

    signed = f"{message_id}.{timestamp}.".encode() + body
    expected = base64.b64encode(hmac.new(key, signed, hashlib.sha256).digest()).decode()

    for entry in signatures.split():
        version, _, signature = entry.partition(",")
        if version == "v1" and hmac.compare_digest(signature, expected):
            return
    raise InvalidWebhookSignature("No matching signature")


def sign_webhook(body: bytes, secret: str, message_id: str, timestamp: int) -> str:
    """Build the ``v1,<sig>`` header value; used by tests and local tooling."""
    raw_secret = secret[len("whsec_"):] if secret.startswith("whsec_") else secret
    signed = f"{message_id}.{timestamp}.".encode() + body
    digest = hmac.new(base64.b64decode(raw_secret), signed, hashlib.sha256).digest()
    return f"v1,{base64.b64encode(digest).decode()}"


@lru_cache(maxsize=4)
def _jwks_client(url: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(url, cache_keys=True)


def decode_session_token(token: str) -> dict[str, Any]:
    """Validate a provider session JWT and return its claims."""
    if not token:
        raise InvalidSessionToken("Empty session token")
    if not settings.IDENTITY_JWKS_URL:
        raise InvalidSessionToken("IDENTITY_JWKS_URL is not configured")

    try:
        signing_key = _jwks_client(settings.IDENTITY_JWKS_URL).get_signing_key_from_jwt(token)
        options = {"require": ["exp", "sub"]}
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=settings.IDENTITY_ISSUER or None,
            options=options,
            leeway=5,
        )
    except jwt.PyJWTError as exc:
        raise InvalidSessionToken(str(exc)) from exc
    return claims
