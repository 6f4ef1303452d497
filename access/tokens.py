"""
Verification of bearer tokens issued by the identity provider.

Signing keys are fetched from the provider's JWKS endpoint through
PyJWT's ``PyJWKClient``, which caches them between requests.  A static
key can be configured instead (``AUTH_JWT_KEY``), which is what local
development and the test-suite use.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import jwt
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class InvalidToken(Exception):
    """The bearer token could not be verified."""


def bearer_token(request) -> Optional[str]:
    """Return the token of an ``Authorization: Bearer`` header, if any."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class TokenVerifier:
    """Decode and validate identity tokens (signature, expiry, issuer, audience)."""

    def __init__(
        self,
        issuer: str,
        audience: str,
        algorithms: Sequence[str] = ("RS256",),
        jwks_url: Optional[str] = None,
        key: Optional[str] = None,
    ) -> None:
        if key is None and not jwks_url:
            raise ImproperlyConfigured("Either a JWKS URL or a static verification key is required")
        self.issuer = issuer
        self.audience = audience
        self.algorithms = list(algorithms)
        self.key = key
        self._jwks_client = jwt.PyJWKClient(jwks_url) if key is None else None

    @classmethod
    def from_settings(cls) -> "TokenVerifier":
        return cls(
            issuer=settings.AUTH_JWT_ISSUER,
            audience=settings.AUTH_JWT_AUDIENCE,
            algorithms=settings.AUTH_JWT_ALGORITHMS,
            jwks_url=settings.AUTH_JWKS_URL,
            key=settings.AUTH_JWT_KEY,
        )

    def _signing_key(self, token: str):
        if self.key is not None:
            return self.key
        return self._jwks_client.get_signing_key_from_jwt(token).key

    def verify(self, token: str) -> Dict[str, Any]:
        """Return the claims of a valid token; raise ``InvalidToken`` otherwise."""
        try:
            return jwt.decode(
                token,
                self._signing_key(token),
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iss", "aud"]},
            )
        except jwt.PyJWTError as exc:
            logger.info("Rejected bearer token: %s", exc)
            raise InvalidToken(str(exc)) from exc
