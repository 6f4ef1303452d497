"""
Middleware applying the authorization gate to every request.

Safe requests pass straight through, without looking at the
``Authorization`` header.  For writes the bearer token is verified and its
claims are handed to ``gate.authorize``; rejections are answered with a
JSON body ``{"message": ..., "code": ...}`` and never reach a view.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.http import JsonResponse

from .gate import SAFE_METHODS, RejectKind, authorize, normalize_allow_list
from .tokens import InvalidToken, TokenVerifier, bearer_token

logger = logging.getLogger(__name__)


class WriteAccessMiddleware:
    """Only verified, allow-listed emails may send mutating requests."""

    def __init__(self, get_response) -> None:
        self.get_response = get_response
        # Loaded once per process; changing the allow-list needs a restart.
        self.allowed_emails = normalize_allow_list(settings.AUTH_ALLOWED_EMAILS)
        self.verifier = TokenVerifier.from_settings()

    def _claims(self, request):
        token = bearer_token(request)
        if token is None:
            return None
        try:
            return self.verifier.verify(token)
        except InvalidToken:
            return None

    def __call__(self, request):
        method = request.method.upper()
        claims = None if method in SAFE_METHODS else self._claims(request)
        decision = authorize(method, claims, self.allowed_emails)
        if not decision.allowed:
            logger.warning(
                "Rejected %s %s: %s (email=%s)",
                method,
                request.path,
                decision.code,
                (claims or {}).get("email"),
            )
            response = JsonResponse(
                {"message": decision.reason, "code": decision.code}, status=decision.status
            )
            if decision.kind is RejectKind.UNAUTHENTICATED:
                response["WWW-Authenticate"] = "Bearer"
            return response
        return self.get_response(request)
