"""
Authorization gate for write requests.

``authorize`` is a pure function of the request method, the claims of the
verified identity token (``None`` when there is none) and the allow-list.
Checks run in a fixed order: safe methods pass, then a token is required,
then a verified email, then allow-list membership.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


class RejectKind(Enum):
    UNAUTHENTICATED = 401
    FORBIDDEN = 403


@dataclass(frozen=True)
class GateDecision:
    """Outcome of the gate; ``kind`` and ``code`` are only set on rejection."""

    allowed: bool
    kind: Optional[RejectKind] = None
    code: Optional[str] = None
    reason: Optional[str] = None

    @property
    def status(self) -> int:
        return self.kind.value if self.kind else 200


ALLOW = GateDecision(allowed=True)
UNAUTHENTICATED = GateDecision(
    allowed=False,
    kind=RejectKind.UNAUTHENTICATED,
    code="UNAUTHENTICATED",
    reason="Authentication required",
)
EMAIL_NOT_VERIFIED = GateDecision(
    allowed=False,
    kind=RejectKind.FORBIDDEN,
    code="EMAIL_NOT_VERIFIED",
    reason="Email not verified",
)
EMAIL_NOT_WHITELISTED = GateDecision(
    allowed=False,
    kind=RejectKind.FORBIDDEN,
    code="EMAIL_NOT_WHITELISTED",
    reason="Not authorized to perform write operations",
)


def normalize_allow_list(emails: Iterable[str]) -> FrozenSet[str]:
    """Lower-case and freeze the configured email addresses."""
    return frozenset(email.strip().lower() for email in emails if email and email.strip())


def authorize(
    method: str, claims: Optional[Mapping[str, Any]], allowed_emails: FrozenSet[str]
) -> GateDecision:
    if method.upper() in SAFE_METHODS:
        return ALLOW
    if claims is None:
        return UNAUTHENTICATED
    email = claims.get("email")
    # Only a real boolean true counts; "true" strings are rejected.
    if not email or not isinstance(email, str) or claims.get("email_verified") is not True:
        return EMAIL_NOT_VERIFIED
    if email.lower() not in allowed_emails:
        return EMAIL_NOT_WHITELISTED
    return ALLOW
