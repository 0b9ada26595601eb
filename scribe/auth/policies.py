"""
Policies - the authorization decision and the dependencies that feed it.

Design:
- `decide()` is a pure function of (identity, action, resource owner)
- Bearer tokens are resolved to an identity by an explicit dependency,
  not by mutating the request
- The content service turns a Deny into the matching error
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from scribe.auth.capabilities import Action, OWNED_COMMENT_ACTIONS, POST_ACTIONS
from scribe.auth.jwt import TokenCodec, TokenError
from scribe.core.errors import InvalidToken, Unauthenticated, Unauthorized
from scribe.core.models import UserIdentity

logger = logging.getLogger(__name__)


# =============================================================================
# Decision
# =============================================================================


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"    # maps to 401
    NOT_AUTHORISED = "not authorised"      # maps to 403


@dataclass(frozen=True)
class Decision:
    """Outcome of a policy check. Use ALLOW or Decision.deny(reason)."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def deny(cls, reason: DenyReason) -> Decision:
        return cls(allowed=False, reason=reason)

    def enforce(self) -> None:
        """Raise the error matching a Deny; do nothing on Allow."""
        if self.allowed:
            return
        if self.reason is DenyReason.UNAUTHENTICATED:
            raise Unauthenticated()
        raise Unauthorized()


ALLOW = Decision(allowed=True)


def decide(
    identity: UserIdentity | None,
    action: Action,
    resource_owner: str | None = None,
) -> Decision:
    """
    Decide whether `identity` may perform `action`.

    Rules, first match wins:
        1. Public reads are always allowed
        2. Everything else needs an identity
        3. Post management needs an admin
        4. Any identity may comment
        5. Editing/deleting a comment needs its owner or an admin

    Args:
        identity: Verified caller, or None for anonymous
        action: What is being attempted
        resource_owner: Username stamped on the target comment, read fresh
            from the content store right before calling this

    Returns:
        ALLOW or a Deny decision with its reason
    """
    if action is Action.READ_PUBLIC:
        return ALLOW

    if identity is None:
        return Decision.deny(DenyReason.UNAUTHENTICATED)

    if action in POST_ACTIONS:
        return ALLOW if identity.admin else Decision.deny(DenyReason.NOT_AUTHORISED)

    if action is Action.CREATE_COMMENT:
        return ALLOW

    if action in OWNED_COMMENT_ACTIONS:
        if identity.admin:
            return ALLOW
        if resource_owner is not None and identity.username == resource_owner:
            return ALLOW
        return Decision.deny(DenyReason.NOT_AUTHORISED)

    return Decision.deny(DenyReason.NOT_AUTHORISED)


# =============================================================================
# Token -> Identity (FastAPI dependencies)
# =============================================================================


# Raw Authorization header (doesn't fail if absent)
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.codec


def parse_bearer(authorization: str | None) -> str | None:
    """
    Token from an Authorization header value.

    A missing header means anonymous. A header that is present but not
    "Bearer <token>" is rejected like a bad token.
    """
    if authorization is None:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        logger.info(f"Rejected Authorization header with scheme {scheme!r}")
        raise InvalidToken()
    return token


def resolve_identity(token: str | None, codec: TokenCodec) -> UserIdentity | None:
    """
    Turn a raw bearer token into an identity.

    No token means anonymous. A token that fails verification is an
    error, never a silent downgrade to anonymous.
    """
    if not token:
        return None
    try:
        return codec.verify(token)
    except TokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise InvalidToken()


async def get_identity(
    authorization: str | None = Depends(authorization_header),
    codec: TokenCodec = Depends(get_token_codec),
) -> UserIdentity | None:
    """Identity for this request, or None when no Authorization header was sent."""
    return resolve_identity(parse_bearer(authorization), codec)
