# =============================================================================
# JWT Token Codec
# =============================================================================
#
# Issues and verifies signed, time-limited bearer tokens:
#   - Claims: sub (user id), username, admin, iat, exp
#   - Signing key is an immutable SigningConfig injected at construction
#   - Verification never touches the credential store
#
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
import logging

import jwt

from scribe.config import Settings
from scribe.core.models import UserIdentity
from scribe.core.utils import utc_now

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class SigningConfig:
    """Everything the codec needs, fixed at startup."""
    secret_key: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=1)
    remember_ttl: timedelta = timedelta(days=30)

    def __post_init__(self):
        if not self.secret_key:
            raise ValueError("Signing secret must not be empty")
        if self.access_ttl <= timedelta(0) or self.remember_ttl <= timedelta(0):
            raise ValueError("Token lifetimes must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> SigningConfig:
        return cls(
            secret_key=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(minutes=settings.jwt_access_token_expire_minutes),
            remember_ttl=timedelta(days=settings.jwt_remember_me_expire_days),
        )


@dataclass(frozen=True)
class IssuedToken:
    """A freshly signed token and the window it is valid for."""
    token: str
    issued_at: datetime
    expires_at: datetime


# =============================================================================
# Token Errors
# =============================================================================

class TokenError(Exception):
    """Base exception for token errors."""
    pass


class InvalidSignature(TokenError):
    """Signature does not match the signing key."""
    pass


class Expired(TokenError):
    """Token is past its expiry."""
    pass


class Malformed(TokenError):
    """Token cannot be parsed or is missing claims."""
    pass


# =============================================================================
# Codec
# =============================================================================

class TokenCodec:
    """
    Encode identities into bearer tokens and back.

    The codec is stateless apart from its signing config, so one instance
    is shared by every request.
    """

    def __init__(
        self,
        signing: SigningConfig,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.signing = signing
        self._clock = clock

    def issue(
        self,
        identity: UserIdentity,
        ttl: timedelta | None = None,
        remember: bool = False,
    ) -> IssuedToken:
        """
        Sign a token for this identity.

        Args:
            identity: Embedded as-is; its admin flag is trusted until expiry
            ttl: Explicit lifetime; defaults to the access (or remember-me) TTL
            remember: Use the long-lived remember-me lifetime

        Returns:
            IssuedToken with whole-second issued_at/expires_at
        """
        if ttl is None:
            ttl = self.signing.remember_ttl if remember else self.signing.access_ttl
        if ttl <= timedelta(0):
            raise ValueError("Token lifetime must be positive")

        issued_at = self._clock().replace(microsecond=0)
        iat = int(issued_at.timestamp())
        exp = int((issued_at + ttl).timestamp())

        payload = {
            "sub": str(identity.id),
            "username": identity.username,
            "admin": identity.admin,
            "iat": iat,
            "exp": exp,
        }
        token = jwt.encode(payload, self.signing.secret_key, algorithm=self.signing.algorithm)

        return IssuedToken(
            token=token,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )

    def verify(self, token: str) -> UserIdentity:
        """
        Validate a token and return the identity it carries.

        Raises:
            InvalidSignature: Signature does not verify
            Expired: Current time is at or past exp
            Malformed: Anything else wrong with the token
        """
        try:
            payload = jwt.decode(
                token,
                self.signing.secret_key,
                algorithms=[self.signing.algorithm],
                # Expiry is checked below against the injected clock.
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["sub", "exp", "iat"],
                },
            )
        except jwt.InvalidSignatureError:
            raise InvalidSignature("Token signature does not verify")
        except jwt.InvalidTokenError as e:
            raise Malformed(f"Invalid token: {e}")

        identity, exp = _parse_claims(payload)

        if self._clock().timestamp() >= exp:
            raise Expired("Token has expired")

        return identity


def _parse_claims(payload: dict[str, Any]) -> tuple[UserIdentity, int]:
    username = payload.get("username")
    admin = payload.get("admin", False)
    exp = payload.get("exp")

    if not isinstance(username, str) or not username:
        raise Malformed("Token is missing username")
    if not isinstance(admin, bool):
        raise Malformed("Token admin claim must be a boolean")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise Malformed("Token exp claim must be numeric")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Malformed("Token subject is not a user id")

    return UserIdentity(id=user_id, username=username, admin=admin), int(exp)
