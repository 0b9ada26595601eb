"""
Authorization system.

Design principles:
1. Tokens are stateless: the identity they carry is trusted until expiry
2. One pure decision function for every action
3. Handlers resolve the caller explicitly via a dependency
"""

from scribe.auth.capabilities import Action, Role
from scribe.auth.credentials import (
    hash_password,
    register_user,
    verify_credentials,
    verify_password,
)
from scribe.auth.jwt import (
    Expired,
    InvalidSignature,
    IssuedToken,
    Malformed,
    SigningConfig,
    TokenCodec,
    TokenError,
)
from scribe.auth.policies import (
    ALLOW,
    Decision,
    DenyReason,
    decide,
    get_identity,
    parse_bearer,
    resolve_identity,
)
from scribe.auth.routes import router as auth_router

__all__ = [
    # Policy engine
    "Action",
    "Role",
    "ALLOW",
    "Decision",
    "DenyReason",
    "decide",
    "get_identity",
    "parse_bearer",
    "resolve_identity",
    # Tokens
    "Expired",
    "InvalidSignature",
    "IssuedToken",
    "Malformed",
    "SigningConfig",
    "TokenCodec",
    "TokenError",
    # Credentials
    "hash_password",
    "register_user",
    "verify_credentials",
    "verify_password",
    # Router
    "auth_router",
]
