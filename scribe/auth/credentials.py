"""
Password hashing and credential verification.

Hashes are "salt:hash" strings produced by PBKDF2-SHA256. Verification
answers with one generic error so callers cannot discover which usernames
exist.
"""

from __future__ import annotations

import hashlib
import logging
import secrets

from scribe.core.errors import InvalidCredentials, ValidationFailure
from scribe.core.models import UserIdentity, UserRecord
from scribe.storage.base import CredentialStore

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 100_000


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password using PBKDF2-SHA256.

    Returns: salt:hash format string
    """
    if not password:
        raise ValueError("Password must not be empty")
    salt = secrets.token_hex(32)
    hash_bytes = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        iterations=PBKDF2_ITERATIONS,
    )
    return f"{salt}:{hash_bytes.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash in constant time."""
    try:
        salt, stored_hash = password_hash.split(':')
        hash_bytes = hashlib.pbkdf2_hmac(
            'sha256',
            password.encode('utf-8'),
            salt.encode('utf-8'),
            iterations=PBKDF2_ITERATIONS,
        )
        return secrets.compare_digest(hash_bytes.hex(), stored_hash)
    except (ValueError, AttributeError):
        return False


# Burned on unknown identifiers so both failure paths cost one hash.
_DUMMY_HASH = hash_password(secrets.token_hex(16))


# =============================================================================
# Credential Verification
# =============================================================================

async def verify_credentials(
    store: CredentialStore,
    identifier: str,
    password: str,
) -> UserIdentity:
    """
    Check a username-or-email and password.

    Raises:
        InvalidCredentials: Unknown identifier or wrong password, indistinguishably
    """
    user = await store.get_by_identifier(identifier)

    if user is None:
        verify_password(password, _DUMMY_HASH)
        logger.info("Login failed: unknown identifier")
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        logger.info(f"Login failed for user {user.id}: wrong password")
        raise InvalidCredentials()

    return user.identity()


# =============================================================================
# Registration
# =============================================================================

async def register_user(
    store: CredentialStore,
    username: str,
    password: str,
    email: str | None = None,
    admin: bool = False,
) -> UserRecord:
    """
    Create an account with a freshly salted password hash.

    Raises:
        ValidationFailure: Blank username/password, or username/email taken
    """
    username = username.strip()
    if not username:
        raise ValidationFailure("Username must not be empty")
    if not password:
        raise ValidationFailure("Password must not be empty")

    normalized_email = email.strip().lower() if email else None

    user = await store.create_user(
        username=username,
        email=normalized_email,
        password_hash=hash_password(password),
        admin=admin,
    )
    logger.info(f"Registered user {user.id} ({'admin' if user.admin else 'user'})")
    return user
