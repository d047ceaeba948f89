"""
One-way hashing for login passwords.

Unlike stored API keys, login passwords must never be recoverable: they are
hashed with Argon2id (salted, memory-hard) and only ever verified.
"""

import secrets
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..config import SecurityConfig, get_config
from ..exceptions import ErrorCode, ServiceError
from .logger import get_logger

_hasher: Optional[PasswordHasher] = None
_placeholder_hash: Optional[str] = None


def build_password_hasher(security: SecurityConfig) -> PasswordHasher:
    """Create an Argon2id hasher using the configured cost parameters."""
    return PasswordHasher(
        time_cost=security.password_time_cost,
        memory_cost=security.password_memory_cost,
        parallelism=security.password_parallelism,
        hash_len=32,
        salt_len=16,
    )


def get_password_hasher() -> PasswordHasher:
    """Return the process-wide hasher, building it from config on first use."""
    global _hasher
    if _hasher is None:
        _hasher = build_password_hasher(get_config().security)
    return _hasher


def reset_password_hasher() -> None:
    """Drop the cached hasher so the next call picks up new config."""
    global _hasher, _placeholder_hash
    _hasher = None
    _placeholder_hash = None


def placeholder_password_hash() -> str:
    """
    A valid hash of a random password, made with the current parameters.

    Verifying against it costs the same as verifying against a real user's
    hash and never succeeds.
    """
    global _placeholder_hash
    if _placeholder_hash is None:
        _placeholder_hash = hash_password(secrets.token_urlsafe(32))
    return _placeholder_hash


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: The password to hash

    Returns:
        Encoded hash string (parameters, salt and digest)

    Raises:
        ServiceError: If hashing fails
    """
    try:
        return get_password_hasher().hash(password)
    except Exception as e:
        raise ServiceError(
            "Failed to hash password",
            error_code=ErrorCode.CRYPTO_ERROR,
            operation="hash_password",
            error_type=type(e).__name__,
        ) from None


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against its hash.

    Args:
        password: The candidate password
        password_hash: Hash produced by hash_password()

    Returns:
        True if the password matches, False otherwise (including malformed hashes)
    """
    try:
        return get_password_hasher().verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except (VerificationError, InvalidHashError) as e:
        get_logger().warning(
            "Password hash could not be verified", extra={"error_type": type(e).__name__}
        )
        return False


def password_needs_rehash(password_hash: str) -> bool:
    """Return True if the hash was made with parameters other than the current ones."""
    try:
        return get_password_hasher().check_needs_rehash(password_hash)
    except InvalidHashError:
        return True
