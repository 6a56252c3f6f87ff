"""Password hashing utility using Argon2.

Provides salted, deliberately slow password hashing and verification using
the Argon2id algorithm. Verification is cheap for a single candidate and
expensive to brute force.
"""

import secrets

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from todoapi.core.logging import get_logger

logger = get_logger(__name__)

# Create a password hasher with secure defaults
_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Args:
        password: The plaintext password to hash.

    Returns:
        The hashed password string.

    Example:
        >>> hashed = hash_password("secret")
        >>> hashed.startswith("$argon2id$")
        True
    """
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a hash.

    A stored hash that cannot be parsed never verifies.

    Args:
        password: The plaintext password to verify.
        hashed: The hashed password to verify against.

    Returns:
        True if the password matches, False otherwise.
    """
    try:
        return _hasher.verify(hashed, password)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        logger.warning("Stored password hash could not be verified")
        return False


def needs_rehash(hashed: str) -> bool:
    """Check if a password hash was made with outdated parameters.

    Args:
        hashed: The hashed password to check.

    Returns:
        True if the hash should be updated, False otherwise.
    """
    return _hasher.check_needs_rehash(hashed)


def generate_random_password() -> str:
    """Generate a URL-safe random password of at least 32 characters."""
    return secrets.token_urlsafe(32)


# Verified against when a username is unknown, so that a login for a
# missing user costs as much as one with a wrong password.
DUMMY_PASSWORD_HASH = hash_password(generate_random_password())
