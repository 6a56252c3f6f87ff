"""Username/password authentication.

Resolves a submitted credential against the credential store and the
password hasher. The outcome is available either as an explicit
``AuthenticationOutcome`` value (``Authenticator.verify``) or as an
identity-or-exception (``Authenticator.authenticate``).

Unknown users and wrong passwords produce the same failure, and an unknown
user still pays for one password verification, so neither the response nor
its timing tells a caller which usernames exist. A disabled account is only
reported as such once the correct password has been given.
"""

from dataclasses import dataclass
from enum import Enum

from todoapi.core.logging import get_logger
from todoapi.domain.entities import Credential, Identity
from todoapi.infrastructure.auth.credential_store import CredentialStore
from todoapi.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    needs_rehash,
    verify_password,
)
from todoapi.infrastructure.auth.token_types import AuthError

logger = get_logger(__name__)


class FailureReason(str, Enum):
    """Why a credential was not accepted."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_DISABLED = "USER_DISABLED"


class AuthenticationFailure(AuthError):
    """Raised when a credential does not resolve to an enabled identity."""

    def __init__(self, reason: FailureReason) -> None:
        self.reason = reason
        super().__init__(reason.value)


@dataclass(frozen=True)
class AuthenticationOutcome:
    """Result of verifying a credential.

    Exactly one of ``identity`` and ``reason`` is set. ``unknown_user`` is
    for logging only and must not be exposed to clients.
    """

    identity: Identity | None = None
    reason: FailureReason | None = None
    unknown_user: bool = False

    @property
    def ok(self) -> bool:
        return self.identity is not None

    def unwrap(self) -> Identity:
        """Return the identity or raise the failure."""
        if self.identity is None:
            raise AuthenticationFailure(self.reason or FailureReason.INVALID_CREDENTIALS)
        return self.identity


class Authenticator:
    """Checks credentials against one credential store."""

    def __init__(self, store: CredentialStore) -> None:
        self.store = store

    def verify(self, username: str | None, password: str | None) -> AuthenticationOutcome:
        """Verify a credential without raising.

        Args:
            username: Submitted username.
            password: Submitted plaintext password.

        Returns:
            AuthenticationOutcome: The identity, or the reason it was refused.
        """
        credential = Credential(username, password)
        if not credential.is_complete:
            logger.info("Login refused: missing credential fields")
            return AuthenticationOutcome(reason=FailureReason.INVALID_INPUT)

        identity = self.store.find_by_username(credential.username)
        if identity is None:
            verify_password(credential.password, DUMMY_PASSWORD_HASH)
            logger.info("Login refused: unknown user", username=credential.username)
            return AuthenticationOutcome(
                reason=FailureReason.INVALID_CREDENTIALS, unknown_user=True
            )

        if not verify_password(credential.password, identity.password_hash):
            logger.info("Login refused: bad password", username=identity.username)
            return AuthenticationOutcome(reason=FailureReason.INVALID_CREDENTIALS)

        if not identity.enabled:
            logger.info("Login refused: account disabled", username=identity.username)
            return AuthenticationOutcome(reason=FailureReason.ACCOUNT_DISABLED)

        if needs_rehash(identity.password_hash):
            logger.warning("Stored password hash uses outdated parameters", username=identity.username)
        logger.info("Login accepted", username=identity.username)
        return AuthenticationOutcome(identity=identity)

    def authenticate(self, username: str | None, password: str | None) -> Identity:
        """Verify a credential and return the identity.

        Raises:
            AuthenticationFailure: With the reason the credential was refused.
        """
        return self.verify(username, password).unwrap()
