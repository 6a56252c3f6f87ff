"""Authentication infrastructure components.

This module provides password hashing, credential stores, the JWT codec,
token lifecycle management and the rejection entry point.
"""

from todoapi.infrastructure.auth.authenticator import (
    AuthenticationFailure,
    AuthenticationOutcome,
    Authenticator,
    FailureReason,
)
from todoapi.infrastructure.auth.credential_store import (
    CredentialStore,
    CredentialStoreError,
    FileCredentialStore,
    StaticCredentialStore,
    build_credential_store,
)
from todoapi.infrastructure.auth.entry_point import RejectionSignal, UnauthorizedEntryPoint
from todoapi.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    hash_password,
    needs_rehash,
    verify_password,
)
from todoapi.infrastructure.auth.token_codec import TokenCodec
from todoapi.infrastructure.auth.token_service import TokenService
from todoapi.infrastructure.auth.token_types import (
    AuthError,
    IdentityVanishedError,
    RefreshNotAllowedError,
    TokenClaims,
    TokenError,
    TokenInvalidError,
    TokenInvalidReason,
)

__all__ = [
    "AuthError",
    "AuthenticationFailure",
    "AuthenticationOutcome",
    "Authenticator",
    "CredentialStore",
    "CredentialStoreError",
    "DUMMY_PASSWORD_HASH",
    "FailureReason",
    "FileCredentialStore",
    "IdentityVanishedError",
    "RefreshNotAllowedError",
    "RejectionSignal",
    "StaticCredentialStore",
    "TokenClaims",
    "TokenCodec",
    "TokenError",
    "TokenInvalidError",
    "TokenInvalidReason",
    "TokenService",
    "UnauthorizedEntryPoint",
    "build_credential_store",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
