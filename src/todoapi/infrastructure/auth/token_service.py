"""Token lifecycle: issue, validate and refresh.

A token moves through ``Issued -> Valid -> Expired``. An expired token may
still be exchanged for a fresh one while it is inside the refresh grace
period and its refresh chain (started at login, tracked by ``orig_iat``) is
younger than the maximum refresh age. Past that it can only be rejected.
Nothing is stored server side: every decision is made from the token, the
secret and the clock.
"""

from datetime import timedelta

from todoapi.core.config import Settings
from todoapi.core.logging import get_logger
from todoapi.domain.entities import Identity
from todoapi.infrastructure.auth.credential_store import CredentialStore
from todoapi.infrastructure.auth.token_codec import Clock, TokenCodec, utc_now
from todoapi.infrastructure.auth.token_types import (
    IdentityVanishedError,
    RefreshNotAllowedError,
    TokenClaims,
    TokenInvalidError,
)

logger = get_logger(__name__)


class TokenService:
    """Issues and checks tokens for identities of one credential store."""

    def __init__(
        self,
        codec: TokenCodec,
        store: CredentialStore,
        lifetime: timedelta = timedelta(hours=5),
        refresh_grace: timedelta = timedelta(hours=1),
        refresh_max_age: timedelta = timedelta(days=7),
    ) -> None:
        """Initialize the token service.

        Args:
            codec: Codec holding the signing secret and clock.
            store: Store used to re-resolve token subjects.
            lifetime: Validity period of every issued token.
            refresh_grace: How long after expiry a token may still be refreshed.
            refresh_max_age: How long after the original login refreshing stays possible.
        """
        if lifetime <= timedelta(0):
            raise ValueError("Token lifetime must be positive")
        self.codec = codec
        self.store = store
        self.lifetime = lifetime
        self.refresh_grace = refresh_grace
        self.refresh_max_age = refresh_max_age

    @classmethod
    def from_settings(
        cls, settings: Settings, store: CredentialStore, clock: Clock = utc_now
    ) -> "TokenService":
        codec = TokenCodec(
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
            leeway=timedelta(seconds=settings.token_leeway_seconds),
            clock=clock,
        )
        return cls(
            codec,
            store,
            lifetime=timedelta(seconds=settings.token_lifetime_seconds),
            refresh_grace=timedelta(seconds=settings.refresh_grace_seconds),
            refresh_max_age=timedelta(seconds=settings.refresh_max_age_seconds),
        )

    @property
    def expires_in(self) -> int:
        """Lifetime of an issued token in seconds."""
        return int(self.lifetime.total_seconds())

    def issue(self, identity: Identity) -> str:
        """Create a token for an authenticated identity.

        The token starts a new refresh chain.

        Args:
            identity: The verified identity.

        Returns:
            Encoded token.
        """
        now = self.codec.now()
        token = self.codec.encode(
            identity.username,
            self.lifetime,
            claims={"roles": sorted(identity.roles), "orig_iat": now},
            issued_at=now,
        )
        logger.info("Token issued", username=identity.username, expires_in=self.expires_in)
        return token

    def validate(self, token: str) -> TokenClaims:
        """Verify a presented token and that its subject still exists.

        Raises:
            TokenInvalidError: Signature, structure or time checks failed.
            IdentityVanishedError: The subject is no longer in the store.
        """
        claims = self.codec.decode(token)
        if self.store.find_by_username(claims.sub) is None:
            logger.info("Token rejected: subject vanished", username=claims.sub)
            raise IdentityVanishedError(claims.sub)
        return claims

    def _refreshable_claims(self, token: str) -> TokenClaims | None:
        try:
            claims = self.codec.decode(token, verify_expiry=False)
        except TokenInvalidError as e:
            logger.debug("Token not refreshable", reason=e.reason.value)
            return None

        now = self.codec.now()
        grace = int(self.refresh_grace.total_seconds())
        max_age = int(self.refresh_max_age.total_seconds())
        if now >= claims.exp + grace:
            logger.debug("Token not refreshable: past grace period", username=claims.sub)
            return None
        if now - claims.session_started_at > max_age:
            logger.debug("Token not refreshable: refresh chain too old", username=claims.sub)
            return None
        return claims

    def can_refresh(self, token: str) -> bool:
        """Whether ``token`` may be exchanged for a new one right now.

        Never raises for bad tokens; they are simply not refreshable.
        """
        return self._refreshable_claims(token) is not None

    def refresh(self, token: str) -> str:
        """Exchange a refreshable token for a new one for the same subject.

        The new token always expires strictly later than the one it replaces.

        Raises:
            RefreshNotAllowedError: ``can_refresh`` is False for the token.
            IdentityVanishedError: The subject is no longer in the store.
        """
        claims = self._refreshable_claims(token)
        if claims is None:
            raise RefreshNotAllowedError()

        identity = self.store.find_by_username(claims.sub)
        if identity is None:
            logger.info("Refresh rejected: subject vanished", username=claims.sub)
            raise IdentityVanishedError(claims.sub)

        now = self.codec.now()
        lifetime = self.lifetime
        if now + self.expires_in <= claims.exp:
            lifetime = timedelta(seconds=claims.exp + 1 - now)

        refreshed = self.codec.encode(
            identity.username,
            lifetime,
            claims={"roles": sorted(identity.roles), "orig_iat": claims.session_started_at},
            issued_at=now,
        )
        logger.info("Token refreshed", username=identity.username)
        return refreshed
