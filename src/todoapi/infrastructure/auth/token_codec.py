"""JWT codec.

Encodes claims into standard compact JWTs (``header.payload.signature``)
signed with a symmetric HMAC algorithm, and decodes them back with full
signature, structure and time validation. Signing and HMAC verification use
PyJWT's algorithms; time checks are done here against an injectable clock so that
callers can decode a token as of any instant.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Mapping

import jwt
from jwt.algorithms import get_default_algorithms
from jwt.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from todoapi.infrastructure.auth.token_types import (
    TokenClaims,
    TokenInvalidError,
    TokenInvalidReason,
)

Clock = Callable[[], datetime]

_SEGMENT = re.compile(r"[A-Za-z0-9_-]+")

# Claims the codec owns; callers cannot override them through extension claims.
_REGISTERED = frozenset({"sub", "iat", "exp"})


def utc_now() -> datetime:
    """Current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


class TokenCodec:
    """Encode and decode HMAC-signed JWTs."""

    SUPPORTED_ALGORITHMS = ("HS256", "HS384", "HS512")

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        leeway: timedelta = timedelta(0),
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the codec.

        Args:
            secret: Process-wide signing secret.
            algorithm: HMAC algorithm name.
            leeway: Clock skew tolerated on every time check.
            clock: Source of the current time.
        """
        if not secret:
            raise ValueError("Signing secret must not be empty")
        if algorithm not in self.SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported algorithm: {algorithm}")
        self._secret = secret
        self._hmac = get_default_algorithms()[algorithm]
        self._key = self._hmac.prepare_key(secret)
        self.algorithm = algorithm
        self.leeway = int(leeway.total_seconds())
        self.clock = clock

    def now(self) -> int:
        """Current time as a Unix timestamp, per the codec's clock."""
        return int(self.clock().timestamp())

    def encode(
        self,
        subject: str,
        ttl: timedelta,
        claims: Mapping[str, Any] | None = None,
        issued_at: int | None = None,
    ) -> str:
        """Build a signed token.

        Args:
            subject: Value of the ``sub`` claim.
            ttl: Time from issuance to expiry; zero yields an already expired token.
            claims: Extension claims, e.g. ``roles``.
            issued_at: Override for ``iat``; defaults to now.

        Returns:
            Compact JWT string.
        """
        if not subject:
            raise ValueError("Token subject must not be empty")
        if ttl < timedelta(0):
            raise ValueError("Token lifetime must not be negative")

        iat = self.now() if issued_at is None else issued_at
        payload: dict[str, Any] = {
            k: v for k, v in (claims or {}).items() if k not in _REGISTERED
        }
        payload.update(sub=subject, iat=iat, exp=iat + int(ttl.total_seconds()))
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode(self, token: str, verify_expiry: bool = True) -> TokenClaims:
        """Verify a token and return its claims.

        Only the segment count and the header are treated as structure. Once
        the header parses, the HMAC over ``header.payload`` is checked before
        the payload is decoded, so any alteration of the payload or signature
        is reported as a signature mismatch.

        Args:
            token: Compact JWT string.
            verify_expiry: When False an expired token still decodes; signature,
                structure and not-before checks always apply.

        Returns:
            TokenClaims: The verified claims.

        Raises:
            TokenInvalidError: With the reason the token was rejected.
        """
        segments = token.split(".") if isinstance(token, str) else []
        if len(segments) < 3:
            raise TokenInvalidError(
                TokenInvalidReason.MALFORMED_STRUCTURE, "Token must have three segments"
            )

        # A '.' inside the signed region moves the boundary; the header stays
        # first and the signature last.
        self._check_header(segments[0])
        self._verify_signature(".".join(segments[:-1]), segments[-1])

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenInvalidError(
                TokenInvalidReason.SIGNATURE_MISMATCH, "Token signature does not verify"
            ) from e
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(
                TokenInvalidReason.MALFORMED_STRUCTURE, f"Token is malformed: {e}"
            ) from e

        try:
            claims = TokenClaims(**payload)
        except (TypeError, ValidationError) as e:
            raise TokenInvalidError(
                TokenInvalidReason.MALFORMED_STRUCTURE, "Token claims are malformed"
            ) from e

        self._check_times(claims, verify_expiry)
        return claims

    def _check_header(self, segment: str) -> None:
        if not _SEGMENT.fullmatch(segment):
            raise TokenInvalidError(
                TokenInvalidReason.MALFORMED_STRUCTURE, "Token header is not base64url"
            )
        try:
            header = json.loads(base64url_decode(segment))
        except ValueError as e:
            raise TokenInvalidError(
                TokenInvalidReason.MALFORMED_STRUCTURE, "Token header is not valid JSON"
            ) from e
        if not isinstance(header, dict) or header.get("alg") != self.algorithm:
            raise TokenInvalidError(
                TokenInvalidReason.MALFORMED_STRUCTURE,
                f"Token header does not declare {self.algorithm}",
            )

    def _verify_signature(self, signing_input: str, signature: str) -> None:
        mismatch = TokenInvalidError(
            TokenInvalidReason.SIGNATURE_MISMATCH, "Token signature does not verify"
        )
        if not _SEGMENT.fullmatch(signature):
            raise mismatch
        try:
            message = signing_input.encode("utf-8")
            digest = base64url_decode(signature)
        except ValueError as e:
            raise mismatch from e
        # Alternative spellings of the same signature bytes are refused too
        if base64url_encode(digest).decode("ascii") != signature:
            raise mismatch
        if not self._hmac.verify(message, self._key, digest):
            raise mismatch

    def _check_times(self, claims: TokenClaims, verify_expiry: bool) -> None:
        now = self.now()
        if claims.nbf is not None and claims.nbf > now + self.leeway:
            raise TokenInvalidError(TokenInvalidReason.NOT_YET_VALID, "Token is not yet valid")
        if claims.iat > now + self.leeway:
            raise TokenInvalidError(TokenInvalidReason.NOT_YET_VALID, "Token was issued in the future")
        if verify_expiry and now >= claims.exp + self.leeway:
            raise TokenInvalidError(TokenInvalidReason.EXPIRED, "Token has expired")
