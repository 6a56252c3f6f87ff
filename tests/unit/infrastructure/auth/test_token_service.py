"""Unit tests for TokenService issue/validate/refresh."""

import json
import os
from datetime import timedelta

import pytest

from todoapi.core.config import Settings
from todoapi.infrastructure.auth import (
    FileCredentialStore,
    IdentityVanishedError,
    RefreshNotAllowedError,
    TokenInvalidError,
    TokenInvalidReason,
    TokenService,
)

HOUR = 60 * 60


class TestIssue:
    """Tests for TokenService.issue."""

    def test_issue_claims(self, token_service, store, clock):
        token = token_service.issue(store.find_by_username("alice"))
        claims = token_service.validate(token)
        now = int(clock().timestamp())

        assert claims.sub == "alice"
        assert claims.iat == now
        assert claims.exp == now + 5 * HOUR
        assert claims.orig_iat == now
        assert claims.roles == ["ROLE_USER_2"]

    def test_expires_in(self, token_service):
        assert token_service.expires_in == 5 * HOUR

    def test_non_positive_lifetime_rejected(self, codec, store):
        with pytest.raises(ValueError):
            TokenService(codec, store, lifetime=timedelta(0))

    def test_from_settings(self, store, clock):
        settings = Settings(
            secret_key="test-secret-key-that-is-at-least-32-bytes-long",
            token_lifetime_seconds=600,
            refresh_grace_seconds=60,
            refresh_max_age_seconds=3600,
        )
        service = TokenService.from_settings(settings, store, clock=clock)

        assert service.lifetime == timedelta(seconds=600)
        assert service.refresh_grace == timedelta(seconds=60)
        assert service.refresh_max_age == timedelta(seconds=3600)
        assert service.codec.now() == int(clock().timestamp())


class TestValidate:
    """Tests for TokenService.validate."""

    def test_valid_token(self, token_service, store):
        token = token_service.issue(store.find_by_username("alice"))

        assert token_service.validate(token).username == "alice"

    def test_expired_token(self, token_service, store, clock):
        token = token_service.issue(store.find_by_username("alice"))
        clock.advance(hours=5)

        with pytest.raises(TokenInvalidError) as exc_info:
            token_service.validate(token)
        assert exc_info.value.reason is TokenInvalidReason.EXPIRED

    def test_garbage_token(self, token_service):
        with pytest.raises(TokenInvalidError) as exc_info:
            token_service.validate("garbage")
        assert exc_info.value.reason is TokenInvalidReason.MALFORMED_STRUCTURE

    def test_unknown_subject(self, token_service, codec):
        token = codec.encode("mallory", timedelta(hours=1))

        with pytest.raises(IdentityVanishedError) as exc_info:
            token_service.validate(token)
        assert exc_info.value.username == "mallory"


class TestRefresh:
    """Tests for TokenService.can_refresh and refresh."""

    def test_alice_scenario(self, token_service, store, clock):
        """Log in, let the token expire, refresh it inside the grace period."""
        token = token_service.issue(store.find_by_username("alice"))
        original_exp = token_service.validate(token).exp

        clock.advance(hours=5, seconds=1)
        with pytest.raises(TokenInvalidError) as exc_info:
            token_service.validate(token)
        assert exc_info.value.reason is TokenInvalidReason.EXPIRED

        assert token_service.can_refresh(token) is True
        refreshed = token_service.refresh(token)
        claims = token_service.validate(refreshed)

        assert claims.sub == "alice"
        assert claims.exp > original_exp

    def test_refresh_keeps_session_start(self, token_service, store, clock):
        token = token_service.issue(store.find_by_username("alice"))
        started = int(clock().timestamp())

        clock.advance(hours=1)
        refreshed = token_service.refresh(token)
        claims = token_service.validate(refreshed)

        assert claims.orig_iat == started
        assert claims.iat == started + HOUR

    def test_refresh_right_after_issue_extends_expiry(self, token_service, store):
        token = token_service.issue(store.find_by_username("alice"))
        original_exp = token_service.validate(token).exp

        refreshed = token_service.refresh(token)

        assert token_service.validate(refreshed).exp == original_exp + 1

    def test_grace_period_boundary(self, token_service, store, clock):
        token = token_service.issue(store.find_by_username("alice"))

        clock.advance(hours=6, seconds=-1)
        assert token_service.can_refresh(token) is True

        clock.advance(seconds=1)
        assert token_service.can_refresh(token) is False
        with pytest.raises(RefreshNotAllowedError):
            token_service.refresh(token)

    def test_refresh_chain_is_bounded(self, codec, store, clock):
        service = TokenService(
            codec,
            store,
            lifetime=timedelta(hours=1),
            refresh_grace=timedelta(hours=1),
            refresh_max_age=timedelta(hours=2),
        )
        token = service.issue(store.find_by_username("alice"))

        clock.advance(minutes=90)
        token = service.refresh(token)

        clock.advance(minutes=31)
        assert service.validate(token).sub == "alice"
        assert service.can_refresh(token) is False

    @pytest.mark.parametrize("token", ["", "garbage", "invalid.token.here"])
    def test_bad_tokens_are_not_refreshable(self, token_service, token):
        assert token_service.can_refresh(token) is False
        with pytest.raises(RefreshNotAllowedError):
            token_service.refresh(token)

    def test_tampered_token_is_not_refreshable(self, token_service, store):
        token = token_service.issue(store.find_by_username("alice"))
        tampered = token[:-3] + ("AAA" if not token.endswith("AAA") else "BBB")

        assert token_service.can_refresh(tampered) is False

    def test_not_yet_valid_token_is_not_refreshable(self, token_service, codec, clock):
        token = codec.encode(
            "alice", timedelta(hours=1), issued_at=int(clock().timestamp()) + 60
        )

        assert token_service.can_refresh(token) is False


class TestVanishedIdentity:
    """A validly signed token whose subject has been removed from the store."""

    @pytest.fixture
    def users_file(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text(
            json.dumps(
                [
                    {"id": 1, "username": "alice", "password": "secret"},
                    {"id": 2, "username": "carol", "password": "secret"},
                ]
            ),
            encoding="utf-8",
        )
        return path

    def _remove_alice(self, path):
        path.write_text(
            json.dumps([{"id": 2, "username": "carol", "password": "secret"}]),
            encoding="utf-8",
        )
        mtime = path.stat().st_mtime + 10
        os.utime(path, (mtime, mtime))

    def test_validate_after_removal(self, codec, users_file):
        store = FileCredentialStore(users_file)
        service = TokenService(codec, store)
        token = service.issue(store.find_by_username("alice"))

        self._remove_alice(users_file)

        with pytest.raises(IdentityVanishedError):
            service.validate(token)

    def test_refresh_after_removal(self, codec, users_file):
        store = FileCredentialStore(users_file)
        service = TokenService(codec, store)
        token = service.issue(store.find_by_username("alice"))

        self._remove_alice(users_file)

        assert service.can_refresh(token) is True
        with pytest.raises(IdentityVanishedError):
            service.refresh(token)
