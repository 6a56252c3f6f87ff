"""Unit tests for password hashing utilities."""

from todoapi.infrastructure.auth.password_hasher import (
    DUMMY_PASSWORD_HASH,
    generate_random_password,
    hash_password,
    needs_rehash,
    verify_password,
)


class TestHashPassword:
    """Tests for hash_password function."""

    def test_hash_password_returns_argon2_hash(self):
        hashed = hash_password("secret")

        assert hashed.startswith("$argon2id$")
        assert "secret" not in hashed

    def test_hash_password_different_for_same_input(self):
        """Hashing the same password twice produces different hashes (due to salt)."""
        assert hash_password("secret") != hash_password("secret")


class TestVerifyPassword:
    """Tests for verify_password function."""

    def test_verify_password_correct(self):
        hashed = hash_password("secret")

        assert verify_password("secret", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("secret")

        assert verify_password("secretx", hashed) is False

    def test_verify_password_case_sensitive(self):
        hashed = hash_password("Secret")

        assert verify_password("secret", hashed) is False

    def test_verify_password_malformed_hash(self):
        """A hash that cannot be parsed never verifies."""
        assert verify_password("secret", "not-a-hash") is False
        assert verify_password("secret", "$2a$10$abcdefghijklmnopqrstuv") is False


class TestHelpers:
    """Tests for the remaining helpers."""

    def test_fresh_hash_does_not_need_rehash(self):
        assert needs_rehash(hash_password("secret")) is False

    def test_random_password_is_long_and_unique(self):
        first = generate_random_password()

        assert len(first) >= 32
        assert first != generate_random_password()

    def test_dummy_hash_is_a_valid_hash(self):
        assert DUMMY_PASSWORD_HASH.startswith("$argon2id$")
        assert verify_password("secret", DUMMY_PASSWORD_HASH) is False
