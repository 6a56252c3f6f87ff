"""Unit tests for the credential stores."""

import json
import os

import pytest

from todoapi.core.config import SeedUser, Settings
from todoapi.domain.entities import Identity
from todoapi.infrastructure.auth import (
    CredentialStoreError,
    FileCredentialStore,
    StaticCredentialStore,
    build_credential_store,
    hash_password,
    verify_password,
)


def _write_users(path, users):
    path.write_text(json.dumps(users), encoding="utf-8")


def _bump_mtime(path, seconds=10):
    """Move the file's modification time forward so the store notices the change."""
    mtime = path.stat().st_mtime + seconds
    os.utime(path, (mtime, mtime))


class TestStaticCredentialStore:
    """Tests for StaticCredentialStore."""

    def test_find_by_username(self, store):
        identity = store.find_by_username("alice")

        assert identity is not None
        assert identity.id == 1
        assert identity.roles == frozenset({"ROLE_USER_2"})

    def test_lookup_is_case_sensitive(self, store):
        assert store.find_by_username("Alice") is None
        assert store.find_by_username("ALICE") is None

    def test_unknown_user(self, store):
        assert store.find_by_username("mallory") is None

    def test_plaintext_seed_password_is_hashed(self, store):
        identity = store.find_by_username("alice")

        assert identity.password_hash != "secret"
        assert verify_password("secret", identity.password_hash)

    def test_seed_hash_is_used_as_is(self):
        hashed = hash_password("secret")
        store = StaticCredentialStore.from_seed(
            [SeedUser(id=1, username="alice", password_hash=hashed)]
        )

        assert store.find_by_username("alice").password_hash == hashed

    def test_duplicate_usernames_rejected(self):
        identities = [
            Identity(id=1, username="alice", password_hash="h1"),
            Identity(id=2, username="alice", password_hash="h2"),
        ]

        with pytest.raises(CredentialStoreError, match="Duplicate"):
            StaticCredentialStore(identities)

    def test_len(self, store):
        assert len(store) == 3


class TestFileCredentialStore:
    """Tests for FileCredentialStore."""

    def test_loads_users(self, tmp_path):
        path = tmp_path / "users.json"
        _write_users(path, [{"id": 1, "username": "alice", "password": "secret"}])

        store = FileCredentialStore(path)

        assert store.path == path
        assert len(store) == 1
        assert store.find_by_username("alice").username == "alice"

    def test_missing_file_fails_at_startup(self, tmp_path):
        with pytest.raises(CredentialStoreError):
            FileCredentialStore(tmp_path / "missing.json")

    def test_invalid_file_fails_at_startup(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text("not json", encoding="utf-8")

        with pytest.raises(CredentialStoreError):
            FileCredentialStore(path)

    def test_reloads_when_file_changes(self, tmp_path):
        path = tmp_path / "users.json"
        _write_users(
            path,
            [
                {"id": 1, "username": "alice", "password": "secret"},
                {"id": 2, "username": "carol", "password": "secret"},
            ],
        )
        store = FileCredentialStore(path)

        _write_users(path, [{"id": 2, "username": "carol", "password": "secret"}])
        _bump_mtime(path)

        assert store.find_by_username("alice") is None
        assert store.find_by_username("carol") is not None

    def test_reloads_when_rewritten_within_one_mtime_tick(self, tmp_path):
        path = tmp_path / "users.json"
        _write_users(
            path,
            [
                {"id": 1, "username": "alice", "password": "secret"},
                {"id": 2, "username": "carol", "password": "secret"},
            ],
        )
        store = FileCredentialStore(path)
        original = path.stat()

        _write_users(path, [{"id": 2, "username": "carol", "password": "secret"}])
        os.utime(path, ns=(original.st_atime_ns, original.st_mtime_ns))

        assert store.find_by_username("alice") is None
        assert store.find_by_username("carol") is not None

    def test_broken_update_keeps_last_good_table(self, tmp_path):
        path = tmp_path / "users.json"
        _write_users(path, [{"id": 1, "username": "alice", "password": "secret"}])
        store = FileCredentialStore(path)

        path.write_text("[{", encoding="utf-8")
        _bump_mtime(path)

        assert store.find_by_username("alice") is not None

    def test_deleted_file_empties_table(self, tmp_path):
        path = tmp_path / "users.json"
        _write_users(path, [{"id": 1, "username": "alice", "password": "secret"}])
        store = FileCredentialStore(path)

        path.unlink()

        assert store.find_by_username("alice") is None
        assert len(store) == 0


class TestBuildCredentialStore:
    """Tests for build_credential_store."""

    def test_static_store_from_users(self, settings):
        store = build_credential_store(settings)

        assert isinstance(store, StaticCredentialStore)
        assert store.find_by_username("alice") is not None

    def test_file_store_when_users_file_set(self, tmp_path):
        path = tmp_path / "users.json"
        _write_users(path, [{"id": 1, "username": "alice", "password": "secret"}])
        settings = Settings(users_file=str(path))

        store = build_credential_store(settings)

        assert isinstance(store, FileCredentialStore)
        assert store.find_by_username("alice") is not None

    def test_empty_static_store(self):
        store = build_credential_store(Settings())

        assert store.find_by_username("alice") is None
