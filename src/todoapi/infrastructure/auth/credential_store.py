"""Credential stores: where identities are looked up by username.

Two variants implement the ``CredentialStore`` protocol:

- ``StaticCredentialStore``: a fixed table built once at process start.
- ``FileCredentialStore``: a JSON directory file that is re-read whenever it
  changes on disk, so identities can disappear while tokens for them are
  still in circulation.

``build_credential_store`` picks one from the settings.
"""

import json
import os
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol

from pydantic import TypeAdapter, ValidationError

from todoapi.core.config import SeedUser, Settings
from todoapi.core.logging import get_logger
from todoapi.domain.entities import Identity
from todoapi.infrastructure.auth.password_hasher import hash_password

logger = get_logger(__name__)

_seed_users = TypeAdapter(list[SeedUser])


class CredentialStoreError(Exception):
    """Raised when an identity table cannot be built."""

    pass


class CredentialStore(Protocol):
    """Read-only lookup of identities by username."""

    def find_by_username(self, username: str) -> Identity | None: ...


def identity_from_seed(user: SeedUser) -> Identity:
    """Turn a configured user into an identity, hashing a plaintext password if given."""
    password_hash = user.password_hash or hash_password(user.password or "")
    return Identity(
        id=user.id,
        username=user.username,
        password_hash=password_hash,
        roles=frozenset(user.roles),
        enabled=user.enabled,
    )


def _index(identities: Iterable[Identity]) -> Mapping[str, Identity]:
    table: dict[str, Identity] = {}
    for identity in identities:
        if identity.username in table:
            raise CredentialStoreError(f"Duplicate username '{identity.username}'")
        table[identity.username] = identity
    return MappingProxyType(table)


class StaticCredentialStore:
    """Identity table fixed at construction time."""

    def __init__(self, identities: Iterable[Identity]) -> None:
        self._table = _index(identities)

    @classmethod
    def from_seed(cls, users: Iterable[SeedUser]) -> "StaticCredentialStore":
        return cls(identity_from_seed(user) for user in users)

    def find_by_username(self, username: str) -> Identity | None:
        return self._table.get(username)

    def __len__(self) -> int:
        return len(self._table)


class FileCredentialStore:
    """Identity table backed by a JSON file.

    The file holds a list of objects with the same fields as ``SeedUser``.
    It is loaded eagerly, then reloaded on lookup whenever its modification
    time or size changes. Content that fails to load keeps the last good table in
    place; a deleted file empties it.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._stamp: tuple[int, int] | None = None
        self._table: Mapping[str, Identity] = MappingProxyType({})
        self._table = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _file_stamp(self) -> tuple[int, int]:
        # Size catches rewrites that land within one mtime tick
        stat = self._path.stat()
        return stat.st_mtime_ns, stat.st_size

    def _load(self) -> Mapping[str, Identity]:
        try:
            stamp = self._file_stamp()
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            users = _seed_users.validate_python(raw)
            table = _index(identity_from_seed(user) for user in users)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise CredentialStoreError(f"Cannot load users from {self._path}: {e}") from e

        self._stamp = stamp
        logger.info("Identity table loaded", path=str(self._path), count=len(table))
        return table

    def _refresh(self) -> None:
        try:
            stamp = self._file_stamp()
        except OSError:
            # A removed file means no identities at all
            if self._table:
                logger.warning("Users file disappeared", path=str(self._path))
            self._table = MappingProxyType({})
            self._stamp = None
            return

        if stamp == self._stamp:
            return
        try:
            self._table = self._load()
        except CredentialStoreError as e:
            logger.error("Users file reload failed", path=str(self._path), error=str(e))

    def find_by_username(self, username: str) -> Identity | None:
        with self._lock:
            self._refresh()
            return self._table.get(username)

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)


def build_credential_store(settings: Settings) -> CredentialStore:
    """Create the credential store selected by configuration.

    Args:
        settings: Application settings.

    Returns:
        A ``FileCredentialStore`` when ``users_file`` is set, otherwise a
        ``StaticCredentialStore`` seeded from ``users``.
    """
    if settings.users_file:
        store: CredentialStore = FileCredentialStore(settings.users_file)
        logger.info("Using file credential store", path=settings.users_file)
        return store

    store = StaticCredentialStore.from_seed(settings.users)
    if not len(store):
        logger.warning("No users configured; nobody will be able to log in")
    return store
