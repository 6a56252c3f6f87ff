"""Identity and credential entities.

An identity is a known user of the system. Identities are loaded once at
process start and never change afterwards; a credential is the transient
username/password pair a client submits to log in.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Identity:
    """A known user that can authenticate.

    Attributes:
        id: Numeric identifier.
        username: Unique, case-sensitive login name.
        password_hash: Output of the password hasher (never the plaintext).
        roles: Free-form role labels, e.g. ``ROLE_USER_2``.
        enabled: Disabled identities cannot log in.
    """

    id: int
    username: str
    password_hash: str = field(repr=False)
    roles: frozenset[str] = frozenset()
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate identity data after initialization."""
        if not self.username:
            raise ValueError("Username is required")
        if not self.password_hash:
            raise ValueError("Password hash is required")
        # Accept any iterable of roles but store it immutably
        object.__setattr__(self, "roles", frozenset(self.roles))


@dataclass(frozen=True)
class Credential:
    """A username/password pair submitted by a client.

    Only lives for the duration of a login request.
    """

    username: str | None
    password: str | None = field(repr=False)

    @property
    def is_complete(self) -> bool:
        """Both fields are present and non-empty."""
        return bool(self.username) and bool(self.password)
