"""Domain entities."""

from todoapi.domain.entities.identity import Credential, Identity
from todoapi.domain.entities.todo import Todo

__all__ = ["Credential", "Identity", "Todo"]
