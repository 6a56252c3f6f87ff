"""Todo entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Todo:
    """A single todo item owned by a user.

    ``id`` is None until the item has been stored.
    """

    id: int | None
    username: str
    description: str
    target_date: datetime | None = None
    done: bool = False
