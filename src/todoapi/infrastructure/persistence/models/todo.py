"""SQLAlchemy model for todos."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from todoapi.domain.entities import Todo
from todoapi.infrastructure.persistence.database import Base


class TodoModel(Base):
    """A todo row. Rows are looked up by owner username."""

    __tablename__ = "todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(1024), nullable=False)
    target_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def to_entity(self) -> Todo:
        return Todo(
            id=self.id,
            username=self.username,
            description=self.description,
            target_date=self.target_date,
            done=self.is_done,
        )

    def __repr__(self) -> str:
        return f"TodoModel(id={self.id!r}, username={self.username!r}, is_done={self.is_done!r})"
