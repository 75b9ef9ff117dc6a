from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from app.core.db.base import BaseModel


class User(BaseModel):
    """
    Account that owns drafts and history records.
    Extends BaseModel which provides: id, created_at, updated_at
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    # bcrypt hash, never returned by the API
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)

    last_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, default=None
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
