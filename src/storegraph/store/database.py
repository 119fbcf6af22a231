"""
SQLAlchemy table models backing the SQL document store.

One table per collection. ``pk`` is an internal autoincrement key that keeps
insertion order; ``id`` is the store-assigned identity exposed to callers.
"""

from __future__ import annotations

import os
from typing import Any, Optional

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .base import new_id


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class DocumentRow:
    """Mixin with identity columns and dict conversion."""

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, index=True, default=new_id)

    def to_document(self) -> dict[str, Any]:
        """Convert row to a document dict (all columns except ``pk``)."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name != "pk"
        }


class ProductRow(DocumentRow, Base):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[int] = mapped_column(Integer)
    category: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(16), index=True)


class UserRow(DocumentRow, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(16))


class OrderRow(DocumentRow, Base):
    __tablename__ = "orders"

    products: Mapped[list] = mapped_column(JSON, default=list)
    user: Mapped[str] = mapped_column(String(32), index=True)
    total: Mapped[int] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(String(16))


TABLES: dict[str, type[DocumentRow]] = {
    "products": ProductRow,
    "users": UserRow,
    "orders": OrderRow,
}


def get_database_url() -> str:
    """Get database URL from environment."""
    return os.getenv("DATABASE_URL", "sqlite+aiosqlite:///storegraph.db")
