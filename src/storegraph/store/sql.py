"""
SQL document store on SQLAlchemy async.

Filters are translated into column expressions so filtering happens in the
database, not after fetching everything.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ..core.errors import StoreUnavailableError, ValidationError
from ..core.query_types import NormalizedFilter
from .base import DocumentStore
from .database import TABLES, Base, DocumentRow, get_database_url

logger = logging.getLogger(__name__)


class SQLDocumentStore(DocumentStore):
    """
    Document store backed by a SQL database.

    Usage:
        store = SQLDocumentStore("sqlite+aiosqlite:///:memory:")
        await store.init()
        order = await store.insert("orders", {...})
        await store.close()
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        *,
        echo: Optional[bool] = None,
        engine: Optional[AsyncEngine] = None,
    ):
        """
        Initialize store.

        Args:
            database_url: SQLAlchemy async URL (default: DATABASE_URL env var)
            echo: Log SQL statements (default: SQL_ECHO env var)
            engine: Pre-built engine, overrides database_url
        """
        if echo is None:
            echo = os.getenv("SQL_ECHO", "").lower() == "true"
        self.engine = engine or create_async_engine(database_url or get_database_url(), echo=echo)
        self._session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init(self) -> None:
        """Create tables."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (OperationalError, DBAPIError) as e:
            raise StoreUnavailableError(str(e))
        logger.info(f"Document tables ready on {self.engine.url.render_as_string(hide_password=True)}")

    async def close(self) -> None:
        """Close database connections."""
        await self.engine.dispose()

    def _table(self, collection: str) -> type[DocumentRow]:
        table = TABLES.get(collection)
        if table is None:
            raise ValidationError([f"Unknown collection: {collection}"])
        return table

    def _apply_filters(self, stmt, table: type[DocumentRow], filters: list[NormalizedFilter]):
        """Apply filters to a select statement."""
        for f in filters:
            column = getattr(table, f.field, None)
            if column is None:
                raise ValidationError([f"Unknown field '{f.field}' on {table.__tablename__}"])

            if f.op == "eq":
                stmt = stmt.where(column == f.value)
            elif f.op == "in":
                stmt = stmt.where(column.in_(f.value))

        return stmt

    async def get(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        table = self._table(collection)
        try:
            async with self._session_maker() as session:
                row = await self._get_row(session, table, doc_id)
                return row.to_document() if row else None
        except (OperationalError, DBAPIError) as e:
            raise StoreUnavailableError(str(e))

    async def find(
        self,
        collection: str,
        filters: Optional[list[NormalizedFilter]] = None,
    ) -> list[dict[str, Any]]:
        table = self._table(collection)
        stmt = self._apply_filters(select(table), table, filters or []).order_by(table.pk)
        try:
            async with self._session_maker() as session:
                result = await session.execute(stmt)
                return [row.to_document() for row in result.scalars().all()]
        except (OperationalError, DBAPIError) as e:
            raise StoreUnavailableError(str(e))

    async def insert(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        table = self._table(collection)
        instance = table(**{k: v for k, v in data.items() if k != "id"})
        try:
            async with self._session_maker() as session:
                session.add(instance)
                await session.commit()
                await session.refresh(instance)
                return instance.to_document()
        except (OperationalError, DBAPIError) as e:
            raise StoreUnavailableError(str(e))

    async def update(
        self,
        collection: str,
        doc_id: str,
        changes: dict[str, Any],
    ) -> Optional[dict[str, Any]]:
        table = self._table(collection)
        try:
            async with self._session_maker() as session:
                row = await self._get_row(session, table, doc_id)
                if row is None:
                    return None
                for key, value in changes.items():
                    if key != "id" and hasattr(row, key):
                        setattr(row, key, value)
                await session.commit()
                await session.refresh(row)
                return row.to_document()
        except (OperationalError, DBAPIError) as e:
            raise StoreUnavailableError(str(e))

    async def delete(self, collection: str, doc_id: str) -> bool:
        table = self._table(collection)
        try:
            async with self._session_maker() as session:
                result = await session.execute(delete(table).where(table.id == doc_id))
                await session.commit()
                return result.rowcount > 0
        except (OperationalError, DBAPIError) as e:
            raise StoreUnavailableError(str(e))

    async def _get_row(self, session: AsyncSession, table: type[DocumentRow], doc_id: str):
        result = await session.execute(select(table).where(table.id == doc_id))
        return result.scalar_one_or_none()
