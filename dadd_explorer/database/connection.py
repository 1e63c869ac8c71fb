"""
Database Connection Management

Query gateway over a SQLAlchemy async engine. The gateway is constructed
explicitly by the application factory and handed to route handlers through
a FastAPI dependency.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql import Executable

from dadd_explorer.config.settings import DatabaseSettings

logger = structlog.get_logger(__name__)

Statement = Union[str, Executable]
Row = Dict[str, Any]


def create_engine_from_settings(settings: DatabaseSettings) -> AsyncEngine:
    """
    Create the async engine.

    The pool is shared by all requests; connections are checked before use
    and recycled before MySQL's idle timeout closes them.
    """
    engine_config: Dict[str, Any] = {
        "echo": settings.echo,
        "pool_pre_ping": True,
    }
    url = settings.get_url()
    if not url.startswith("sqlite"):
        engine_config.update({
            "pool_size": settings.pool_size,
            "pool_recycle": settings.pool_recycle,
        })
    return create_async_engine(url, **engine_config)


class QueryGateway:
    """
    Executes parameterized statements and returns rows as mappings.

    Statements are SQLAlchemy Core constructs, or raw SQL strings with named
    bind parameters. Driver errors are logged and re-raised unchanged; there
    is no retry.

    Example:
        gateway = QueryGateway(engine)
        rows = await gateway.fetch_all(select(Region).order_by(Region.region_id))
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "QueryGateway":
        return cls(create_engine_from_settings(settings))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @staticmethod
    def _prepare(statement: Statement) -> Executable:
        if isinstance(statement, str):
            return text(statement)
        return statement

    async def fetch_all(
        self,
        statement: Statement,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Row]:
        """Run a query and return every row as a column-name mapping."""
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(self._prepare(statement), params or {})
                rows = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            logger.error("Query failed", error=str(e), error_type=type(e).__name__)
            raise
        logger.debug("Query executed", rows=len(rows))
        return rows

    async def fetch_one(
        self,
        statement: Statement,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Row]:
        """Run a query and return its first row, or None."""
        rows = await self.fetch_all(statement, params)
        return rows[0] if rows else None

    async def execute(
        self,
        statement: Statement,
        params: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """
        Run a write statement in its own transaction.

        Returns:
            int: Number of rows affected
        """
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(self._prepare(statement), params or {})
        except SQLAlchemyError as e:
            logger.error("Statement failed", error=str(e), error_type=type(e).__name__)
            raise
        logger.debug("Statement executed", rowcount=result.rowcount)
        return result.rowcount

    async def ping(self) -> None:
        """Round trip a trivial query; raises if the store is unreachable."""
        await self.fetch_all("SELECT 1")

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self._engine.dispose()
        logger.info("Database connection pool closed")
