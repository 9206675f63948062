"""Query execution against PostgreSQL."""

import logging
from typing import Any, Dict, List, Optional, Protocol

import asyncpg
from asyncpg import Pool

from ..query import Query, compile_count, compile_select
from .connection import get_db_pool


logger = logging.getLogger(__name__)


class QueryExecutor(Protocol):
    """Anything able to run a `Query` for rows or for a count."""

    async def fetch(self, query: Query) -> List[Dict[str, Any]]:
        ...

    async def count(self, query: Query) -> int:
        ...


class PostgresExecutor:
    """Run compiled queries on an asyncpg pool.

    Each call acquires its own connection, so a fetch and a count can run
    concurrently. Database errors are logged and re-raised unchanged.
    """

    def __init__(self, pool: Optional[Pool] = None):
        self._pool = pool

    async def _get_pool(self) -> Pool:
        if self._pool is None:
            self._pool = await get_db_pool()
        return self._pool

    async def fetch(self, query: Query) -> List[Dict[str, Any]]:
        """Fetch the rows matching `query` as dictionaries."""
        sql, params = compile_select(query)
        pool = await self._get_pool()

        try:
            async with pool.acquire() as conn:
                rows = await conn.fetch(sql, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error fetching from {query.table}: {e}")
            raise

        logger.debug(f"Fetched {len(rows)} rows from {query.table}")
        return [dict(row) for row in rows]

    async def count(self, query: Query) -> int:
        """Count the rows matching the filters of `query`."""
        sql, params = compile_count(query)
        pool = await self._get_pool()

        try:
            async with pool.acquire() as conn:
                count = await conn.fetchval(sql, *params)
        except asyncpg.PostgresError as e:
            logger.error(f"Database error counting {query.table}: {e}")
            raise

        return int(count or 0)
