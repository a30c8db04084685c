"""Database connection layer using asyncpg.

Provides a connection pool and helper functions for executing queries
against the Memory Guide PostgreSQL database (patient profiles, memory
cards, sessions, transcripts).
"""

import asyncpg
from loguru import logger

from config import settings

_pool: asyncpg.Pool | None = None


async def get_pool() -> asyncpg.Pool:
    """Get or create the database connection pool."""
    global _pool
    if _pool is None:
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is not configured")
        _pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=1,
            max_size=10,
        )
        logger.info("Database pool created")
    return _pool


async def query_one(sql: str, *args) -> dict | None:
    """Execute a query and return a single row as a dict, or None."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        row = await conn.fetchrow(sql, *args)
        return dict(row) if row else None


async def query_many(sql: str, *args) -> list[dict]:
    """Execute a query and return all rows as a list of dicts."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        rows = await conn.fetch(sql, *args)
        return [dict(r) for r in rows]


async def execute(sql: str, *args) -> str:
    """Execute a mutation query (INSERT, UPDATE, DELETE). Returns status string."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        return await conn.execute(sql, *args)


async def check_health() -> bool:
    """Return True when a trivial query succeeds."""
    try:
        row = await query_one("SELECT 1 AS ok")
        return bool(row and row["ok"] == 1)
    except Exception as e:
        logger.error("Database health check failed: {err}", err=str(e))
        return False


async def close_pool():
    """Close the database connection pool."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")
