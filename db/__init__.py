"""asyncpg pool and query helpers shared by every persistence service."""

from .client import get_pool, query_one, query_many, execute, close_pool, check_health

__all__ = ["get_pool", "query_one", "query_many", "execute", "close_pool", "check_health"]
