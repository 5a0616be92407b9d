"""Dependency injection for FastAPI"""
from typing import Any, AsyncGenerator

import asyncpg

from querycost.config import settings


async def get_db_connection() -> AsyncGenerator[Any, None]:
    """FastAPI dependency for the target database connection"""
    # SSL mode: 'disable' -> ssl=False, other values passed as ssl parameter
    ssl_mode = settings.target_db_ssl if settings.target_db_ssl != "disable" else False
    conn = await asyncpg.connect(
        host=settings.target_db_host,
        port=settings.target_db_port,
        database=settings.target_db_name,
        user=settings.target_db_user,
        password=settings.target_db_password,
        ssl=ssl_mode,
        timeout=settings.stats_timeout_seconds,
    )
    try:
        yield conn
    finally:
        await conn.close()
