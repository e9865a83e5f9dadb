"""Read-only connection pool for persisted history lookups.

Threadline never writes history; the table belongs to whatever process
records conversations. Sessions are opened read-only and every query is
bounded by a command timeout so a slow database cannot stall a bundle.
"""

import asyncio
import logging

import asyncpg
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger("threadline.db")

# Applied to every pooled session
READ_ONLY_SETTINGS = {
    "default_transaction_read_only": "on",
    "application_name": "threadline",
}

_pool: Optional[asyncpg.Pool] = None


async def init_db(
    dsn: str,
    max_size: int = 2,
    command_timeout: float = 10.0,
    max_retries: int = 3,
) -> asyncpg.Pool:
    """Open the history lookup pool, retrying while the server comes up.

    One lookup runs per bundle, so the pool stays small. Calling this
    again while a pool is open returns the existing pool. Delays between
    attempts double from 1 second, capped at 4.
    """
    global _pool
    if _pool is not None:
        return _pool

    for attempt in range(max_retries):
        try:
            _pool = await asyncpg.create_pool(
                dsn,
                min_size=1,
                max_size=max_size,
                command_timeout=command_timeout,
                server_settings=READ_ONLY_SETTINGS,
            )
            if attempt > 0:
                logger.info(f"History database connected after {attempt + 1} attempts")
            return _pool
        except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            if attempt < max_retries - 1:
                delay = min(2 ** attempt, 4)
                logger.warning(f"History database not ready (attempt {attempt + 1}/{max_retries}): {e}. Retrying in {delay}s...")
                await asyncio.sleep(delay)
            else:
                logger.error(f"History database unreachable after {max_retries} attempts: {e}")
                raise


async def close_db():
    """Close the history pool if one is open."""
    global _pool
    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()
        logger.debug("History pool closed")


@asynccontextmanager
async def get_connection():
    """Acquire a read-only session from the history pool."""
    if _pool is None:
        raise RuntimeError("History database not initialized. Call init_db() first.")
    async with _pool.acquire() as conn:
        yield conn
