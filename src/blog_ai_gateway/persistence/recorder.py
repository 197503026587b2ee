"""
Generation history persistence.
"""

import logging
import math
from typing import Any, Mapping, Optional, Union

import asyncpg

from ..models.history import GenerationHistoryPage, GenerationRecord, Pagination

logger = logging.getLogger(__name__)


class GenerationRecorder:
    """
    Audit trail of AI generations.

    Recording is best effort: a failed insert is logged and never reaches
    the caller whose generation already succeeded.
    """

    def __init__(self, pool: asyncpg.Pool):
        """
        Initialize recorder.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    @classmethod
    async def connect(cls, dsn: str, **pool_kwargs: Any) -> "GenerationRecorder":
        pool = await asyncpg.create_pool(dsn, **pool_kwargs)
        return cls(pool)

    async def close(self) -> None:
        await self.pool.close()

    async def init_tables(self):
        """Initialize database tables."""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS ai_generation_history (
                    id SERIAL PRIMARY KEY,
                    user_id INTEGER,
                    type VARCHAR(50) NOT NULL,
                    prompt TEXT NOT NULL,
                    result TEXT NOT NULL,
                    tokens_used INTEGER NOT NULL DEFAULT 0,
                    model VARCHAR(100) NOT NULL,
                    provider VARCHAR(50) NOT NULL,
                    created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
                )
            """)

            await conn.execute("CREATE INDEX IF NOT EXISTS idx_ai_history_user ON ai_generation_history(user_id)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_ai_history_type ON ai_generation_history(type)")
            await conn.execute("CREATE INDEX IF NOT EXISTS idx_ai_history_created ON ai_generation_history(created_at)")

            logger.info("AI generation history table initialized")

    async def record(self, data: Union[GenerationRecord, Mapping[str, Any]]) -> Optional[int]:
        """
        Persist one generation.

        Returns:
            The new row id, or None if the insert failed
        """
        try:
            record = data if isinstance(data, GenerationRecord) else GenerationRecord(**data)
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow("""
                    INSERT INTO ai_generation_history
                    (user_id, type, prompt, result, tokens_used, model, provider)
                    VALUES ($1, $2, $3, $4, $5, $6, $7)
                    RETURNING id
                """,
                    record.user_id,
                    record.type,
                    record.prompt,
                    record.result,
                    record.tokens_used or 0,
                    record.model,
                    record.provider,
                )
            return row["id"]
        except Exception as e:
            logger.error(f"Failed to record AI generation history: {e}")
            return None

    async def list_history(self, page: int = 1, limit: int = 10) -> GenerationHistoryPage:
        """List generations, newest first."""
        page = max(page, 1)
        limit = max(limit, 1)
        offset = (page - 1) * limit

        async with self.pool.acquire() as conn:
            total = await conn.fetchval("SELECT COUNT(*) FROM ai_generation_history")
            rows = await conn.fetch("""
                SELECT id, user_id, type, prompt, result, tokens_used, model, provider, created_at
                FROM ai_generation_history
                ORDER BY created_at DESC
                LIMIT $1 OFFSET $2
            """, limit, offset)

        return GenerationHistoryPage(
            items=[self._row_to_record(row) for row in rows],
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=math.ceil(total / limit),
            ),
        )

    def _row_to_record(self, row: Mapping[str, Any]) -> GenerationRecord:
        """Convert database row to GenerationRecord."""
        return GenerationRecord(**dict(row))
