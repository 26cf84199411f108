import asyncio
import os
import time
import traceback
from typing import Any, List, Optional, Protocol, runtime_checkable

import aiosqlite
from aiosqlitepool import SQLiteConnectionPool
from litestar.types.protocols import Logger

from inkwell.schemas.interaction import ApiCall, Interaction, NewInteraction


def now_ms() -> int:
    return int(time.time() * 1000)


@runtime_checkable
class InteractionStore(Protocol):
    """Append-only log of student and AI interactions."""

    async def add(self, record: NewInteraction) -> Interaction: ...

    async def list(self, user_id: Optional[str] = None) -> List[Interaction]: ...

    async def clear(self) -> None: ...

    async def close(self) -> None: ...


class MemoryInteractionStore:
    """Process-local store. Records live as long as the process does."""

    def __init__(self) -> None:
        self._records: List[Interaction] = []
        self._lock = asyncio.Lock()
        self._last_timestamp = 0

    async def add(self, record: NewInteraction) -> Interaction:
        async with self._lock:
            # Wall clock may step backwards; stored timestamps never do
            self._last_timestamp = max(now_ms(), self._last_timestamp)
            interaction = Interaction(**record.model_dump(), timestamp=self._last_timestamp)
            self._records.append(interaction)
            return interaction

    async def list(self, user_id: Optional[str] = None) -> List[Interaction]:
        async with self._lock:
            if user_id is None:
                return list(self._records)
            return [r for r in self._records if r.user_id == user_id]

    async def clear(self) -> None:
        async with self._lock:
            self._records.clear()

    async def close(self) -> None:
        pass


class SqliteInteractionStore:
    """Store backed by a pooled SQLite database, one JSON payload per row."""

    def __init__(self, db_pool: SQLiteConnectionPool) -> None:
        self.db_pool = db_pool

    async def init(self) -> None:
        async with self.db_pool.connection() as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS interactions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    stage TEXT NOT NULL,
                    timestamp INTEGER NOT NULL,
                    payload TEXT NOT NULL
                )
            """)
            await db.execute("""
                CREATE INDEX IF NOT EXISTS idx_interactions_user_id
                ON interactions(user_id)
            """)
            await db.commit()  # type: ignore

    async def add(self, record: NewInteraction) -> Interaction:
        async with self.db_pool.connection() as db:
            cursor = await db.execute("SELECT MAX(timestamp) FROM interactions")
            row = await cursor.fetchone()
            last_timestamp = row[0] if row and row[0] is not None else 0
            interaction = Interaction(
                **record.model_dump(), timestamp=max(now_ms(), last_timestamp)
            )
            await db.execute(
                "INSERT INTO interactions (user_id, stage, timestamp, payload) VALUES (?, ?, ?, ?)",
                (
                    interaction.user_id,
                    interaction.stage,
                    interaction.timestamp,
                    interaction.model_dump_json(),
                ),
            )
            await db.commit()  # type: ignore
            return interaction

    async def list(self, user_id: Optional[str] = None) -> List[Interaction]:
        async with self.db_pool.connection() as db:
            if user_id is None:
                cursor = await db.execute("SELECT payload FROM interactions ORDER BY id")
            else:
                cursor = await db.execute(
                    "SELECT payload FROM interactions WHERE user_id = ? ORDER BY id",
                    (user_id,),
                )
            rows = await cursor.fetchall()
            return [Interaction.model_validate_json(row[0]) for row in rows]

    async def clear(self) -> None:
        async with self.db_pool.connection() as db:
            await db.execute("DELETE FROM interactions")
            await db.commit()  # type: ignore

    async def close(self) -> None:
        await self.db_pool.close()


async def create_interaction_store(backend: str, db_path: str, logger: Logger) -> InteractionStore:
    if backend == "memory":
        logger.info("Using in-memory interaction store")
        return MemoryInteractionStore()

    if backend != "sqlite":
        raise ValueError(f"Unknown interaction store backend: {backend}")

    def sqlite_connection() -> aiosqlite.Connection:
        logger.info("Creating connection to interaction database at %s", db_path)
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        return aiosqlite.connect(db_path)

    db_pool = SQLiteConnectionPool(connection_factory=sqlite_connection)  # type: ignore
    store = SqliteInteractionStore(db_pool)
    await store.init()
    logger.info("Interaction database initialized")
    return store


async def record_api_call(
    store: InteractionStore,
    user_id: str,
    stage: str,
    endpoint: str,
    request: Any,
    response: Any,
    logger: Logger,
) -> None:
    """Audit one provider call. Never raises; a lost audit record must not fail the route."""
    try:
        await store.add(
            NewInteraction(
                user_id=user_id,
                stage=stage,
                input=request,
                output=response,
                api_calls=[ApiCall(endpoint=endpoint, request=request, response=response).model_dump()],
            )
        )
    except Exception:
        logger.error(f"Failed to record API call to {endpoint}: {traceback.format_exc()}")

