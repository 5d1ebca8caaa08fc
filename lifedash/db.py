from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lifedash.config import settings
from lifedash.engine.connector import SqlStore
from lifedash.engine.schema import metadata

_raw_url = settings.database_url

if _raw_url.startswith("postgres://"):
    _raw_url = _raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
elif _raw_url.startswith("postgresql://"):
    _raw_url = _raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)

engine = create_async_engine(_raw_url, pool_pre_ping=True)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def get_store() -> SqlStore:  # type: ignore[misc]
    async with async_session() as session:
        yield SqlStore(session)
