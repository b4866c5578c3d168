from functools import lru_cache

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker
from billing.core.config import settings

DB_URL = settings.DB_URL

engine = create_async_engine(DB_URL, future=True, echo=False)
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def init_models(bind=engine):
    # models must be imported so their tables are registered on Base.metadata
    from billing.db.models import counters, documents  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@lru_cache
def get_store():
    """Return the process-wide document store selected by STORE_BACKEND."""
    from billing.db.repositories.documents import SqlDocumentStore
    from billing.db.store import InMemoryDocumentStore

    if settings.STORE_BACKEND == "memory":
        return InMemoryDocumentStore()
    return SqlDocumentStore(AsyncSessionLocal)
