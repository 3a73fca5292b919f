from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import settings

engine: AsyncEngine = create_async_engine(settings.INMO_DB_URL, echo=False, future=True)

# shared by the API dependency and SqlAlchemyUnitOfWork when it opens its own session
AsyncSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncSession:
    """Request-scoped session for the import routes."""
    async with AsyncSessionLocal() as session:
        yield session
