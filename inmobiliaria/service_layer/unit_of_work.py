# inmobiliaria/service_layer/unit_of_work.py
from __future__ import annotations

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.repos.images import ImageRepository
from ..adapters.repos.properties import PropertyRepository
from ..db import AsyncSessionLocal
from ..models import Property, PropertyImage


class Catalog(Protocol):
    """Persistence port the import pipeline talks to. Each call is atomic."""

    async def find_by_source_url(self, url: str, *, exclude_batch_id: str | None = None) -> Property | None: ...
    async def find_by_title_and_locality(
        self, title: str, locality: str, *, exclude_batch_id: str | None = None
    ) -> Property | None: ...
    async def add(self, **fields: Any) -> Property: ...


class ImageStore(Protocol):
    async def add_many(self, *, property_id: str, urls: list[str] | tuple[str, ...]) -> list[PropertyImage]: ...


class UnitOfWork(Protocol):
    properties: Catalog
    images: ImageStore

    async def __aenter__(self) -> "UnitOfWork": ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...


class SqlAlchemyUnitOfWork:
    """
    Wraps one AsyncSession. Pass a session (FastAPI dependency) or let the
    UoW open its own from AsyncSessionLocal (scripts).
    """

    def __init__(self, session: AsyncSession | None = None) -> None:
        self._owns_session = session is None
        self.session: AsyncSession | None = session
        self.properties: PropertyRepository | None = None
        self.images: ImageRepository | None = None
        if session is not None:
            self._bind(session)

    def _bind(self, session: AsyncSession) -> None:
        self.session = session
        self.properties = PropertyRepository(session)
        self.images = ImageRepository(session)

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        if self.session is None:
            self._bind(AsyncSessionLocal())
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc:
                await self.rollback()
            else:
                await self.commit()
        finally:
            if self._owns_session and self.session is not None:
                await self.session.close()

    def _active(self) -> AsyncSession:
        if self.session is None:
            raise RuntimeError("unit of work is not active; use it as an async context manager")
        return self.session

    async def commit(self) -> None:
        await self._active().commit()

    async def rollback(self) -> None:
        await self._active().rollback()
