# inmobiliaria/adapters/repos/images.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import PropertyImage


class ImageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, *, property_id: str, url: str, sort_order: int) -> PropertyImage:
        img = PropertyImage(
            property_id=property_id,
            url=url,
            sort_order=sort_order,
            created_at=datetime.utcnow(),
        )
        self.session.add(img)
        await self.session.flush()
        return img

    async def add_many(self, *, property_id: str, urls: list[str] | tuple[str, ...]) -> list[PropertyImage]:
        """Ascending order starting at 1, so the first URL becomes the main image."""
        out: list[PropertyImage] = []
        for i, url in enumerate(urls, start=1):
            out.append(await self.add(property_id=property_id, url=url, sort_order=i))
        return out

    async def list_for_property(self, property_id: str) -> list[PropertyImage]:
        q = (
            select(PropertyImage)
            .where(PropertyImage.property_id == property_id)
            .order_by(PropertyImage.sort_order.asc(), PropertyImage.created_at.asc())
        )
        return list((await self.session.execute(q)).scalars().all())
