# inmobiliaria/adapters/repos/properties.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.location import normalize_key
from ...models import ImportSource, Property, SaleState


class PropertyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _before_batch(self, stmt, batch_id: str | None):
        # "existing catalog" = everything not written by the running import
        if batch_id is None:
            return stmt
        return stmt.where(or_(Property.import_batch_id.is_(None), Property.import_batch_id != batch_id))

    async def find_by_source_url(self, url: str, *, exclude_batch_id: str | None = None) -> Property | None:
        q = select(Property).where(Property.source_url == url).order_by(Property.created_at.asc())
        q = self._before_batch(q, exclude_batch_id)
        return (await self.session.execute(q.limit(1))).scalars().first()

    async def find_by_title_and_locality(
        self,
        title: str,
        locality: str,
        *,
        exclude_batch_id: str | None = None,
    ) -> Property | None:
        """Match on the normalized (case-insensitive, whitespace-collapsed) keys."""
        q = (
            select(Property)
            .where(Property.title_key == normalize_key(title))
            .where(Property.locality_key == normalize_key(locality))
            .order_by(Property.created_at.asc())
        )
        q = self._before_batch(q, exclude_batch_id)
        return (await self.session.execute(q.limit(1))).scalars().first()

    async def add(self, **fields: Any) -> Property:
        """
        Insert a property. Dedup keys are always derived here so every row,
        imported or hand-made, is reachable by the title+location rule.
        """
        amenities = fields.pop("amenities", None)
        if amenities is not None:
            fields["amenities_json"] = json.dumps(sorted(set(amenities)), ensure_ascii=False)

        prop = Property(**fields)
        prop.title_key = normalize_key(prop.title)
        prop.locality_key = normalize_key(prop.locality)

        now = datetime.utcnow()
        prop.created_at = prop.created_at or now
        prop.updated_at = prop.updated_at or now
        if prop.published and prop.published_at is None:
            prop.published_at = now

        self.session.add(prop)
        await self.session.flush()
        return prop

    async def delete(self, prop: Property) -> None:
        # images cascade, messages keep living with property_id = NULL
        await self.session.delete(prop)
        await self.session.flush()

    async def pending_duplicate_url_groups(self) -> list[tuple[str, list[Property]]]:
        """Pending (captación) listings that share a source URL, oldest first per group."""
        dup_urls = (
            select(Property.source_url)
            .where(Property.sale_state == SaleState.pendiente)
            .where(Property.source_url.isnot(None))
            .where(Property.source_url != "")
            .group_by(Property.source_url)
            .having(func.count(Property.id) > 1)
        )
        q = (
            select(Property)
            .where(Property.sale_state == SaleState.pendiente)
            .where(Property.source_url.in_(dup_urls))
            .order_by(Property.source_url.asc(), Property.created_at.asc(), Property.id.asc())
        )
        rows = (await self.session.execute(q)).scalars().all()

        groups: dict[str, list[Property]] = {}
        for p in rows:
            groups.setdefault(p.source_url or "", []).append(p)

        # largest groups first
        return sorted(groups.items(), key=lambda kv: (-len(kv[1]), kv[0]))

    async def import_counts(self, *, since: datetime) -> dict[str, int]:
        imported = Property.import_source.isnot(None)

        async def _count(*conds) -> int:
            q = select(func.count()).select_from(Property).where(imported, *conds)
            return int((await self.session.execute(q)).scalar_one())

        return {
            "total_imported": await _count(),
            "imported_today": await _count(Property.created_at >= since),
            "from_csv": await _count(Property.import_source == ImportSource.csv),
            "from_json": await _count(Property.import_source == ImportSource.json),
        }
