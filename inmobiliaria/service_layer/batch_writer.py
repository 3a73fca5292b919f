# inmobiliaria/service_layer/batch_writer.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from ..domain.types import Classification, NormalizedCandidate, OutcomeStatus, RowError, RowOutcome
from ..models import ImportSource, SaleState
from .unit_of_work import UnitOfWork

log = logging.getLogger(__name__)


@dataclass
class BatchWriter:
    """
    Turns classified rows into outcomes. Only NEW rows touch the database,
    each one committed on its own so a failing row never takes others down.
    """

    uow: UnitOfWork
    batch_id: str
    source: ImportSource

    def _property_fields(self, c: NormalizedCandidate) -> dict:
        return {
            "title": c.title,
            "description": c.description,
            "price": c.price,
            "rooms": c.rooms,
            "bathrooms": c.bathrooms,
            "area_m2": c.area_m2,
            "locality": c.locality,
            "province": c.province,
            "property_type": c.property_type,
            "dwelling_type": c.dwelling_type,
            "condition": c.condition,
            "listing_type": c.listing_type,
            "sale_state": SaleState.pendiente,
            "published": False,
            "owner_name": c.owner_name,
            "owner_phone": c.owner_phone,
            "notes": c.notes,
            "source_url": c.source_url,
            "advertiser": c.advertiser,
            "scraped_at": c.scraped_at,
            "acquired_at": datetime.utcnow(),
            "import_source": self.source,
            "import_batch_id": self.batch_id,
        }

    async def write_new(self, c: NormalizedCandidate) -> RowOutcome:
        try:
            prop = await self.uow.properties.add(**self._property_fields(c))
            prop_id = prop.id
            if c.image_urls:
                await self.uow.images.add_many(property_id=prop_id, urls=c.image_urls)
            await self.uow.commit()
        except (SQLAlchemyError, OverflowError, ValueError) as e:
            await self.uow.rollback()
            log.exception("import %s: row %s could not be saved", self.batch_id, c.row)
            return RowOutcome(
                row=c.row,
                status=OutcomeStatus.error,
                title=c.title,
                error=f"could not save listing ({e.__class__.__name__})",
            )

        return RowOutcome(row=c.row, status=OutcomeStatus.success, title=c.title, id=prop_id, url=c.source_url)

    def record_duplicate(self, c: NormalizedCandidate, cls: Classification) -> RowOutcome:
        return RowOutcome(
            row=c.row,
            status=OutcomeStatus.duplicate,
            title=c.title,
            url=cls.conflicting_url or c.source_url,
            reason=cls.reason,
        )

    def record_error(self, err: RowError) -> RowOutcome:
        return RowOutcome(row=err.row, status=OutcomeStatus.error, title=err.title, error=err.reason)
