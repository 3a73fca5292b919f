# inmobiliaria/service_layer/duplicates.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from ..domain.location import normalize_key
from ..domain.types import NEW, Classification, NormalizedCandidate, Verdict
from .unit_of_work import Catalog

log = logging.getLogger(__name__)

REASON_SAME_URL = "same source URL"
REASON_SAME_URL_IN_BATCH = "same source URL as an earlier row in this batch"
REASON_SAME_TITLE_LOCATION = "same title and location"
REASON_SAME_TITLE_LOCATION_IN_BATCH = "same title and location as an earlier row in this batch"


def _title_location_key(c: NormalizedCandidate) -> tuple[str, str]:
    return normalize_key(c.title), normalize_key(c.locality)


@dataclass
class BatchState:
    """Rows already accepted (classified NEW) earlier in the running import."""

    batch_id: str | None = None
    urls: dict[str, int] = field(default_factory=dict)
    title_locations: dict[tuple[str, str], str | None] = field(default_factory=dict)

    def remember(self, c: NormalizedCandidate) -> None:
        if c.source_url:
            self.urls.setdefault(c.source_url, c.row)
        self.title_locations.setdefault(_title_location_key(c), c.source_url)


class DuplicateRule(Protocol):
    name: str

    async def check(self, candidate: NormalizedCandidate, batch: BatchState) -> Classification | None: ...


def _duplicate(reason: str, url: str | None) -> Classification:
    return Classification(verdict=Verdict.duplicate, reason=reason, conflicting_url=url)


@dataclass
class CatalogUrlRule:
    catalog: Catalog
    name: str = "catalog_url"

    async def check(self, candidate: NormalizedCandidate, batch: BatchState) -> Classification | None:
        if not candidate.source_url:
            return None
        hit = await self.catalog.find_by_source_url(candidate.source_url, exclude_batch_id=batch.batch_id)
        if hit is None:
            return None
        return _duplicate(REASON_SAME_URL, hit.source_url)


@dataclass
class BatchUrlRule:
    name: str = "batch_url"

    async def check(self, candidate: NormalizedCandidate, batch: BatchState) -> Classification | None:
        if candidate.source_url and candidate.source_url in batch.urls:
            return _duplicate(REASON_SAME_URL_IN_BATCH, candidate.source_url)
        return None


@dataclass
class CatalogTitleLocationRule:
    catalog: Catalog
    name: str = "catalog_title_location"

    async def check(self, candidate: NormalizedCandidate, batch: BatchState) -> Classification | None:
        hit = await self.catalog.find_by_title_and_locality(
            candidate.title, candidate.locality, exclude_batch_id=batch.batch_id
        )
        if hit is None:
            return None
        return _duplicate(REASON_SAME_TITLE_LOCATION, hit.source_url)


@dataclass
class BatchTitleLocationRule:
    name: str = "batch_title_location"

    async def check(self, candidate: NormalizedCandidate, batch: BatchState) -> Classification | None:
        key = _title_location_key(candidate)
        if key not in batch.title_locations:
            return None
        return _duplicate(REASON_SAME_TITLE_LOCATION_IN_BATCH, batch.title_locations[key])


def default_rules(catalog: Catalog, *, check_batch_duplicates: bool = True) -> list[DuplicateRule]:
    """
    Precedence, first match wins:
      1) source URL already in catalog
      2) source URL seen earlier in this batch
      3) title + locality already in catalog
      4) title + locality seen earlier in this batch
    """
    rules: list[DuplicateRule] = [CatalogUrlRule(catalog)]
    if check_batch_duplicates:
        rules.append(BatchUrlRule())
    rules.append(CatalogTitleLocationRule(catalog))
    if check_batch_duplicates:
        rules.append(BatchTitleLocationRule())
    return rules


class DuplicateDetector:
    """
    Read-only classifier. The catalog is seen as of batch start: rows stamped
    with the running batch id never count as catalog hits, they are handled by
    the batch rules instead (or not at all when those are switched off).
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        batch_id: str | None = None,
        check_batch_duplicates: bool = True,
        rules: list[DuplicateRule] | None = None,
    ) -> None:
        self.rules = rules if rules is not None else default_rules(
            catalog, check_batch_duplicates=check_batch_duplicates
        )
        self.batch = BatchState(batch_id=batch_id)

    async def classify(self, candidate: NormalizedCandidate) -> Classification:
        for rule in self.rules:
            hit = await rule.check(candidate, self.batch)
            if hit is not None:
                log.debug("row %s duplicate via %s: %s", candidate.row, rule.name, hit.reason)
                return hit
        return NEW

    def accept(self, candidate: NormalizedCandidate) -> None:
        """Record a NEW candidate so later rows in the batch can match it."""
        self.batch.remember(candidate)
