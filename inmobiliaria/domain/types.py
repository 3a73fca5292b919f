# inmobiliaria/domain/types.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Union

from ..models import Condition, DwellingType, ListingType, PropertyType


@dataclass(frozen=True)
class RawRow:
    """One input record as uploaded. `row` is the 1-based position in the file."""
    row: int
    fields: dict[str, Any]


@dataclass(frozen=True)
class NormalizedCandidate:
    row: int
    title: str
    price: int
    description: str | None = None
    rooms: int = 0
    bathrooms: int = 0
    area_m2: int | None = None
    locality: str = ""
    province: str = ""
    property_type: PropertyType = PropertyType.vivienda
    dwelling_type: DwellingType = DwellingType.piso
    condition: Condition = Condition.buen_estado
    listing_type: ListingType = ListingType.venta
    source_url: str | None = None
    scraped_at: datetime | None = None
    advertiser: str | None = None
    owner_name: str | None = None
    owner_phone: str | None = None
    notes: str | None = None
    image_urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class RowError:
    row: int
    reason: str
    title: str | None = None


# Normalizer boundary: a row is either usable or carries its error.
NormalizeResult = Union[NormalizedCandidate, RowError]


class Verdict(str, Enum):
    new = "new"
    duplicate = "duplicate"


@dataclass(frozen=True)
class Classification:
    verdict: Verdict
    reason: str | None = None
    conflicting_url: str | None = None

    @property
    def is_duplicate(self) -> bool:
        return self.verdict == Verdict.duplicate


NEW = Classification(verdict=Verdict.new)


class OutcomeStatus(str, Enum):
    success = "success"
    duplicate = "duplicate"
    error = "error"


@dataclass(frozen=True)
class RowOutcome:
    row: int
    status: OutcomeStatus
    title: str | None = None
    id: str | None = None
    url: str | None = None
    reason: str | None = None
    error: str | None = None


@dataclass
class ParsedUpload:
    """Parser output: rows in input order plus envelope metadata (JSON only)."""
    rows: list[RawRow]
    metadata: dict[str, Any] | None = None
