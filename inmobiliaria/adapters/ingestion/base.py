# inmobiliaria/adapters/ingestion/base.py
from __future__ import annotations

from typing import Any, Protocol

from ...domain.types import ParsedUpload, RawRow
from ...exceptions import ImportStructureError

# Minimal field set every scraped listing must carry (checked on the first row).
REQUIRED_ROW_FIELDS: tuple[str, ...] = ("titulo", "precio", "ubicacion", "url")


class UploadParser(Protocol):
    def parse(self, payload: Any) -> ParsedUpload:
        raise NotImplementedError


def number_rows(records: list[dict[str, Any]], *, max_rows: int | None) -> list[RawRow]:
    """Attach 1-based row numbers, enforcing the per-upload row cap."""
    if not records:
        raise ImportStructureError("EMPTY_IMPORT", "No listings found to import")

    if max_rows is not None and len(records) > max_rows:
        raise ImportStructureError(
            "TOO_MANY_ROWS",
            f"Upload contains {len(records)} listings; the limit per import is {max_rows}",
        )

    return [RawRow(row=i, fields=rec) for i, rec in enumerate(records, start=1)]


def missing_fields(record: dict[str, Any], required: tuple[str, ...]) -> list[str]:
    out: list[str] = []
    for k in required:
        v = record.get(k)
        if v is None or (isinstance(v, str) and not v.strip()):
            out.append(k)
    return out
