# inmobiliaria/adapters/ingestion/json_upload.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ...config import settings
from ...domain.types import ParsedUpload
from ...exceptions import ImportStructureError
from .base import REQUIRED_ROW_FIELDS, UploadParser, missing_fields, number_rows

# Envelope keys echoed back to the administrator with the report.
METADATA_KEYS: tuple[str, ...] = ("timestamp", "url", "total", "particulares", "inmobiliarias")


def load_json_document(content: bytes | str) -> Any:
    """Decode a JSON upload (file on disk or raw request body)."""
    try:
        if isinstance(content, bytes):
            content = content.decode("utf-8-sig")
        return json.loads(content)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportStructureError("INVALID_JSON", f"Upload is not valid JSON: {e}") from e


def extract_metadata(document: dict[str, Any]) -> dict[str, Any]:
    return {k: document.get(k) for k in METADATA_KEYS}


@dataclass
class JsonUploadParser(UploadParser):
    """
    Scraper export format:

      {
        "timestamp": "...", "url": "...", "total": 3,
        "particulares": 2, "inmobiliarias": 1,
        "viviendas": {"todas": [{"titulo": ..., "precio": ..., "ubicacion": ...,
                                 "habitaciones": ..., "metros": ..., "url": ...,
                                 "descripcion": ..., "anunciante": ...,
                                 "fecha_scraping": ...}, ...]}
      }
    """

    max_rows: int | None = None

    @classmethod
    def from_settings(cls) -> "JsonUploadParser":
        return cls(max_rows=settings.IMPORT_MAX_ROWS)

    def parse(self, payload: Any) -> ParsedUpload:
        if not isinstance(payload, dict):
            raise ImportStructureError("INVALID_JSON_STRUCTURE", "JSON upload must be an object")

        viviendas = payload.get("viviendas")
        todas = viviendas.get("todas") if isinstance(viviendas, dict) else None
        if not isinstance(todas, list):
            raise ImportStructureError(
                "INVALID_JSON_STRUCTURE",
                'JSON upload must contain a "viviendas.todas" array of listings',
            )

        if not todas:
            raise ImportStructureError("EMPTY_IMPORT", "No listings found to import")

        sample = todas[0]
        if not isinstance(sample, dict):
            raise ImportStructureError("INVALID_JSON_STRUCTURE", "Each listing must be a JSON object")

        missing = missing_fields(sample, REQUIRED_ROW_FIELDS)
        if missing:
            raise ImportStructureError(
                "INVALID_JSON_STRUCTURE",
                f"Listings must include the required fields: {', '.join(missing)}",
            )

        total = payload.get("total")
        if total is not None and (isinstance(total, bool) or not isinstance(total, (int, float))):
            raise ImportStructureError("INVALID_JSON_STRUCTURE", 'Field "total" must be a number')

        # Non-object entries further down are kept so they surface as row errors.
        records = [it if isinstance(it, dict) else {"_invalid": it} for it in todas]

        return ParsedUpload(
            rows=number_rows(records, max_rows=self.max_rows),
            metadata=extract_metadata(payload),
        )


def parse_json_upload(document: Any, *, max_rows: int | None = None) -> ParsedUpload:
    """Accepts an already-decoded document or the raw JSON bytes/text."""
    if isinstance(document, (bytes, str)):
        document = load_json_document(document)
    parser = JsonUploadParser.from_settings() if max_rows is None else JsonUploadParser(max_rows=max_rows)
    return parser.parse(document)
