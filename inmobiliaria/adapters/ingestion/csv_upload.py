# inmobiliaria/adapters/ingestion/csv_upload.py
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any

from ...config import settings
from ...domain.types import ParsedUpload
from ...exceptions import ImportStructureError
from .base import UploadParser, number_rows

log = logging.getLogger(__name__)

# Column layout of the portal-monitoring export (also served as the download template).
CSV_TEMPLATE_HEADERS: list[str] = [
    "ID", "Portal", "URL", "Titulo", "Precio", "Ubicacion", "Superficie",
    "Habitaciones", "Banos", "Telefono", "Nombre_Contacto", "Requiere_Formulario",
    "Fecha_Publicacion", "Fecha_Deteccion", "Ultima_Actualizacion", "Estado", "Notas",
]

REQUIRED_CSV_COLUMNS: tuple[str, ...] = ("Titulo", "Precio", "Ubicacion", "URL")

# CSV column -> raw row key shared with the JSON format
CSV_COLUMN_MAP: dict[str, str] = {
    "Titulo": "titulo",
    "Precio": "precio",
    "Ubicacion": "ubicacion",
    "Habitaciones": "habitaciones",
    "Superficie": "metros",
    "URL": "url",
    "Notas": "descripcion",
    "Fecha_Deteccion": "fecha_scraping",
    "Portal": "portal",
    "Banos": "banos",
    "Telefono": "telefono",
    "Nombre_Contacto": "nombre_contacto",
}

CSV_TEMPLATE_EXAMPLE_ROWS: list[list[str]] = [
    [
        "1", "Idealista", "https://www.idealista.com/inmueble/12345", "Piso céntrico en Barcelona",
        "250000", "Barcelona", "85", "3", "2", "612345678", "Juan Pérez", "No",
        "2024-01-15", "2024-01-15", "2024-01-15", "Activo", "Propiedad en buen estado",
    ],
    [
        "2", "Fotocasa", "https://www.fotocasa.es/inmueble/67890", "Ático con terraza en Madrid",
        "380000", "Madrid", "120", "4", "2", "698765432", "María García", "Sí",
        "2024-01-16", "2024-01-16", "2024-01-16", "Activo", "Excelentes vistas",
    ],
]


def render_template() -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_TEMPLATE_HEADERS)
    writer.writerows(CSV_TEMPLATE_EXAMPLE_ROWS)
    return buf.getvalue()


def _to_raw_row(record: dict[str | None, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for column, value in record.items():
        # DictReader puts surplus cells under the None key
        if column is None:
            continue
        key = CSV_COLUMN_MAP.get(column)
        if key is None:
            continue
        out[key] = value.strip() if isinstance(value, str) else value
    return out


def _is_blank(record: dict[str | None, Any]) -> bool:
    return all(
        (v is None or (isinstance(v, str) and not v.strip()))
        for k, v in record.items()
        if k is not None
    )


@dataclass
class CsvUploadParser(UploadParser):
    """
    Parses the CSV export into raw rows keyed like the JSON scraper rows
    (titulo, precio, ubicacion, ...). Header names must match the template.
    """

    max_rows: int | None = None

    @classmethod
    def from_settings(cls) -> "CsvUploadParser":
        return cls(max_rows=settings.IMPORT_MAX_ROWS)

    def parse(self, payload: Any) -> ParsedUpload:
        if isinstance(payload, bytes):
            try:
                text = payload.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ImportStructureError("INVALID_CSV_FORMAT", f"CSV file is not UTF-8 text: {e}") from e
        else:
            text = str(payload).lstrip("\ufeff")

        try:
            reader = csv.DictReader(io.StringIO(text, newline=""), strict=True)
            headers = [h.strip() for h in (reader.fieldnames or [])]
            reader.fieldnames = headers
            records = [rec for rec in reader if not _is_blank(rec)]
        except csv.Error as e:
            raise ImportStructureError("INVALID_CSV_FORMAT", f"Could not parse CSV: {e}") from e

        if not headers:
            raise ImportStructureError("EMPTY_IMPORT", "CSV file is empty or has no data")

        log.info("CSV headers found: %s", headers)

        missing = [c for c in REQUIRED_CSV_COLUMNS if c not in headers]
        if missing:
            raise ImportStructureError(
                "INVALID_CSV_FORMAT",
                f"Missing required columns: {', '.join(missing)}",
            )

        return ParsedUpload(
            rows=number_rows([_to_raw_row(r) for r in records], max_rows=self.max_rows),
            metadata=None,
        )


def parse_csv_upload(content: bytes | str, *, max_rows: int | None = None) -> ParsedUpload:
    parser = CsvUploadParser.from_settings() if max_rows is None else CsvUploadParser(max_rows=max_rows)
    return parser.parse(content)
