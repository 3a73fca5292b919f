# inmobiliaria/service_layer/normalizer.py
from __future__ import annotations

from typing import Any

from ..domain.classification import (
    DEFAULT_CONDITION,
    DEFAULT_LISTING_TYPE,
    DEFAULT_PROPERTY_TYPE,
    infer_dwelling_type,
)
from ..domain.location import split_location
from ..domain.parsing import clean_text, get_first, leading_int, parse_price, parse_timestamp
from ..domain.types import NormalizedCandidate, NormalizeResult, RawRow, RowError
from ..exceptions import RowValidationError
from ..models import ImportSource

MIN_TITLE_LEN = 3


def _image_urls(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    out: list[str] = []
    for it in raw:
        # scrapers emit either plain URLs or {"url": ...}
        url = it.get("url") if isinstance(it, dict) else it
        url = clean_text(url)
        if url and url not in out:
            out.append(url)
    return tuple(out)


def _import_note(source: ImportSource | None, *, advertiser: str | None, portal: str | None) -> str | None:
    if source is None:
        return None
    parts = [f"Importado desde {source.value.upper()}"]
    if portal:
        parts.append(f"Portal: {portal}")
    if advertiser:
        parts.append(f"Anunciante: {advertiser}")
    return " - ".join(parts)


def normalize_row(raw: RawRow, *, source: ImportSource | None = None) -> NormalizeResult:
    """
    Raw scraped row -> NormalizedCandidate, or RowError carrying the row number.

    Lenient on everything except title and price: rooms default to 0, area to
    None, and an unsplittable location lands in locality.
    """
    f = raw.fields

    if "_invalid" in f:
        return RowError(row=raw.row, reason="listing is not a JSON object")

    title = clean_text(get_first(f, "titulo", "title"))
    if not title or len(title) < MIN_TITLE_LEN:
        return RowError(
            row=raw.row,
            reason=f"title is required (at least {MIN_TITLE_LEN} characters)",
            title=title,
        )

    try:
        price = parse_price(get_first(f, "precio", "price"))
    except RowValidationError as e:
        return RowError(row=raw.row, reason=str(e), title=title)

    loc = split_location(clean_text(get_first(f, "ubicacion", "location")))
    advertiser = clean_text(f.get("anunciante"))
    portal = clean_text(f.get("portal"))

    return NormalizedCandidate(
        row=raw.row,
        title=title,
        price=price,
        description=clean_text(f.get("descripcion")),
        rooms=leading_int(f.get("habitaciones")) or 0,
        bathrooms=leading_int(f.get("banos")) or 0,
        area_m2=leading_int(f.get("metros")),
        locality=loc.locality,
        province=loc.province,
        property_type=DEFAULT_PROPERTY_TYPE,
        dwelling_type=infer_dwelling_type(title),
        condition=DEFAULT_CONDITION,
        listing_type=DEFAULT_LISTING_TYPE,
        source_url=clean_text(f.get("url")),
        scraped_at=parse_timestamp(f.get("fecha_scraping")),
        advertiser=advertiser,
        owner_name=clean_text(f.get("nombre_contacto")),
        owner_phone=clean_text(f.get("telefono")),
        notes=_import_note(source, advertiser=advertiser, portal=portal),
        image_urls=_image_urls(f.get("imagenes")),
    )
