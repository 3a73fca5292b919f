# inmobiliaria/domain/location.py
from __future__ import annotations

import re
from dataclasses import dataclass

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class SplitLocation:
    locality: str
    province: str


def split_location(text: str | None) -> SplitLocation:
    """
    Best-effort split of scraped "locality, province" text.

      "Igualada, Barcelona"            -> ("Igualada", "Barcelona")
      "Poble Nou, Manresa, Barcelona"  -> ("Poble Nou, Manresa", "Barcelona")
      "Igualada"                       -> ("Igualada", "")

    Never fails: anything unsplittable lands in locality.
    """
    if not text:
        return SplitLocation(locality="", province="")

    parts = [p.strip() for p in str(text).split(",")]
    parts = [p for p in parts if p]

    if len(parts) >= 2:
        return SplitLocation(locality=", ".join(parts[:-1]), province=parts[-1])
    if len(parts) == 1:
        return SplitLocation(locality=parts[0], province="")
    # only separators: ",", " , "
    return SplitLocation(locality="", province="")


def normalize_key(text: str | None) -> str:
    """Case-insensitive, whitespace-collapsed comparison key. Accents are kept."""
    if not text:
        return ""
    return _WS_RE.sub(" ", str(text)).strip().casefold()
