# inmobiliaria/domain/classification.py
from __future__ import annotations

import re

from ..models import Condition, DwellingType, ListingType, PropertyType

# Scraped sources carry no usable classification; imports get generic values
# and administrators refine them afterwards.
DEFAULT_PROPERTY_TYPE = PropertyType.vivienda
DEFAULT_DWELLING_TYPE = DwellingType.piso
DEFAULT_CONDITION = Condition.buen_estado
DEFAULT_LISTING_TYPE = ListingType.venta

# Checked in order: the first keyword found in the title wins.
_DWELLING_KEYWORDS: list[tuple[tuple[str, ...], DwellingType]] = [
    (("ático", "atico"), DwellingType.atico),
    (("dúplex", "duplex"), DwellingType.duplex),
    (("chalet",), DwellingType.chalet),
    (("villa",), DwellingType.villa),
    (("masía", "masia"), DwellingType.masia),
    (("finca",), DwellingType.finca),
    (("loft", "estudio"), DwellingType.loft),
    (("casa",), DwellingType.casa),
    (("piso",), DwellingType.piso),
]


def infer_dwelling_type(title: object) -> DwellingType:
    """
    Map a listing title to a dwelling type by keyword.
    Conservative: nothing recognised => the generic default (Piso).
    """
    if title is None:
        return DEFAULT_DWELLING_TYPE

    s = str(title).strip().lower()
    s = re.sub(r"[\s_/|-]+", " ", s)

    for keywords, dwelling in _DWELLING_KEYWORDS:
        if any(k in s for k in keywords):
            return dwelling

    return DEFAULT_DWELLING_TYPE
