# inmobiliaria/entrypoints/api/routers/duplicates.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import Caller, get_cache, require_admin
from ....adapters.repos.properties import PropertyRepository
from ....config import settings
from ....db import get_session
from ....schemas import DuplicateAnalysisOut, DuplicateCleanOut
from ....service_layer.cache import TtlCache
from ....service_layer.duplicate_cleanup import analyze_duplicates, clean_duplicates

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/duplicates", tags=["duplicates"])

ANALYSIS_CACHE_KEY = "duplicates:analysis"


@router.get("/analyze", response_model=DuplicateAnalysisOut, dependencies=[Depends(require_admin)])
async def analyze(
    session: AsyncSession = Depends(get_session),
    cache: TtlCache = Depends(get_cache),
) -> dict[str, Any]:
    hit = cache.get(ANALYSIS_CACHE_KEY)
    if hit is not None:
        return hit

    out = await analyze_duplicates(PropertyRepository(session))
    cache.set(ANALYSIS_CACHE_KEY, out, settings.STATS_CACHE_TTL_S)
    return out


@router.delete("/clean", response_model=DuplicateCleanOut)
async def clean(
    session: AsyncSession = Depends(get_session),
    cache: TtlCache = Depends(get_cache),
    caller: Caller = Depends(require_admin),
) -> dict[str, Any]:
    out = await clean_duplicates(PropertyRepository(session))
    await session.commit()
    cache.clear()
    log.info("duplicate clean-up by %s removed %d listings", caller.subject, out["removed"])
    return out
