# inmobiliaria/service_layer/import_stats.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from ..adapters.repos.properties import PropertyRepository
from .cache import TtlCache

STATS_CACHE_KEY = "imports:stats"


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def get_import_stats(
    repo: PropertyRepository,
    *,
    cache: TtlCache | None = None,
    ttl: float = 0.0,
    now: datetime | None = None,
) -> dict[str, Any]:
    if cache is not None:
        hit = cache.get(STATS_CACHE_KEY)
        if hit is not None:
            return hit

    now = now or datetime.utcnow()
    counts = await repo.import_counts(since=start_of_day(now))
    out: dict[str, Any] = {**counts, "generated_at": now}

    if cache is not None:
        cache.set(STATS_CACHE_KEY, out, ttl)
    return out
