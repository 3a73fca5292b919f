# inmobiliaria/service_layer/duplicate_cleanup.py
from __future__ import annotations

import logging
from typing import Any

from ..adapters.repos.properties import PropertyRepository
from ..models import Property

log = logging.getLogger(__name__)


def _brief(p: Property) -> dict[str, Any]:
    return {"id": p.id, "title": p.title, "created_at": p.created_at}


async def analyze_duplicates(repo: PropertyRepository) -> dict[str, Any]:
    """
    Pending listings sharing a source URL. The oldest of each group is the one
    kept; the rest would be removed by clean_duplicates().
    """
    groups = await repo.pending_duplicate_url_groups()

    out_groups: list[dict[str, Any]] = []
    for url, props in groups:
        keep, *drop = props
        out_groups.append(
            {
                "url": url,
                "count": len(props),
                "keep": _brief(keep),
                "remove": [_brief(p) for p in drop],
            }
        )

    return {
        "groups": len(out_groups),
        "to_remove": sum(len(g["remove"]) for g in out_groups),
        "duplicates": out_groups,
    }


async def clean_duplicates(repo: PropertyRepository) -> dict[str, Any]:
    """
    Delete every pending duplicate except the oldest per URL. Images go with the
    property; messages stay and lose their property reference.
    Caller commits.
    """
    groups = await repo.pending_duplicate_url_groups()

    removed: list[str] = []
    for url, props in groups:
        for p in props[1:]:
            log.info("removing duplicate %s (url=%s, kept=%s)", p.id, url, props[0].id)
            removed.append(p.id)
            await repo.delete(p)

    return {"groups": len(groups), "removed": len(removed), "removed_ids": removed}
