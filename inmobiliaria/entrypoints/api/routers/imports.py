# inmobiliaria/entrypoints/api/routers/imports.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import Caller, get_cache, require_admin
from ....adapters.ingestion.csv_upload import parse_csv_upload, render_template
from ....adapters.ingestion.json_upload import parse_json_upload
from ....adapters.repos.properties import PropertyRepository
from ....config import settings
from ....domain.types import ParsedUpload
from ....db import get_session
from ....exceptions import ImportStructureError
from ....models import ImportSource
from ....schemas import ImportReportOut, ImportStatsOut, ValidateOut
from ....service_layer.cache import TtlCache
from ....service_layer.import_stats import get_import_stats
from ....service_layer.unit_of_work import SqlAlchemyUnitOfWork
from ....service_layer.use_cases.import_listings import import_rows

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["imports"])


def _too_large() -> HTTPException:
    return HTTPException(
        status_code=413,
        detail={
            "code": "UPLOAD_TOO_LARGE",
            "message": f"Upload exceeds {settings.IMPORT_MAX_UPLOAD_BYTES} bytes",
        },
    )


def _bad_upload(e: ImportStructureError) -> HTTPException:
    return HTTPException(status_code=400, detail=e.as_detail())


async def _read_body(request: Request) -> bytes:
    limit = settings.IMPORT_MAX_UPLOAD_BYTES
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise _too_large()
    body = await request.body()
    if len(body) > limit:
        raise _too_large()
    return body


async def _run_import(
    session: AsyncSession,
    cache: TtlCache,
    upload: ParsedUpload,
    *,
    source: ImportSource,
    caller: Caller,
) -> dict[str, Any]:
    log.info("%s import requested by %s (%d rows)", source.value, caller.subject, len(upload.rows))
    uow = SqlAlchemyUnitOfWork(session)
    try:
        report = await import_rows(uow, upload, source=source)
    finally:
        # rows committed so far are real regardless of how the request ends
        cache.clear()
    return report.to_dict()


@router.post("/csv/import", response_model=ImportReportOut)
async def import_csv(
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
    cache: TtlCache = Depends(get_cache),
    caller: Caller = Depends(require_admin),
) -> dict[str, Any]:
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail={"code": "INVALID_FILE_TYPE", "message": "Only .csv files are accepted"},
        )

    content = await file.read(settings.IMPORT_MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.IMPORT_MAX_UPLOAD_BYTES:
        raise _too_large()

    try:
        upload = parse_csv_upload(content)
    except ImportStructureError as e:
        raise _bad_upload(e)

    return await _run_import(session, cache, upload, source=ImportSource.csv, caller=caller)


@router.get("/csv/template", dependencies=[Depends(require_admin)])
def csv_template() -> Response:
    return Response(
        content=render_template(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="plantilla_viviendas.csv"'},
    )


@router.post("/json/import", response_model=ImportReportOut)
async def import_json(
    request: Request,
    session: AsyncSession = Depends(get_session),
    cache: TtlCache = Depends(get_cache),
    caller: Caller = Depends(require_admin),
) -> dict[str, Any]:
    body = await _read_body(request)
    try:
        upload = parse_json_upload(body)
    except ImportStructureError as e:
        raise _bad_upload(e)

    return await _run_import(session, cache, upload, source=ImportSource.json, caller=caller)


@router.post("/json/validate", response_model=ValidateOut, dependencies=[Depends(require_admin)])
async def validate_json(request: Request) -> dict[str, Any]:
    """Structural check only; nothing is written."""
    body = await _read_body(request)
    try:
        upload = parse_json_upload(body)
    except ImportStructureError as e:
        raise _bad_upload(e)
    return {"valid": True, "rows": len(upload.rows), "metadata": upload.metadata}


@router.get("/imports/stats", response_model=ImportStatsOut, dependencies=[Depends(require_admin)])
async def import_stats(
    session: AsyncSession = Depends(get_session),
    cache: TtlCache = Depends(get_cache),
) -> dict[str, Any]:
    return await get_import_stats(
        PropertyRepository(session),
        cache=cache,
        ttl=settings.STATS_CACHE_TTL_S,
    )
