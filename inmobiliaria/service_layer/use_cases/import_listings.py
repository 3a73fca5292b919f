# inmobiliaria/service_layer/use_cases/import_listings.py
from __future__ import annotations

import logging
import uuid

from ...config import settings
from ...domain.types import ParsedUpload, RowError
from ...models import ImportSource
from ..batch_writer import BatchWriter
from ..duplicates import DuplicateDetector
from ..normalizer import normalize_row
from ..report import ImportReport
from ..unit_of_work import UnitOfWork

log = logging.getLogger(__name__)


def new_batch_id() -> str:
    return uuid.uuid4().hex


async def import_rows(
    uow: UnitOfWork,
    upload: ParsedUpload,
    *,
    source: ImportSource,
    check_batch_duplicates: bool | None = None,
    batch_id: str | None = None,
) -> ImportReport:
    """
    Parsed upload -> normalized -> classified -> written -> report.

    Rows run sequentially in input order. Nothing here raises for a single bad
    row: normalization failures, duplicates and per-row persistence failures
    all end up as report entries.
    """
    if check_batch_duplicates is None:
        check_batch_duplicates = settings.IMPORT_CHECK_BATCH_DUPLICATES

    batch_id = batch_id or new_batch_id()
    detector = DuplicateDetector(
        uow.properties,
        batch_id=batch_id,
        check_batch_duplicates=check_batch_duplicates,
    )
    writer = BatchWriter(uow=uow, batch_id=batch_id, source=source)
    report = ImportReport(batch_id=batch_id, metadata=upload.metadata)

    log.info("import %s started: source=%s rows=%d", batch_id, source.value, len(upload.rows))

    for raw in upload.rows:
        result = normalize_row(raw, source=source)

        if isinstance(result, RowError):
            report.add(writer.record_error(result))
            continue

        cls = await detector.classify(result)
        if cls.is_duplicate:
            report.add(writer.record_duplicate(result, cls))
            continue

        outcome = await writer.write_new(result)
        if outcome.id is not None:
            detector.accept(result)
        report.add(outcome)

    s = report.summary
    log.info(
        "import %s finished: total=%d success=%d duplicates=%d errors=%d",
        batch_id, s["total"], s["success"], s["duplicates"], s["errors"],
    )
    return report
