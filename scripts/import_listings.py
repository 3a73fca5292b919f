from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from inmobiliaria.adapters.ingestion.csv_upload import parse_csv_upload
from inmobiliaria.adapters.ingestion.json_upload import parse_json_upload
from inmobiliaria.db import engine
from inmobiliaria.exceptions import ImportStructureError
from inmobiliaria.logging_config import configure_logging
from inmobiliaria.models import Base, ImportSource
from inmobiliaria.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from inmobiliaria.service_layer.use_cases.import_listings import import_rows

log = logging.getLogger("import_listings")


async def _ensure_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _detect_source(path: Path, forced: str | None) -> ImportSource:
    if forced:
        return ImportSource(forced)
    return ImportSource.csv if path.suffix.lower() == ".csv" else ImportSource.json


async def main() -> int:
    parser = argparse.ArgumentParser(description="Import scraped listings from a CSV or JSON file")
    parser.add_argument("path", type=Path)
    parser.add_argument("--format", choices=[s.value for s in ImportSource], default=None)
    parser.add_argument("--validate-only", action="store_true", help="Run structural checks and exit")
    parser.add_argument(
        "--no-batch-check",
        action="store_true",
        help="Only compare against the catalog, not against earlier rows of the same file",
    )
    args = parser.parse_args()

    configure_logging()

    source = _detect_source(args.path, args.format)
    content = args.path.read_bytes()

    try:
        upload = parse_csv_upload(content) if source == ImportSource.csv else parse_json_upload(content)
    except ImportStructureError as e:
        log.error("%s: %s", e.code, e.message)
        return 2

    if args.validate_only:
        print(json.dumps({"valid": True, "rows": len(upload.rows), "metadata": upload.metadata}, indent=2, default=str))
        return 0

    await _ensure_schema()

    async with SqlAlchemyUnitOfWork() as uow:
        report = await import_rows(
            uow,
            upload,
            source=source,
            check_batch_duplicates=False if args.no_batch_check else None,
        )

    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
