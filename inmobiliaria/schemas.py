from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Literal

RowStatus = Literal["success", "duplicate", "error"]


class ImportSummary(BaseModel):
    total: int = Field(..., ge=0)
    success: int = Field(..., ge=0)
    duplicates: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)


class ImportDetail(BaseModel):
    row: int = Field(..., ge=1)
    status: RowStatus
    title: str | None = None

    # success
    id: str | None = None
    # duplicate
    url: str | None = None
    reason: str | None = None
    # error
    error: str | None = None


class ImportMetadata(BaseModel):
    timestamp: Any = None
    url: Any = None
    total: int | float | None = None
    particulares: Any = None
    inmobiliarias: Any = None


class ImportReportOut(BaseModel):
    batch_id: str
    summary: ImportSummary
    details: list[ImportDetail]
    metadata: ImportMetadata | None = None


class ValidateOut(BaseModel):
    valid: bool
    rows: int = Field(..., ge=0)
    metadata: ImportMetadata | None = None


class ImportStatsOut(BaseModel):
    total_imported: int
    imported_today: int
    from_csv: int
    from_json: int
    generated_at: datetime


class DuplicateRef(BaseModel):
    id: str
    title: str
    created_at: datetime


class DuplicateGroupOut(BaseModel):
    url: str
    count: int
    keep: DuplicateRef
    remove: list[DuplicateRef]


class DuplicateAnalysisOut(BaseModel):
    groups: int
    to_remove: int
    duplicates: list[DuplicateGroupOut]


class DuplicateCleanOut(BaseModel):
    groups: int
    removed: int
    removed_ids: list[str]
