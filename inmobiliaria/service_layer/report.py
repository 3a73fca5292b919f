# inmobiliaria/service_layer/report.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..domain.types import OutcomeStatus, RowOutcome


@dataclass
class ImportReport:
    batch_id: str
    outcomes: list[RowOutcome] = field(default_factory=list)
    metadata: dict[str, Any] | None = None

    def add(self, outcome: RowOutcome) -> None:
        if self.outcomes and outcome.row <= self.outcomes[-1].row:
            raise ValueError(f"outcome for row {outcome.row} arrived out of order")
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.outcomes),
            "success": self._count(OutcomeStatus.success),
            "duplicates": self._count(OutcomeStatus.duplicate),
            "errors": self._count(OutcomeStatus.error),
        }

    def details(self) -> list[dict[str, Any]]:
        """Per-row entries in input order, carrying only the fields relevant to each status."""
        out: list[dict[str, Any]] = []
        for o in self.outcomes:
            d: dict[str, Any] = {"row": o.row, "status": o.status.value, "title": o.title}
            if o.status == OutcomeStatus.success:
                d["id"] = o.id
            elif o.status == OutcomeStatus.duplicate:
                d["url"] = o.url
                d["reason"] = o.reason
            else:
                d["error"] = o.error
            out.append(d)
        return out

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "batch_id": self.batch_id,
            "summary": self.summary,
            "details": self.details(),
        }
        if self.metadata is not None:
            out["metadata"] = self.metadata
        return out
