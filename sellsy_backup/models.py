"""Data models for API envelopes and backup outcomes."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    """Pagination counters returned with every page."""

    offset: int = Field(..., ge=0)
    count: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class PageEnvelope(BaseModel):
    """One paginated API response."""

    data: list[dict[str, Any]]
    pagination: Pagination


@dataclass
class DownloadResult:
    """Outcome of a single document download."""

    number: str
    url: Optional[str]
    path: Optional[Path]
    ok: bool
    error: Optional[str] = None


@dataclass
class DownloadReport:
    """Outcomes of a batch of document downloads."""

    results: list[DownloadResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[DownloadResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[DownloadResult]:
        return [r for r in self.results if not r.ok]

    def extend(self, other: "DownloadReport") -> None:
        self.results.extend(other.results)
