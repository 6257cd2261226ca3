"""
models.py
---------
Records exchanged with the launch store (pydantic, validated on the way in
and serialized on the way out) and the per-pass intermediates (dataclasses,
never persisted).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

Precision = Literal["quarter", "half", "year", "month", "day", "hour"]


class CatalogLaunch(BaseModel):
    id: str
    name: str
    flight_number: int = Field(..., ge=1)
    upcoming: bool
    auto_update: bool = False

    @property
    def eligible(self) -> bool:
        return self.upcoming and self.auto_update


class LaunchSite(BaseModel):
    id: str
    name: str
    timezone: str


class ReconciledUpdate(BaseModel):
    """Partial update body sent to PATCH /launches/{id}."""

    flight_number: int = Field(..., ge=1)
    date_unix: int
    date_utc: str
    date_local: str
    date_precision: Precision
    launchpad: str
    tbd: bool
    net: bool


@dataclass(frozen=True)
class ManifestRow:
    index: int
    raw_date: str
    payload: str
    launchpad: str


@dataclass(frozen=True)
class NormalizedDate:
    text: str
    kind: str
    instant: datetime
    tbd: bool = False
    net: bool = False


@dataclass
class PassResult:
    status: str
    updates: List[Tuple[CatalogLaunch, ReconciledUpdate]] = field(default_factory=list)
    error: Optional[Exception] = None
    raw: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def summary(self) -> dict:
        return {
            "status": self.status,
            "updated": [
                {"launch": launch.name, "id": launch.id, **update.model_dump()}
                for launch, update in self.updates
            ],
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "raw": self.raw,
        }
