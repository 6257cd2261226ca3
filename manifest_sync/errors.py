"""
errors.py
---------
Failures that abort a reconciliation pass. Each carries the raw manifest or
store text that triggered it so the abort log line is actionable.
"""

from __future__ import annotations

from typing import Optional


class ReconcileError(Exception):
    """Base class; `raw` is the offending input text, when there is one."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class UnparseableDateError(ReconcileError):
    def __init__(self, raw: str):
        super().__init__(f"No date match: {raw!r}", raw=raw)


class UnresolvedLaunchpadError(ReconcileError):
    def __init__(self, raw: str):
        super().__init__(f"No launchpad match: {raw!r}", raw=raw)


class SiteLookupMiss(ReconcileError):
    pass


class UpstreamFetchError(ReconcileError):
    pass


class ManifestLayoutError(UpstreamFetchError):
    """The manifest table no longer fits the declared TableSchema."""


class CatalogWriteError(ReconcileError):
    pass


class MatchAmbiguity(ReconcileError):
    pass


class DuplicateFlightNumberError(MatchAmbiguity):
    def __init__(self, flight_number: int, holder: str, claimant: str):
        super().__init__(
            f"Flight number {flight_number} already assigned to {holder!r}, "
            f"refusing to assign it to {claimant!r}",
            raw=claimant,
        )
        self.flight_number = flight_number
        self.holder = holder
        self.claimant = claimant
