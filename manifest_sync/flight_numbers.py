"""
flight_numbers.py
-----------------
Flight numbers follow manifest order: row i gets base + i. The base depends
on whether the most recent completed launch is still listed as row 0.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from manifest_sync.errors import DuplicateFlightNumberError
from manifest_sync.matching import full_score
from manifest_sync.models import CatalogLaunch

logger = logging.getLogger(__name__)


def base_flight_number(last_completed: Optional[CatalogLaunch], first_payload: Optional[str]) -> int:
    if last_completed is None:
        return 1
    if first_payload and full_score(last_completed.name, first_payload) == 100:
        return last_completed.flight_number
    return last_completed.flight_number + 1


def assign(base: int, row_index: int) -> int:
    return base + row_index


class FlightNumberLedger:
    """Flight numbers handed out during one pass, keyed to the launch that got them."""

    def __init__(self, strict: bool = True):
        self.strict = strict
        self._holders: Dict[int, CatalogLaunch] = {}
        self._duplicates: List[Tuple[int, str, str]] = []

    def claim(self, flight_number: int, launch: CatalogLaunch) -> None:
        holder = self._holders.get(flight_number)
        if holder is not None and holder.id != launch.id:
            self._duplicates.append((flight_number, holder.name, launch.name))
            if self.strict:
                raise DuplicateFlightNumberError(flight_number, holder.name, launch.name)
            logger.warning(
                "Flight number %d assigned to both %s and %s",
                flight_number, holder.name, launch.name,
            )
            return
        self._holders.setdefault(flight_number, launch)

    def duplicates(self) -> List[Tuple[int, str, str]]:
        return list(self._duplicates)

    def __contains__(self, flight_number: int) -> bool:
        return flight_number in self._holders

    def __len__(self) -> int:
        return len(self._holders)
