"""
matching.py
-----------
Fuzzy comparison of catalog launch names against manifest payload cells.

A partial score of 100 is required, so close-but-different names such as
SSO-A and SSO-B never match. Numbered series (Starlink 2 / Starlink 23) also
pass a substring check against each other, so for those the full ratio must
be 100 as well.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from rapidfuzz import fuzz, utils

from manifest_sync.config import STRICT_SERIES
from manifest_sync.models import ManifestRow

logger = logging.getLogger(__name__)


def partial_score(a: str, b: str) -> float:
    return fuzz.partial_ratio(a, b, processor=utils.default_process)


def full_score(a: str, b: str) -> float:
    return fuzz.ratio(a, b, processor=utils.default_process)


def series_pattern(series: Sequence[str] = STRICT_SERIES) -> "re.Pattern[str]":
    names = "|".join(re.escape(name) for name in series) or r"(?!)"
    # program name followed by a numeral, e.g. "Starlink 4-9", "Starlink Group 6-1"
    return re.compile(rf"\b(?:{names})\b\D*[0-9]", re.IGNORECASE)


_DEFAULT_SERIES = series_pattern()


def is_numbered_series(name: str, pattern: Optional["re.Pattern[str]"] = None) -> bool:
    return bool((pattern or _DEFAULT_SERIES).search(name or ""))


def is_match(launch_name: str, payload: str, pattern: Optional["re.Pattern[str]"] = None) -> bool:
    if not utils.default_process(launch_name or "") or not utils.default_process(payload or ""):
        return False
    if partial_score(launch_name, payload) != 100:
        return False
    if is_numbered_series(launch_name, pattern) and full_score(launch_name, payload) != 100:
        return False
    return True


def first_match(
    launch_name: str,
    rows: Iterable[ManifestRow],
    pattern: Optional["re.Pattern[str]"] = None,
) -> Optional[ManifestRow]:
    """First row, in manifest order, accepted for `launch_name`."""
    found = None
    for row in rows:
        if not is_match(launch_name, row.payload, pattern):
            continue
        if found is None:
            found = row
        else:
            logger.warning(
                "%s also matches manifest row %d (%r); keeping row %d",
                launch_name, row.index, row.payload, found.index,
            )
    return found
