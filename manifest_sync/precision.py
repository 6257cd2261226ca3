"""
precision.py
------------
Maps a normalized manifest date to a UTC instant and a declared precision.

The rules are tried in a fixed order and the first hit wins, so "2021 Q2"
is a quarter and never a year. Quarter and half markers are rewritten to a
quarter index before the instant is parsed (H1 starts in Q1, H2 in Q3).
The tbd/net flags come from the raw cell because normalization strips the
qualifier words.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

import pandas as pd

from manifest_sync.errors import SiteLookupMiss, UnparseableDateError
from manifest_sync.models import NormalizedDate
from manifest_sync.normalize import normalize_date

_TIME = r"\[?\s*[0-9]{1,2}:[0-9]{2}\s*\]?"
_TIME_SECONDS = r"\[?\s*[0-9]{1,2}:[0-9]{2}:[0-9]{2}\s*\]?"
_MONTH = r"[a-z]{3,9}"

YEAR = re.compile(r"\s*[0-9]{4}\s*", re.IGNORECASE)
YEAR_HOUR = re.compile(rf"\s*[0-9]{{4}}\s*{_TIME}\s*", re.IGNORECASE)
MONTH = re.compile(rf"\s*[0-9]{{4}}\s*{_MONTH}\s*", re.IGNORECASE)
DAY = re.compile(rf"\s*[0-9]{{4}}\s*{_MONTH}\s*[0-9]{{1,2}}\s*", re.IGNORECASE)
VAGUE_HOUR = re.compile(rf"\s*[0-9]{{4}}\s*{_MONTH}\s*{_TIME}\s*", re.IGNORECASE)
HOUR = re.compile(rf"\s*[0-9]{{4}}\s*{_MONTH}\s*[0-9]{{1,2}}\s*{_TIME}\s*", re.IGNORECASE)
SECOND = re.compile(rf"\s*[0-9]{{4}}\s*{_MONTH}\s*[0-9]{{1,2}}\s*{_TIME_SECONDS}\s*", re.IGNORECASE)

_NET = re.compile(r"net", re.IGNORECASE)
_TBD = re.compile(r"tbd|tba", re.IGNORECASE)


def _replace(old: str, new: str) -> Callable[[str], Optional[str]]:
    return lambda text: text.replace(old, new, 1) if old in text else None


def _full(pattern: "re.Pattern[str]") -> Callable[[str], Optional[str]]:
    return lambda text: text if pattern.fullmatch(text) else None


# (rule, kind): a rule returns the text to hand to the instant parser, or None.
RULES: List[Tuple[Callable[[str], Optional[str]], str]] = [
    (_replace("Q", ""), "quarter"),
    (_replace("H1", "1"), "half"),
    (_replace("H2", "3"), "half"),
    (_full(YEAR), "year"),
    # the hour is not trusted when only the year is known
    (_full(YEAR_HOUR), "year"),
    (_full(MONTH), "month"),
    (_full(DAY), "day"),
    # no day, so precision cannot exceed the month
    (_full(VAGUE_HOUR), "month"),
    (_full(HOUR), "hour"),
    (_full(SECOND), "hour"),
]

_MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)

_QUARTER_LAYOUT = re.compile(r"(?P<year>[0-9]{4})\s*(?P<q>[0-9])|(?P<q2>[0-9])\s+(?P<year2>[0-9]{4})")
_INSTANT_LAYOUT = re.compile(
    r"(?P<year>[0-9]{4})"
    r"(?:\s*(?P<month>[a-z]{3,9}))?"
    r"(?:\s*(?P<day>[0-9]{1,2})(?![0-9:]))?"
    r"(?:\s*(?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{2})(?::(?P<second>[0-9]{2}))?)?",
    re.IGNORECASE,
)


def detect_flags(raw: str) -> Tuple[bool, bool]:
    """(tbd, net) from the pre-normalization cell."""
    raw = raw or ""
    return bool(_TBD.search(raw)), bool(_NET.search(raw))


def classify(cleaned: str) -> Tuple[str, str]:
    """Return (parser_text, kind) for a normalized date string."""
    for rule, kind in RULES:
        parser_text = rule(cleaned)
        if parser_text is not None:
            return parser_text.strip(), kind
    raise UnparseableDateError(cleaned)


def month_number(token: str) -> int:
    token = token.lower()
    for number, name in enumerate(_MONTH_NAMES, start=1):
        if len(token) >= 3 and name.startswith(token):
            return number
    raise ValueError(f"unknown month {token!r}")


def parse_instant(text: str, kind: str) -> datetime:
    """Earliest UTC instant consistent with `text`; absent fields take their minimum."""
    text = " ".join(text.replace("[", " ").replace("]", " ").split())
    try:
        if kind in ("quarter", "half"):
            m = _QUARTER_LAYOUT.fullmatch(text)
            if not m:
                raise ValueError("expected 'YYYY Q'")
            year = int(m.group("year") or m.group("year2"))
            quarter = int(m.group("q") or m.group("q2"))
            if not 1 <= quarter <= 4:
                raise ValueError(f"quarter {quarter} out of range")
            return datetime(year, 3 * (quarter - 1) + 1, 1, tzinfo=timezone.utc)

        m = _INSTANT_LAYOUT.fullmatch(text)
        if not m:
            raise ValueError("unrecognized layout")
        month = month_number(m.group("month")) if m.group("month") else 1
        return datetime(
            int(m.group("year")),
            month,
            int(m.group("day") or 1),
            int(m.group("hour") or 0),
            int(m.group("minute") or 0),
            int(m.group("second") or 0),
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise UnparseableDateError(text) from exc


def normalize_manifest_date(raw: str) -> NormalizedDate:
    tbd, net = detect_flags(raw)
    cleaned = normalize_date(raw)
    try:
        parser_text, kind = classify(cleaned)
        instant = parse_instant(parser_text, kind)
    except UnparseableDateError as exc:
        # report the cell as the editor wrote it
        raise UnparseableDateError(raw) from exc
    return NormalizedDate(text=cleaned, kind=kind, instant=instant, tbd=tbd, net=net)


def render_times(instant: datetime, tz_name: str) -> Tuple[int, str, str]:
    """(date_unix, date_utc, date_local) for an instant and an IANA timezone."""
    ts = pd.Timestamp(instant)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    ts = ts.tz_convert("UTC")
    try:
        local = ts.tz_convert(tz_name)
    except (KeyError, ValueError) as exc:
        raise SiteLookupMiss(f"Unknown timezone {tz_name!r}", raw=tz_name) from exc
    return int(ts.timestamp()), ts.strftime("%Y-%m-%dT%H:%M:%SZ"), local.isoformat()
