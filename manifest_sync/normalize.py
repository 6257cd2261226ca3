"""
normalize.py
------------
Cleans hand-edited manifest cells before they are classified or matched.
Wiki editors add footnotes ([3]), qualifiers (NET, early, mid...), UTC
offsets, question marks and alternate dates ("2022 Mar 3 / Mar 5"); only the
first date is authoritative.
"""

from __future__ import annotations

import re

# "[14:10][3]" / "[14:10][3" / "[14:10]3]"
_FOOTNOTE_AFTER_HOUR = re.compile(
    r"(\[[0-9]{1,2}:[0-9]{2}(?::[0-9]{2})?\])(?:\[[0-9]{1,3}\]|\[[0-9]{1,3}|[0-9]{1,3}\])+"
)
# "2022 Mar3]" where the opening bracket was lost
_FOOTNOTE_AFTER_MONTH = re.compile(r"([0-9]{4}\s*[a-z]{3,9}\s*)(?:[0-9]{1,3}\])+", re.IGNORECASE)
_FOOTNOTE = re.compile(r"~|\[{1,2}[0-9]{1,3}\]")
_BRACKETS = re.compile(r"[\[\]~]")
_QUALIFIERS = re.compile(r"early|mid|late|end|tbd|tba|net", re.IGNORECASE)
_UTC_OFFSET = re.compile(r"-[0-9]{2}:[0-9]{2}")
_UNCERTAINTY = re.compile(r"[()?]")
_CELL_FOOTNOTE = re.compile(r"\[[0-9]{1,3}\]")


def normalize_date(raw: str) -> str:
    """Return the cleaned date text; normalize_date(normalize_date(s)) == normalize_date(s)."""
    text = _FOOTNOTE_AFTER_HOUR.sub(r"\1", raw or "")
    text = _FOOTNOTE_AFTER_MONTH.sub(r"\1", text)
    text = _FOOTNOTE.sub("", text)
    text = _BRACKETS.sub("", text)
    text = _QUALIFIERS.sub(" ", text)
    text = _UTC_OFFSET.sub(" ", text)
    text = _UNCERTAINTY.sub(" ", text)
    text = text.split("/")[0]
    return " ".join(text.split())


def strip_footnotes(raw: str) -> str:
    """Payload and launch-site cells only lose their [n] markers."""
    return _CELL_FOOTNOTE.sub("", raw or "").strip()
