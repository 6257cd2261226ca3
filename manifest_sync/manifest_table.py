"""
manifest_table.py
-----------------
Decodes the manifest table into ManifestRow records.

The wiki table is consumed as flattened text, one line per cell, so the
column layout is a contract with whoever edits the page. That contract is
declared once in TableSchema; when the page drifts the decoder fails here
with ManifestLayoutError instead of silently reading the wrong column.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pandas as pd
import pandera as pa
import requests
from bs4 import BeautifulSoup
from pandera import Check, Column

from manifest_sync.config import MANIFEST_WINDOW
from manifest_sync.errors import ManifestLayoutError
from manifest_sync.fetch_manifest import fetch_manifest_html
from manifest_sync.models import ManifestRow
from manifest_sync.normalize import strip_footnotes

warnings.filterwarnings("ignore", category=FutureWarning, module="pandera")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSchema:
    version: str
    selector: str
    stride: int
    date_offset: int
    launchpad_offset: int
    payload_offset: int


# Date | Vehicle | Launch site | Orbit | Mass | Payload | Customer
WIKI_V1 = TableSchema(
    version="wiki-v1",
    selector="body > div.content > div > div > table:nth-child(7) > tbody",
    stride=7,
    date_offset=0,
    launchpad_offset=2,
    payload_offset=5,
)

ROW_SCHEMA = pa.DataFrameSchema(
    columns={
        "index": Column(pa.Int, checks=Check.ge(0), unique=True),
        "raw_date": Column(pa.String, checks=Check.str_length(min_value=1)),
        # blank payload/site cells are kept; such rows just never match
        "payload": Column(pa.String),
        "launchpad": Column(pa.String),
    },
    checks=Check(lambda df: df["index"].is_monotonic_increasing, error="rows out of order"),
    strict=True,
    coerce=True,
)


def extract_lines(html: str, schema: TableSchema = WIKI_V1) -> List[str]:
    """Non-empty text lines of the manifest table body."""
    soup = BeautifulSoup(html, "html.parser")
    body = soup.select_one(schema.selector)
    text = body.get_text() if body is not None else ""
    if not text.strip():
        raise ManifestLayoutError(
            f"Broken manifest selector for {schema.version}: {schema.selector}",
            raw=schema.selector,
        )
    return [line for line in text.split("\n") if line != ""]


def decode_rows(lines: List[str], schema: TableSchema = WIKI_V1, window: int = MANIFEST_WINDOW) -> List[ManifestRow]:
    if len(lines) % schema.stride:
        raise ManifestLayoutError(
            f"{len(lines)} manifest cells is not a multiple of {schema.stride} ({schema.version})",
            raw=" | ".join(lines[: schema.stride]),
        )

    frame = pd.DataFrame(
        {
            "raw_date": [line.strip() for line in lines[schema.date_offset :: schema.stride]],
            "payload": [strip_footnotes(line) for line in lines[schema.payload_offset :: schema.stride]],
            "launchpad": [strip_footnotes(line) for line in lines[schema.launchpad_offset :: schema.stride]],
        }
    ).head(window)
    frame.insert(0, "index", range(len(frame)))

    try:
        ROW_SCHEMA.validate(frame, lazy=True)
    except pa.errors.SchemaErrors as err:
        logger.error("Manifest rows failed validation:\n%s", err.failure_cases)
        raise ManifestLayoutError(
            f"Manifest rows do not fit {schema.version}", raw=str(err.failure_cases.head(5).to_dict("records"))
        ) from err

    return [
        ManifestRow(index=int(r["index"]), raw_date=r["raw_date"], payload=r["payload"], launchpad=r["launchpad"])
        for r in frame.to_dict("records")
    ]


class ManifestSource:
    """Fetch + extract + decode, configured once per process."""

    def __init__(
        self,
        url: str,
        schema: TableSchema = WIKI_V1,
        window: int = MANIFEST_WINDOW,
        timeout: float = 60.0,
        snapshot_dir: Optional[Path] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.schema = schema
        self.window = window
        self.timeout = timeout
        self.snapshot_dir = snapshot_dir
        self.session = session

    def rows(self) -> List[ManifestRow]:
        html = fetch_manifest_html(self.url, self.timeout, self.session, self.snapshot_dir)
        rows = decode_rows(extract_lines(html, self.schema), self.schema, self.window)
        logger.info("Decoded %d manifest rows (%s)", len(rows), self.schema.version)
        return rows

    __call__ = rows
