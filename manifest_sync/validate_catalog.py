"""
validate_catalog.py
-------------------
Validates launch documents returned by the record store for shape, fields,
and basic types using pandas + pandera before they are turned into
CatalogLaunch records. A malformed catalog is an upstream failure: nothing
is reconciled against it.

Run directly to check the live catalog:
    python -m manifest_sync.validate_catalog
"""
from __future__ import annotations

import logging
import warnings
from typing import Any, Dict, List

import pandas as pd
import pandera as pa
from pandera import Check, Column
from rich.console import Console

from manifest_sync.errors import UpstreamFetchError
from manifest_sync.models import CatalogLaunch

warnings.filterwarnings("ignore", category=FutureWarning, module="pandera")

console = Console()
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = [
    "id",
    "name",
    "flight_number",
    "upcoming",
    "auto_update",
]


def build_schema() -> pa.DataFrameSchema:
    return pa.DataFrameSchema(
        columns={
            "id": Column(pa.String, nullable=False, unique=True),
            "name": Column(pa.String, nullable=False),
            "flight_number": Column(pa.Int, nullable=False, checks=Check.ge(1)),
            "upcoming": Column(pa.Bool, nullable=False),
            "auto_update": Column(pa.Bool, nullable=False),
        },
        coerce=True,
        strict=False,
    )


def validate_launch_docs(docs: List[Dict[str, Any]]) -> List[CatalogLaunch]:
    df = pd.DataFrame(docs)
    # records created before auto_update existed never opt in
    if "auto_update" in df.columns:
        df["auto_update"] = df["auto_update"].eq(True)
    elif len(df):
        df["auto_update"] = False

    missing = [c for c in REQUIRED_FIELDS if c not in df.columns]
    if missing:
        msg = f"Missing required launch fields: {missing}"
        logger.error(msg)
        raise UpstreamFetchError(msg, raw=str(list(df.columns)))

    try:
        checked = build_schema().validate(df[REQUIRED_FIELDS], lazy=True)
    except pa.errors.SchemaErrors as err:
        logger.error("Pandera validation failed:\n%s", err.failure_cases)
        raise UpstreamFetchError(
            "Launch catalog failed validation", raw=str(err.failure_cases.head(5).to_dict("records"))
        ) from err

    # back to plain python scalars; numpy bools/ints are not pydantic-friendly
    return [
        CatalogLaunch(
            id=str(r["id"]),
            name=str(r["name"]),
            flight_number=int(r["flight_number"]),
            upcoming=bool(r["upcoming"]),
            auto_update=bool(r["auto_update"]),
        )
        for r in checked.to_dict("records")
    ]


if __name__ == "__main__":
    from manifest_sync.catalog import CatalogStore, partition_launches
    from manifest_sync.config import Settings

    settings = Settings.from_env()
    try:
        launches = CatalogStore.from_settings(settings).list_launches()
    except UpstreamFetchError as e:
        console.print(f"[red]Catalog validation failed:[/red] {e}")
        raise SystemExit(1)
    completed, upcoming = partition_launches(launches)
    eligible = [launch for launch in upcoming if launch.auto_update]
    console.print(
        f"[green]CATALOG_VALIDATION_OK[/green] {len(launches)} launches "
        f"(completed={len(completed)}, upcoming={len(upcoming)}, auto_update={len(eligible)})"
    )
