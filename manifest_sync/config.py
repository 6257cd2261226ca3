# Runtime configuration for the upcoming-launch reconciliation job.
#
# SPACEX_API               base URL of the launch record store (no trailing slash)
# SPACEX_KEY               write key sent as the `spacex-key` header on PATCH
# UPCOMING_HEALTHCHECK     optional URL pinged after a fully successful pass
# MANIFEST_URL             community manifest document (HTML, one data table)
# MANIFEST_WINDOW          rows kept from the top of the manifest (near-term horizon)
# HTTP_TIMEOUT             seconds, applied to every request
# MANIFEST_SNAPSHOT_DIR    when set, each fetched manifest is saved there with its sha256
# STRICT_SERIES            numbered series that need an exact name match (comma list)
# FAIL_ON_DUPLICATE_FLIGHT abort the pass when two launches claim one flight number
# LOG_DIR                  directory for upcoming.log
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

API_URL = "https://api.spacexdata.com/v4"
MANIFEST_URL = "https://old.reddit.com/r/spacex/wiki/launches/manifest"
MANIFEST_WINDOW = 30
HTTP_TIMEOUT = 60.0
STRICT_SERIES: Tuple[str, ...] = ("starlink",)
LOG_DIR = Path("logs")

_TRUTHY = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    api_url: str = API_URL
    api_key: str = ""
    healthcheck_url: Optional[str] = None
    manifest_url: str = MANIFEST_URL
    manifest_window: int = MANIFEST_WINDOW
    http_timeout: float = HTTP_TIMEOUT
    snapshot_dir: Optional[Path] = None
    strict_series: Tuple[str, ...] = STRICT_SERIES
    fail_on_duplicate_flight: bool = True
    log_dir: Path = LOG_DIR
    dry_run: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        snapshot = os.getenv("MANIFEST_SNAPSHOT_DIR", "").strip()
        values = dict(
            api_url=os.getenv("SPACEX_API", API_URL).rstrip("/"),
            api_key=os.getenv("SPACEX_KEY", ""),
            healthcheck_url=os.getenv("UPCOMING_HEALTHCHECK", "").strip() or None,
            manifest_url=os.getenv("MANIFEST_URL", MANIFEST_URL),
            manifest_window=int(os.getenv("MANIFEST_WINDOW", MANIFEST_WINDOW)),
            http_timeout=float(os.getenv("HTTP_TIMEOUT", HTTP_TIMEOUT)),
            snapshot_dir=Path(snapshot) if snapshot else None,
            strict_series=_env_list("STRICT_SERIES", STRICT_SERIES),
            fail_on_duplicate_flight=_env_bool("FAIL_ON_DUPLICATE_FLIGHT", True),
            log_dir=Path(os.getenv("LOG_DIR", str(LOG_DIR))),
        )
        values.update(overrides)
        return cls(**values)
