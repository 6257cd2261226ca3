"""
fetch_manifest.py
-----------------
Downloads the community launch manifest and, when a snapshot directory is
configured, stores a dated copy with SHA256 integrity tracking so an aborted
pass can be replayed from the exact document it saw.
"""

from __future__ import annotations

import datetime
import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

import requests

from manifest_sync.errors import UpstreamFetchError

logger = logging.getLogger(__name__)

# old.reddit.com rejects the default python-requests agent
USER_AGENT = "spacex-manifest-sync/0.1 (+https://github.com/r-spacex/SpaceX-API)"


def sha256sum(path: Path) -> str:
    """Compute SHA256 hash of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def save_snapshot(html: str, snapshot_dir: Path, url: str) -> Path:
    snapshot_dir.mkdir(parents=True, exist_ok=True)
    index_path = snapshot_dir / "index.json"

    now = datetime.datetime.now(datetime.timezone.utc)
    fpath = snapshot_dir / f"manifest_{now:%Y%m%d_%H%M%S_%f}.html"
    with open(fpath, "w", encoding="utf-8") as f:
        f.write(html)

    sha = sha256sum(fpath)
    entry = {
        "file": str(fpath),
        "url": url,
        "bytes": fpath.stat().st_size,
        "sha256": sha,
        "timestamp_utc": now.strftime("%Y-%m-%dT%H:%M:%SZ"),
    }

    if index_path.exists():
        with open(index_path, "r", encoding="utf-8") as f:
            index = json.load(f)
    else:
        index = []

    index.append(entry)
    with open(index_path, "w", encoding="utf-8") as f:
        json.dump(index, f, indent=2)

    logger.info("Manifest snapshot saved: %s (sha256=%s...)", fpath.name, sha[:12])
    return fpath


def fetch_manifest_html(
    url: str,
    timeout: float = 60.0,
    session: Optional[requests.Session] = None,
    snapshot_dir: Optional[Path] = None,
) -> str:
    http = session or requests.Session()
    logger.info("Fetching manifest %s", url)
    try:
        resp = http.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise UpstreamFetchError(f"Manifest fetch failed: {exc}", raw=url) from exc

    html = resp.text
    if snapshot_dir is not None:
        save_snapshot(html, Path(snapshot_dir), url)
    return html
