from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
import dataclasses
import threading
import time
from typing import Optional

from manifest_sync.catalog import CatalogStore
from manifest_sync.config import Settings
from manifest_sync.manifest_table import ManifestSource
from manifest_sync.reconcile import run_pass

app = FastAPI(title="SpaceX Upcoming Launch Sync", version="0.1.0")

SETTINGS = Settings.from_env()

# one pass at a time; the store has no locking of its own
_PASS_LOCK = threading.Lock()
LAST_PASS: Optional[dict] = None


class ReconcileRequest(BaseModel):
    dry_run: bool = False


# ---- collaborators (swapped out in tests) ----
def _store(settings: Settings) -> CatalogStore:
    return CatalogStore.from_settings(settings)


def _manifest(settings: Settings) -> ManifestSource:
    return ManifestSource(
        settings.manifest_url,
        window=settings.manifest_window,
        timeout=settings.http_timeout,
        snapshot_dir=settings.snapshot_dir,
    )


@app.get("/health")
def health():
    return {
        "status": "ok",
        "api_url": SETTINGS.api_url,
        "manifest_url": SETTINGS.manifest_url,
        "write_key_configured": bool(SETTINGS.api_key),
        "pass_running": _PASS_LOCK.locked(),
        "last_pass": LAST_PASS,
    }


@app.post("/reconcile")
def reconcile(req: Optional[ReconcileRequest] = None):
    global LAST_PASS
    req = req or ReconcileRequest()
    if not _PASS_LOCK.acquire(blocking=False):
        raise HTTPException(status_code=409, detail="reconciliation pass already running")
    try:
        t0 = time.time()
        settings = dataclasses.replace(SETTINGS, dry_run=req.dry_run)
        result = run_pass(_store(settings), _manifest(settings).rows, settings)
        summary = result.summary()
        summary["dry_run"] = req.dry_run
        summary["latency_ms"] = round((time.time() - t0) * 1000, 2)
        LAST_PASS = summary
        return summary
    finally:
        _PASS_LOCK.release()
