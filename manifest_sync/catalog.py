"""
catalog.py
----------
Client for the launch record store (SpaceX-API v4 query/patch routes).
Only the calls the reconciliation pass needs: list launches, look up one
launchpad by name, partially update one launch, ping the healthcheck.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError

from manifest_sync.config import Settings
from manifest_sync.errors import CatalogWriteError, SiteLookupMiss, UpstreamFetchError
from manifest_sync.models import CatalogLaunch, LaunchSite
from manifest_sync.validate_catalog import validate_launch_docs

logger = logging.getLogger(__name__)


def partition_launches(launches: List[CatalogLaunch]) -> Tuple[List[CatalogLaunch], List[CatalogLaunch]]:
    """(completed, upcoming), each in the order given."""
    completed = [launch for launch in launches if not launch.upcoming]
    upcoming = [launch for launch in launches if launch.upcoming]
    return completed, upcoming


class CatalogStore:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "CatalogStore":
        return cls(settings.api_url, settings.api_key, settings.http_timeout, session)

    def query(self, collection: str, query: Dict[str, Any], options: Dict[str, Any]) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/{collection}/query"
        try:
            resp = self.session.post(url, json={"query": query, "options": options}, timeout=self.timeout)
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamFetchError(f"Query {url} failed: {exc}", raw=str(query)) from exc
        if not isinstance(body, dict) or not isinstance(body.get("docs"), list):
            raise UpstreamFetchError(f"Query {url} returned no docs list", raw=str(body)[:200])
        return body["docs"]

    def list_launches(self) -> List[CatalogLaunch]:
        docs = self.query(
            "launches",
            {},
            {"pagination": False, "sort": {"flight_number": "asc"}},
        )
        launches = validate_launch_docs(docs)
        return sorted(launches, key=lambda launch: launch.flight_number)

    def get_completed_ordered(self) -> List[CatalogLaunch]:
        return partition_launches(self.list_launches())[0]

    def get_upcoming(self, auto_update: bool = True) -> List[CatalogLaunch]:
        upcoming = partition_launches(self.list_launches())[1]
        if auto_update:
            upcoming = [launch for launch in upcoming if launch.auto_update]
        return upcoming

    def resolve_site(self, name: str) -> Optional[LaunchSite]:
        docs = self.query("launchpads", {"name": name}, {"limit": 1})
        if not docs:
            return None
        doc = docs[0]
        if not isinstance(doc, dict):
            raise UpstreamFetchError(f"Launchpad query for {name!r} returned a non-document", raw=str(doc)[:200])
        if not doc.get("id") or not doc.get("timezone"):
            raise SiteLookupMiss(f"Launchpad {name!r} has no id/timezone", raw=name)
        try:
            return LaunchSite(id=doc["id"], name=doc.get("name", name), timezone=doc["timezone"])
        except ValidationError as exc:
            raise UpstreamFetchError(f"Launchpad {name!r} is malformed: {exc}", raw=str(doc)[:200]) from exc

    def patch_launch(self, launch_id: str, fields: Dict[str, Any]) -> None:
        url = f"{self.base_url}/launches/{launch_id}"
        try:
            resp = self.session.patch(
                url, json=fields, headers={"spacex-key": self.api_key}, timeout=self.timeout
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise CatalogWriteError(f"PATCH {url} failed: {exc}", raw=str(fields)) from exc


def ping_healthcheck(url: Optional[str], session: Optional[requests.Session] = None, timeout: float = 10.0) -> bool:
    """Fire-and-forget liveness ping; a failed ping never fails the pass."""
    if not url:
        return False
    try:
        resp = session.get(url, timeout=timeout) if session is not None else requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Healthcheck ping failed: %s", exc)
        return False
    return True
