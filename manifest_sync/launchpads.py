"""
launchpads.py
-------------
Maps the launch-site cell of the manifest to a canonical launchpad record.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Tuple

from manifest_sync.errors import SiteLookupMiss, UnresolvedLaunchpadError
from manifest_sync.models import LaunchSite

logger = logging.getLogger(__name__)

DEFAULT_SITE = "CCSFS SLC 40"

# Checked in order; the first prefix that matches decides the site.
SITE_PATTERNS: List[Tuple["re.Pattern[str]", str]] = [
    (re.compile(r"^SLC-40.*$", re.IGNORECASE), "CCSFS SLC 40"),
    (re.compile(r"^LC-39A.*$", re.IGNORECASE), "KSC LC 39A"),
    (re.compile(r"^SLC-4E.*$", re.IGNORECASE), "VAFB SLC 4E"),
    (re.compile(r"^BC.*$", re.IGNORECASE), "STLS"),
    # unknown site: assume the busiest pad
    (re.compile(r"^\?.*$", re.IGNORECASE), DEFAULT_SITE),
]


def site_query(code: str) -> str:
    """Canonical launchpad name for a manifest site code."""
    cleaned = (code or "").strip()
    for pattern, name in SITE_PATTERNS:
        if pattern.match(cleaned):
            return name
    raise UnresolvedLaunchpadError(code)


class LaunchpadResolver:
    """Resolves site codes to LaunchSite records through the catalog store.

    Lookups are memoized by canonical name, so a resolver should live for a
    single pass.
    """

    def __init__(self, store):
        self.store = store
        self._sites: Dict[str, LaunchSite] = {}

    def resolve(self, code: str) -> LaunchSite:
        name = site_query(code)
        if name not in self._sites:
            site = self.store.resolve_site(name)
            if site is None:
                raise SiteLookupMiss(f"Launchpad {name!r} not found", raw=code)
            logger.debug("Resolved %r -> %s (%s, %s)", code, name, site.id, site.timezone)
            self._sites[name] = site
        return self._sites[name]
