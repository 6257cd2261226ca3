import logging

import pytest
import requests

from fakes import FakeResponse, FakeSession, launch
from manifest_sync.catalog import CatalogStore, partition_launches, ping_healthcheck
from manifest_sync.errors import CatalogWriteError, SiteLookupMiss, UpstreamFetchError
from manifest_sync.validate_catalog import validate_launch_docs

API = "https://api.example.test/v4"

DOCS = [
    {"id": "b", "name": "Starlink 4-9", "flight_number": 201, "upcoming": True, "auto_update": True, "rocket": "f9"},
    {"id": "a", "name": "Nusantara Satu", "flight_number": 200, "upcoming": False, "auto_update": False},
    {"id": "c", "name": "CRS-25", "flight_number": 202, "upcoming": True},
]


def store_with(routes):
    session = FakeSession(routes)
    return CatalogStore(API, api_key="secret", session=session), session


def test_list_launches_validates_and_orders():
    store, session = store_with({("POST", f"{API}/launches/query"): FakeResponse(payload={"docs": DOCS})})
    launches = store.list_launches()

    assert [l.flight_number for l in launches] == [200, 201, 202]
    assert launches[2].auto_update is False
    method, url, kwargs = session.calls[0]
    assert kwargs["json"]["options"] == {"pagination": False, "sort": {"flight_number": "asc"}}


def test_completed_and_upcoming_views():
    store, _ = store_with({("POST", f"{API}/launches/query"): FakeResponse(payload={"docs": DOCS})})
    assert [l.name for l in store.get_completed_ordered()] == ["Nusantara Satu"]
    assert [l.name for l in store.get_upcoming()] == ["Starlink 4-9"]
    assert [l.name for l in store.get_upcoming(auto_update=False)] == ["Starlink 4-9", "CRS-25"]


@pytest.mark.parametrize(
    "docs",
    [
        [{"id": "a", "name": "X", "flight_number": 0, "upcoming": True}],
        [{"id": "a", "name": "X", "flight_number": None, "upcoming": True}],
        [{"id": "a", "flight_number": 3, "upcoming": True}],
        [],
    ],
)
def test_malformed_catalog(docs):
    with pytest.raises(UpstreamFetchError):
        validate_launch_docs(docs)


@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(500),
        FakeResponse(payload={"results": []}),
        FakeResponse(text="<html>"),
        requests.ConnectionError("no route to host"),
    ],
)
def test_query_failures_are_upstream_errors(response):
    store, _ = store_with({("POST", f"{API}/launches/query"): response})
    with pytest.raises(UpstreamFetchError):
        store.list_launches()


def test_resolve_site():
    pad = {"id": "5e9e4501f509094ba4566f84", "name": "CCSFS SLC 40", "timezone": "America/New_York"}
    store, session = store_with({("POST", f"{API}/launchpads/query"): FakeResponse(payload={"docs": [pad]})})

    site = store.resolve_site("CCSFS SLC 40")

    assert (site.id, site.timezone) == (pad["id"], "America/New_York")
    assert session.calls[0][2]["json"] == {"query": {"name": "CCSFS SLC 40"}, "options": {"limit": 1}}


def test_resolve_site_missing_or_incomplete():
    store, _ = store_with({("POST", f"{API}/launchpads/query"): FakeResponse(payload={"docs": []})})
    assert store.resolve_site("KSC LC 39A") is None

    store, _ = store_with(
        {("POST", f"{API}/launchpads/query"): FakeResponse(payload={"docs": [{"id": "x", "name": "STLS"}]})}
    )
    with pytest.raises(SiteLookupMiss):
        store.resolve_site("STLS")


def test_patch_launch_sends_key():
    store, session = store_with({("PATCH", f"{API}/launches/abc"): FakeResponse(200)})
    store.patch_launch("abc", {"flight_number": 201})
    method, url, kwargs = session.calls[0]
    assert kwargs["json"] == {"flight_number": 201}
    assert kwargs["headers"] == {"spacex-key": "secret"}


def test_patch_launch_rejected():
    store, _ = store_with({("PATCH", f"{API}/launches/abc"): FakeResponse(401)})
    with pytest.raises(CatalogWriteError):
        store.patch_launch("abc", {"flight_number": 201})


def test_partition_keeps_order():
    launches = [launch("A", 1, upcoming=False), launch("B", 2), launch("C", 3, upcoming=False)]
    completed, upcoming = partition_launches(launches)
    assert [l.name for l in completed] == ["A", "C"]
    assert [l.name for l in upcoming] == ["B"]


def test_healthcheck_is_fire_and_forget(caplog):
    url = "https://hc-ping.example.test/uuid"
    assert ping_healthcheck(None) is False
    assert ping_healthcheck(url, FakeSession({("GET", url): FakeResponse(200)})) is True
    with caplog.at_level(logging.WARNING):
        assert ping_healthcheck(url, FakeSession({("GET", url): requests.Timeout("slow")})) is False
    assert "Healthcheck ping failed" in caplog.text


@pytest.mark.parametrize(
    "docs",
    [
        ["KSC LC 39A"],
        [{"id": 42, "name": "KSC LC 39A", "timezone": "America/New_York"}],
    ],
)
def test_malformed_launchpad_doc(docs):
    store, _ = store_with({("POST", f"{API}/launchpads/query"): FakeResponse(payload={"docs": docs})})
    with pytest.raises(UpstreamFetchError):
        store.resolve_site("KSC LC 39A")


def test_healthcheck_without_session(monkeypatch):
    url = "https://hc-ping.example.test/uuid"
    sent = []

    def fake_get(target, timeout):
        sent.append((target, timeout))
        return FakeResponse(200)

    monkeypatch.setattr(requests, "get", fake_get)

    assert ping_healthcheck(url, timeout=5.0) is True
    assert sent == [(url, 5.0)]
