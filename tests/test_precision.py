from datetime import datetime, timezone

import pytest

from manifest_sync.errors import SiteLookupMiss, UnparseableDateError
from manifest_sync.precision import (
    classify,
    detect_flags,
    month_number,
    normalize_manifest_date,
    parse_instant,
    render_times,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "raw, kind",
    [
        ("2021 Q2", "quarter"),
        ("2021 H1", "half"),
        ("2021 H2", "half"),
        ("2021", "year"),
        ("2021 [14:10]", "year"),
        ("2021 Nov", "month"),
        ("2021 November", "month"),
        ("2021 Nov 4", "day"),
        ("2021 Nov [14:10]", "month"),
        ("2021 Nov 24 [14:10]", "hour"),
        ("2021 Nov 24 14:10", "hour"),
        ("2021 Nov 24 [14:10:50]", "hour"),
        ("NET late 2021 Nov", "month"),
    ],
)
def test_precision_kind(raw, kind):
    assert normalize_manifest_date(raw).kind == kind


def test_first_rule_wins():
    """A quarter cell is never read as a bare year."""
    assert classify("2021 Q2") == ("2021 2", "quarter")
    assert classify("2021 H2") == ("2021 3", "half")
    assert classify("2021") == ("2021", "year")


@pytest.mark.parametrize(
    "raw, instant",
    [
        ("2021 Nov 24 [14:10]", utc(2021, 11, 24, 14, 10)),
        ("2021 Nov 24 [14:10:50]", utc(2021, 11, 24, 14, 10, 50)),
        ("2021 Nov [14:10]", utc(2021, 11, 1, 14, 10)),
        ("2021 [14:10]", utc(2021, 1, 1, 14, 10)),
        ("2021 Nov 4", utc(2021, 11, 4)),
        ("2021 Sept 5", utc(2021, 9, 5)),
        ("2021 Nov", utc(2021, 11, 1)),
        ("2021", utc(2021, 1, 1)),
        ("2021 Q1", utc(2021, 1, 1)),
        ("2021 Q3", utc(2021, 7, 1)),
        ("2021 Q4", utc(2021, 10, 1)),
        ("2021 H1", utc(2021, 1, 1)),
        ("2021 H2", utc(2021, 7, 1)),
    ],
)
def test_earliest_instant(raw, instant):
    assert normalize_manifest_date(raw).instant == instant


def test_hour_round_trip():
    date = normalize_manifest_date("2021 Nov 24 [14:10]")
    assert date.kind == "hour"
    assert render_times(date.instant, "UTC")[1] == "2021-11-24T14:10:00Z"


def test_flags_come_from_raw_cell():
    date = normalize_manifest_date("NET 2022 Mar 15")
    assert (date.tbd, date.net, date.kind) == (False, True, "day")

    date = normalize_manifest_date("2022 Q2 TBA")
    assert (date.tbd, date.net, date.kind) == (True, False, "quarter")

    assert detect_flags("2022 Mar 15 [18:00]") == (False, False)
    assert detect_flags("tbd") == (True, False)


@pytest.mark.parametrize("raw", ["TBD", "Soon", "2021 Nov 31", "2021 Q5", "mid-2022", "2021 Foo 3"])
def test_unparseable_dates_carry_raw_cell(raw):
    with pytest.raises(UnparseableDateError) as exc:
        normalize_manifest_date(raw)
    assert exc.value.raw == raw


def test_parse_instant_rejects_bad_quarter_layout():
    with pytest.raises(UnparseableDateError):
        parse_instant("2021 12", "quarter")


def test_month_number_accepts_prefixes():
    assert month_number("Sep") == 9
    assert month_number("sept") == 9
    assert month_number("SEPTEMBER") == 9
    assert month_number("may") == 5
    with pytest.raises(ValueError):
        month_number("Mat")


def test_render_times_local_offset():
    unix, date_utc, date_local = render_times(utc(2022, 3, 15, 18), "America/New_York")
    assert unix == 1647367200
    assert date_utc == "2022-03-15T18:00:00Z"
    assert date_local == "2022-03-15T14:00:00-04:00"


def test_render_times_unknown_timezone():
    with pytest.raises(SiteLookupMiss):
        render_times(utc(2022, 3, 15, 18), "Mars/Jezero")
