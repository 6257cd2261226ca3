import pytest

from manifest_sync.normalize import normalize_date, strip_footnotes


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2022 Mar 15 [18:00]", "2022 Mar 15 18:00"),
        ("2022 Mar 15 [18:00][12]", "2022 Mar 15 18:00"),
        ("2022 Mar 15 [18:00][3", "2022 Mar 15 18:00"),
        ("2022 Mar[5]", "2022 Mar"),
        ("2022 Mar5]", "2022 Mar"),
        ("NET 2022 Q2", "2022 Q2"),
        ("late 2022", "2022"),
        ("Early Mar 2022", "Mar 2022"),
        ("2022 Apr 3 / Apr 5", "2022 Apr 3"),
        ("2022 Jun (?)", "2022 Jun"),
        ("2022 Jun?", "2022 Jun"),
        ("~2022 Q3", "2022 Q3"),
        ("2022 Mar 15 [18:00-04:00]", "2022 Mar 15 18:00"),
        ("  2022 Nov 4  ", "2022 Nov 4"),
    ],
)
def test_normalize_date_strips_editor_noise(raw, expected):
    assert normalize_date(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "2022 Mar 15 [18:00][12]",
        "NET mid 2022 Jun (?)",
        "2021 H2 / 2022 Q1",
        "TBD",
        "2022 Nov 24 [14:10:50]",
        "end of 2023[4]",
        "",
    ],
)
def test_normalize_date_is_idempotent(raw):
    once = normalize_date(raw)
    assert normalize_date(once) == once


def test_normalize_date_handles_none():
    assert normalize_date(None) == ""


def test_strip_footnotes_only_touches_markers():
    """Payload names keep words that look like date qualifiers."""
    assert strip_footnotes("Starlink 4-9[21]") == "Starlink 4-9"
    assert strip_footnotes(" SLC-40[3] ") == "SLC-40"
    assert strip_footnotes("Sentinel-6 Michael Freilich (end of mission)") == "Sentinel-6 Michael Freilich (end of mission)"
