import math

import pytest

from routecore.models.domain import GeoRecord
from routecore.schemas.cleaning import ProgressMessage
from routecore.services.cleaning import (
    find_duplicate_groups,
    is_exact_match,
    is_fuzzy_match,
    levenshtein,
    normalize_regions,
    run_cleaning_scan,
)
from routecore.services.cleaning.matching import distance_m
from routecore.services.progress import CancellationToken, OperationCancelled


def _record(rid: str, name, lat, lon, region="Jeddah") -> GeoRecord:
    return GeoRecord(id=rid, name=name, latitude=lat, longitude=lon, region_description=region)


def test_levenshtein():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("baqala", "baqala") == 0
    assert levenshtein("", "abc") == 100
    assert levenshtein("a", "abcde") == 100
    assert levenshtein("abc", "abcdef") == 3


def test_distance_m_handles_missing_coordinates():
    a = _record("a", "A", 21.5, 39.2)
    assert distance_m(a, a) == 0
    assert distance_m(a, _record("b", "B", None, 39.2)) == math.inf
    assert distance_m(a, _record("c", "C", "21.5", 39.2)) == math.inf


def test_normalization_rewrites_aliases():
    records = [
        _record("1", "Shop", 21.5, 39.2, region="jeddah consumer"),
        _record("2", "Shop", 21.6, 39.2, region="Jeddah"),
        _record("3", "Shop", 21.7, 39.2, region="  Medina "),
        _record("4", "Shop", 21.8, 39.2, region=None),
        _record("5", "Shop", 21.9, 39.2, region="Abha"),
    ]

    cleaned, edits = normalize_regions(records)

    assert [(e.id, e.old_value, e.new_value) for e in edits] == [
        ("1", "jeddah consumer", "Jeddah"),
        ("3", "  Medina ", "Madinah"),
    ]
    assert all(e.field == "region_description" for e in edits)
    assert [r.region_description for r in cleaned] == ["Jeddah", "Jeddah", "Madinah", None, "Abha"]
    # originals untouched
    assert records[0].region_description == "jeddah consumer"


def test_custom_alias_table():
    records = [_record("1", "Shop", 21.5, 39.2, region="JED")]
    _, edits = normalize_regions(records, {"jed": "Jeddah"})
    assert edits[0].new_value == "Jeddah"


def test_report_counts_normalized_records():
    records = [
        _record("1", "Shop One", 21.5, 39.2, region="jeddah consumer"),
        _record("2", "Shop Two", 21.6, 39.3, region="Jeddah"),
    ]

    report = run_cleaning_scan(records)

    assert report.stats.total_scanned == 2
    assert report.stats.normalized == 1
    assert len(report.normalized_records) == 1
    assert report.normalized_records[0].id == "1"
    assert report.duplicate_groups == []
    assert report.stats.duplicates_found == 0


def test_exact_duplicates_grouped_regardless_of_case_and_whitespace():
    a = _record("a", "Al Noor Market", 21.5433, 39.1728)
    b = _record("b", "  al noor market ", 21.5433, 39.1728)

    assert is_exact_match(a, b)
    assert find_duplicate_groups([a, b]) == [["a", "b"]]


def test_fuzzy_duplicates_within_twenty_metres():
    a = _record("a", "Baqala Salem", 21.54330, 39.1728)
    b = _record("b", "Baqala Saleem", 21.54339, 39.1728)  # ~10 m, one edit

    assert is_fuzzy_match(a, b)
    assert find_duplicate_groups([b, a]) == [["a", "b"]]


def test_short_names_need_exact_spelling():
    a = _record("a", "Abc", 21.54330, 39.1728)
    b = _record("b", "Abd", 21.54335, 39.1728)
    assert not is_fuzzy_match(a, b)
    assert find_duplicate_groups([a, b]) == []


def test_same_name_far_apart_is_not_duplicate():
    a = _record("a", "Panda Hypermarket", 21.5433, 39.1728)
    b = _record("b", "Panda Hypermarket", 21.5451, 39.1728)  # ~200 m
    assert find_duplicate_groups([a, b]) == []


def test_missing_coordinates_never_match():
    records = [
        _record("a", "Shop", 21.5, 39.2),
        _record("b", "Shop", None, 39.2),
        _record("c", "Shop", float("nan"), float("nan")),
        _record("d", "Shop", float("nan"), float("nan")),
        _record("e", None, 21.6, 39.2),
    ]
    report = run_cleaning_scan(records)
    assert report.duplicate_groups == []
    assert report.stats.total_scanned == 5


def test_duplicates_found_counts_records_not_groups():
    records = [
        _record("a1", "Tamimi Markets", 21.50000, 39.20000),
        _record("a2", "tamimi markets", 21.50000, 39.20000),
        _record("a3", "Tamimi Market", 21.50005, 39.20000),
        _record("b1", "Danube", 21.60000, 39.30000),
        _record("b2", "DANUBE", 21.60000, 39.30000),
        _record("c1", "Lulu", 21.70000, 39.40000),
    ]

    report = run_cleaning_scan(records)

    assert sorted(sorted(group) for group in report.duplicate_groups) == [["a1", "a2", "a3"], ["b1", "b2"]]
    assert report.stats.duplicates_found == 5


def test_record_joins_at_most_one_group():
    records = [
        _record("a", "Jarir Bookstore", 21.50000, 39.2),
        _record("b", "Jarir Bookstore", 21.50010, 39.2),  # ~11 m from a
        _record("c", "Jarir Bookstore", 21.50020, 39.2),  # ~11 m from b, ~22 m from a
    ]

    groups = find_duplicate_groups(records)

    assert groups == [["a", "b"]]
    ids = [rid for group in groups for rid in group]
    assert len(ids) == len(set(ids))


def test_exact_twins_stay_together_when_seed_takes_one():
    records = [
        _record("s", "Shop Alpa", 21.49995, 39.2),  # ~6 m south, one edit from "Shop Alpha"
        _record("a", "Shop Alpha  ", 21.5, 39.2),  # three edits from "Shop Alpa" untrimmed
        _record("b", "Shop Alpha", 21.5, 39.2),
    ]
    assert not is_fuzzy_match(records[0], records[1])
    assert is_fuzzy_match(records[0], records[2])

    groups = find_duplicate_groups(records)

    assert groups == [["s", "b", "a"]]


def test_progress_messages_bracket_the_scan():
    seen: list[ProgressMessage] = []
    records = [_record(str(i), f"Shop {i}", 21.5 + i * 0.01, 39.2) for i in range(250)]

    run_cleaning_scan(records, seen.append, progress_floor=100)

    values = [message.progress for message in seen]
    assert values[0] == 0
    assert values[-1] == 100
    assert values == sorted(values)
    assert 40 in values and 80 in values


def test_cancelled_scan_raises():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(OperationCancelled):
        run_cleaning_scan([_record("a", "Shop", 21.5, 39.2)], cancel_token=token)
