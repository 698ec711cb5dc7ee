import pytest

from routecore.models.domain import GeoRecord
from routecore.services.proximity import SortSweepIndex, count_nearby, get_index, scan_same_location


def _record(rid: str, lat, lon, client_code=None) -> GeoRecord:
    return GeoRecord(id=rid, name=f"Customer {rid}", latitude=lat, longitude=lon, client_code=client_code)


def test_same_location_pair_and_far_record():
    records = [
        _record("X", 24.7136, 46.6753),
        _record("Z", 24.7586, 46.6753),  # ~5 km north
        _record("Y", 24.71369, 46.6753),  # ~10 m north of X
    ]

    assert scan_same_location(records) == {"X", "Y"}
    # the close pair is below the 20 m floor and the far record is out of range
    assert count_nearby(records, threshold_km=0.3) == 0


def test_same_location_uses_client_code_when_present():
    records = [
        _record("1", 21.5433, 39.1728, client_code="C-001"),
        _record("2", 21.5433, 39.1728),
    ]
    assert scan_same_location(records) == {"C-001", "2"}


def test_same_location_ignores_records_without_fix():
    records = [
        _record("A", 0.0, 0.0),
        _record("B", 0.0, 0.0),
        _record("C", float("nan"), 46.0),
        _record("D", None, 46.0),
        _record("E", 24.7, 46.7),
    ]
    assert scan_same_location(records) == set()
    assert count_nearby(records) == 0


def test_same_location_checks_longitude():
    # same latitude, ~100 m apart east-west
    records = [_record("A", 24.7, 46.7), _record("B", 24.7, 46.701)]
    assert scan_same_location(records) == set()


def test_count_nearby_counts_distinct_records():
    records = [
        _record("A", 24.7000, 46.7000),
        _record("B", 24.7009, 46.7000),  # ~100 m from A
        _record("C", 24.7018, 46.7000),  # ~100 m from B, ~200 m from A
        _record("D", 24.8000, 46.7000),
    ]
    assert count_nearby(records, threshold_km=0.3) == 3
    assert count_nearby(records, threshold_km=0.15) == 3
    assert count_nearby(records, threshold_km=0.05) == 0


def test_count_nearby_excludes_same_location_pairs():
    records = [_record("A", 24.7, 46.7), _record("B", 24.70005, 46.7)]
    assert scan_same_location(records) == {"A", "B"}
    assert count_nearby(records, threshold_km=1.0) == 0


def test_count_nearby_cap_short_circuits():
    records = [_record(str(i), 24.7 + i * 0.0005, 46.7) for i in range(4)]
    index = SortSweepIndex(max_records=3)

    assert count_nearby(records, threshold_km=0.3, index=index) == 0
    assert count_nearby(records, threshold_km=0.3) == 4


def test_input_order_does_not_change_result():
    records = [_record("A", 24.7, 46.7), _record("B", 24.71, 46.7), _record("C", 24.70001, 46.7)]
    assert scan_same_location(records) == scan_same_location(list(reversed(records))) == {"A", "C"}


def test_unknown_index_method():
    with pytest.raises(ValueError):
        get_index("kdtree")
