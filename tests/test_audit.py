from routecore.models.domain import GeoRecord
from routecore.services.balancing import analyze_sequence_gap, quick_route_audit


def _record(rid: str, route, lat, lon, day="SUN", region="Riyadh") -> GeoRecord:
    return GeoRecord(
        id=rid,
        name=f"Customer {rid}",
        latitude=lat,
        longitude=lon,
        route_name=route,
        region_description=region,
        day=day,
    )


def test_quick_audit_flags_outlier_closer_to_other_route():
    records = [
        _record("a1", "A", 24.700, 46.700),
        _record("a2", "A", 24.701, 46.701),
        _record("a3", "A", 24.699, 46.699),
        _record("a4", "A", 24.700, 46.702),
        _record("a5", "A", 24.900, 46.700),  # far north, next to route B
        _record("b1", "B", 24.900, 46.710),
        _record("b2", "B", 24.901, 46.711),
    ]

    audit = quick_route_audit(records)

    assert audit.isolated_count == 1
    assert audit.potential_savings_km > 10


def test_quick_audit_clean_routes():
    records = [
        _record("a1", "A", 24.70, 46.70),
        _record("a2", "A", 24.71, 46.70),
        _record("b1", "B", 24.90, 46.70),
        _record("x1", None, 24.80, 46.70),
        _record("x2", "B", 0.0, 0.0),
    ]
    audit = quick_route_audit(records)
    assert audit.isolated_count == 0
    assert audit.potential_savings_km == 0


def test_sequence_gap_move_day():
    target = _record("t", "A", 24.700, 46.700, day="SUN")
    neighbour = _record("n", "A", 24.701, 46.700, day="MON")

    gap = analyze_sequence_gap(target, [target, neighbour])

    assert gap is not None
    assert gap.kind == "MOVE_DAY"
    assert gap.neighbour_id == "n"
    assert "MON" in gap.detail


def test_sequence_gap_swap_route():
    target = _record("t", "A", 24.700, 46.700)
    neighbour = _record("n", "B", 24.701, 46.700)

    gap = analyze_sequence_gap(target, [target, neighbour])

    assert gap.kind == "SWAP_ROUTE"
    assert "'B'" in gap.detail


def test_sequence_gap_none_cases():
    target = _record("t", "A", 24.700, 46.700)
    same_day = _record("n", "A", 24.701, 46.700)
    far = _record("f", "B", 24.750, 46.700)
    other_region = _record("o", "B", 24.7001, 46.700, region="Makkah")

    assert analyze_sequence_gap(target, [target, same_day]) is None
    assert analyze_sequence_gap(target, [target, far]) is None
    assert analyze_sequence_gap(target, [target, other_region]) is None
    assert analyze_sequence_gap(_record("z", "A", 0.0, 0.0), [target]) is None
