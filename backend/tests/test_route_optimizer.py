import asyncio

from fakes import GridDistanceProvider, point
from tripcost.services.trip_costs.models import Stop
from tripcost.services.trip_costs.route_optimizer import RouteOptimizer, build_legs


def _stop(cid: str, lat: float, name: str | None = None) -> Stop:
    return Stop(customer_id=cid, location=point(lat), country="DEU", city=f"City {cid}", work_hours=2, name=name)


BASE = point(0)


def test_single_stop_skips_provider():
    provider = GridDistanceProvider()
    stops = [_stop("A", 3)]

    ordered = asyncio.run(RouteOptimizer(provider).optimize(BASE, stops))

    assert ordered == stops
    assert provider.calls == []


def test_nearest_neighbour_order():
    stops = [_stop("far", 5), _stop("near", 1), _stop("mid", 3)]

    ordered = asyncio.run(RouteOptimizer(GridDistanceProvider()).optimize(BASE, stops))

    assert [s.customer_id for s in ordered] == ["near", "mid", "far"]


def test_matrix_requests_every_ordered_pair():
    provider = GridDistanceProvider()
    stops = [_stop("A", 1), _stop("B", 2), _stop("C", 3)]

    asyncio.run(RouteOptimizer(provider).optimize(BASE, stops))

    assert len(provider.calls) == 4 * 3


def test_optimize_is_idempotent():
    optimizer = RouteOptimizer(GridDistanceProvider())
    stops = [_stop("A", 4), _stop("B", -1.5), _stop("C", 2.2), _stop("D", 7)]

    first = asyncio.run(optimizer.optimize(BASE, stops))
    second = asyncio.run(optimizer.optimize(BASE, first))

    assert second == first


def test_ties_go_to_earlier_input():
    stops = [_stop("east", 2), _stop("west", -2)]

    ordered = asyncio.run(RouteOptimizer(GridDistanceProvider()).optimize(BASE, stops))

    assert ordered[0].customer_id == "east"


def test_unreachable_stops_keep_input_order():
    # base (0) cannot reach 5 or 9; 5 and 9 reach each other but we never get there
    provider = GridDistanceProvider(unreachable={(0, 5), (0, 9), (1, 5), (1, 9)})
    stops = [_stop("island2", 9), _stop("near", 1), _stop("island1", 5)]

    ordered = asyncio.run(RouteOptimizer(provider).optimize(BASE, stops))

    assert [s.customer_id for s in ordered] == ["near", "island2", "island1"]


def test_build_legs_labels_and_totals():
    stops = [_stop("A", 1, name="Acme"), _stop("B", 3)]

    legs, reachable = asyncio.run(build_legs(GridDistanceProvider(), BASE, stops))

    assert reachable
    assert [(leg.from_label, leg.to_label) for leg in legs] == [
        ("Base", "Acme"),
        ("Acme", "City B"),
        ("City B", "Base"),
    ]
    assert sum(leg.distance_km for leg in legs) == 600


def test_build_legs_first_leg_failure_means_not_drivable():
    provider = GridDistanceProvider(unreachable={(0, 4)})

    legs, reachable = asyncio.run(build_legs(provider, BASE, [_stop("A", 4)]))

    assert legs == []
    assert not reachable


def test_build_legs_skips_later_failures():
    provider = GridDistanceProvider(unreachable={(1, 3)})

    legs, reachable = asyncio.run(build_legs(provider, BASE, [_stop("A", 1), _stop("B", 3)]))

    assert reachable
    assert len(legs) == 2
