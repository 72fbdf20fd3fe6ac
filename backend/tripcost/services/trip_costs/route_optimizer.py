"""Route optimizer — nearest-neighbour ordering of customer stops.

Builds a pairwise distance matrix over the base and all stops (every pair
requested concurrently), then walks greedily from the base. Pairs the
provider cannot answer are treated as unreachable; once nothing unvisited is
reachable the remaining stops keep their input order.
"""

import asyncio
import logging

from tripcost.services.providers import DistanceProvider
from tripcost.services.trip_costs.models import Leg, Location, Stop

logger = logging.getLogger(__name__)

BASE_LABEL = "Base"


class RouteOptimizer:
    """Orders stops for the shortest greedy tour from the technician base."""

    def __init__(self, distance_provider: DistanceProvider):
        self.distance_provider = distance_provider

    async def build_matrix(self, points: list[Location]) -> list[list[float | None]]:
        n = len(points)
        pairs = [(i, j) for i in range(n) for j in range(n) if i != j]
        results = await asyncio.gather(
            *(self.distance_provider.distance(points[i], points[j]) for i, j in pairs),
            return_exceptions=True,
        )

        matrix: list[list[float | None]] = [[None] * n for _ in range(n)]
        for i in range(n):
            matrix[i][i] = 0.0
        for (i, j), result in zip(pairs, results):
            if isinstance(result, Exception):
                logger.warning(f"Distance {i}->{j} unavailable: {result}")
                continue
            matrix[i][j] = result.distance_km
        return matrix

    async def optimize(self, base: Location, stops: list[Stop]) -> list[Stop]:
        if len(stops) <= 1:
            return list(stops)

        matrix = await self.build_matrix([base, *(s.location for s in stops)])

        ordered: list[Stop] = []
        unvisited = list(range(len(stops)))
        current = 0  # matrix index of the base
        while unvisited:
            best = None
            best_km = None
            for idx in unvisited:
                km = matrix[current][idx + 1]
                if km is None:
                    continue
                if best_km is None or km < best_km:
                    best, best_km = idx, km
            if best is None:
                logger.warning(
                    f"No reachable stop from position {current}; appending {len(unvisited)} in input order"
                )
                ordered.extend(stops[idx] for idx in unvisited)
                break
            ordered.append(stops[best])
            unvisited.remove(best)
            current = best + 1

        logger.info(f"Optimized sequence: {' -> '.join(s.label for s in ordered)}")
        return ordered


async def build_legs(
    distance_provider: DistanceProvider,
    base: Location,
    stops: list[Stop],
) -> tuple[list[Leg], bool]:
    """Compute Base → Stop1 → … → StopN → Base hop by hop.

    Returns the legs and whether the first hop was computable. A failed first
    hop means the trip cannot be driven; later failed hops are skipped.
    """
    waypoints: list[tuple[str, Location]] = [
        (BASE_LABEL, base),
        *((s.label, s.location) for s in stops),
        (BASE_LABEL, base),
    ]

    legs: list[Leg] = []
    for index, ((from_label, origin), (to_label, destination)) in enumerate(
        zip(waypoints, waypoints[1:])
    ):
        try:
            result = await distance_provider.distance(origin, destination)
        except Exception as e:
            if index == 0:
                logger.warning(f"First leg {from_label} -> {to_label} failed, not reachable by road: {e}")
                return [], False
            logger.warning(f"Leg {from_label} -> {to_label} failed, skipped: {e}")
            continue
        legs.append(Leg(from_label, to_label, result.distance_km, result.duration_minutes))

    return legs, True
