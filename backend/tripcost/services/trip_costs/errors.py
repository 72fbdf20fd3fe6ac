"""Trip cost errors — only InvalidInput ever leaves the engine."""


class TripCostError(Exception):
    """Base class for trip cost failures."""


class InvalidInput(TripCostError, ValueError):
    """Raised when the request cannot be costed (no base, no stops, bad date)."""


class RateNotFound(TripCostError, LookupError):
    """No statutory rate for the requested country/city."""

    def __init__(self, country: str, city: str | None = None):
        self.country = country
        self.city = city
        where = f'"{country}"' + (f' (city: "{city}")' if city else "")
        super().__init__(f"Travel rates not found for: {where}")


class RouteUnreachable(TripCostError):
    """No road path between two points."""


class ProviderFailure(TripCostError):
    """A collaborator raised or timed out."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class GeocodingNotFound(TripCostError, LookupError):
    """The geocoder could not resolve an address."""
