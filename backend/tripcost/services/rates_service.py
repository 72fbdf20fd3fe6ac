"""Rates service — statutory allowance and company billing rates by country/city."""

import logging

from tripcost.data.country_rates import (
    ALPHA2_TO_ALPHA3,
    COMPANY_RATES,
    COUNTRY_NAME_ALIASES,
    COUNTRY_RATES,
    SOURCE_REFERENCE,
)
from tripcost.services.trip_costs.errors import RateNotFound
from tripcost.services.trip_costs.models import Rate

logger = logging.getLogger(__name__)


def _key(value: str | None) -> str | None:
    return value.lower().strip() if value else None


class StaticRatesResolver:
    """Looks up the built-in rate table; city rate first, then the country rate."""

    def __init__(self, rows=None, company_rates: dict[str, float] | None = None):
        self._company = company_rates or COMPANY_RATES
        self._by_country: dict[tuple[str, str | None], Rate] = {}
        self._names: dict[str, str] = {}
        for code, name, city, rate_8h, rate_24h, hotel in rows or COUNTRY_RATES:
            self._by_country[(code, _key(city))] = Rate(
                country_code=code,
                country_name=name,
                city_name=city,
                daily_allowance_8h=float(rate_8h),
                daily_allowance_24h=float(rate_24h),
                hotel_rate_max=float(hotel),
                source="static",
                source_reference=SOURCE_REFERENCE,
                **self._company,
            )
            self._names[_key(name)] = code

    def country_code(self, country: str) -> str | None:
        """Resolve a name, alias, alpha-2 or alpha-3 code to the table's alpha-3 code."""
        normalized = _key(country)
        if not normalized:
            return None
        normalized = COUNTRY_NAME_ALIASES.get(normalized, normalized)
        if normalized in self._names:
            return self._names[normalized]

        upper = normalized.upper()
        if len(upper) == 2:
            upper = ALPHA2_TO_ALPHA3.get(upper, upper)
        if (upper, None) in self._by_country:
            return upper
        return None

    async def get_rate(self, country: str, city: str | None = None) -> Rate:
        code = self.country_code(country)
        if code is None:
            raise RateNotFound(country, city)

        city_key = _key(city)
        if city_key and (code, city_key) in self._by_country:
            return self._by_country[(code, city_key)]
        if (code, None) in self._by_country:
            return self._by_country[(code, None)]
        raise RateNotFound(country, city)

    def countries(self) -> list[str]:
        return sorted({rate.country_name for rate in self._by_country.values()})


rates_service = StaticRatesResolver()
