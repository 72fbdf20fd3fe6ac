import asyncio

import pytest

from tripcost.services.rates_service import StaticRatesResolver, rates_service
from tripcost.services.trip_costs.errors import RateNotFound


def _rate(country, city=None):
    return asyncio.run(rates_service.get_rate(country, city))


def test_germany_rates_with_company_billing():
    rate = _rate("Germany")

    assert rate.country_code == "DEU"
    assert (rate.daily_allowance_8h, rate.daily_allowance_24h, rate.hotel_rate_max) == (14, 28, 20)
    assert (rate.mileage_rate, rate.travel_hour_rate, rate.work_hour_rate) == (0.30, 98, 132)
    assert rate.source == "static"
    assert rate.source_reference == "BMF ARVVwV 2025"


@pytest.mark.parametrize("country", ["Germany", "germany ", "Deutschland", "DEU", "deu", "DE", "de"])
def test_country_spellings_resolve(country):
    assert rates_service.country_code(country) == "DEU"


@pytest.mark.parametrize("country", ["USA", "US", "United States", "us"])
def test_united_states_aliases(country):
    assert rates_service.country_code(country) == "USA"


def test_city_rate_before_country_rate():
    assert _rate("France", "Paris").daily_allowance_24h == 48
    assert _rate("FRA", "paris").city_name == "Paris"
    assert _rate("FR", "Lyon").daily_allowance_24h == 42
    assert _rate("France", "Lyon").city_name is None


def test_unknown_country_raises():
    with pytest.raises(RateNotFound) as exc:
        _rate("Atlantis", "Poseidonia")

    assert exc.value.country == "Atlantis"
    assert "Poseidonia" in str(exc.value)


def test_empty_country_raises():
    with pytest.raises(RateNotFound):
        _rate("")


def test_city_only_table_without_country_row():
    resolver = StaticRatesResolver(rows=[("XYZ", "Testland", "Capital", 10, 20, 30)])

    capital = asyncio.run(resolver.get_rate("Testland", "Capital"))
    assert capital.hotel_rate_max == 30
    with pytest.raises(RateNotFound):
        asyncio.run(resolver.get_rate("Testland", "Village"))


def test_custom_company_rates():
    resolver = StaticRatesResolver(
        rows=[("XYZ", "Testland", None, 10, 20, 30)],
        company_rates={"mileage_rate": 0.42, "travel_hour_rate": 60, "work_hour_rate": 90},
    )

    rate = asyncio.run(resolver.get_rate("XYZ"))

    assert (rate.mileage_rate, rate.travel_hour_rate, rate.work_hour_rate) == (0.42, 60, 90)


def test_countries_are_listed_once():
    countries = rates_service.countries()

    assert "Germany" in countries
    assert countries.count("France") == 1
    assert countries == sorted(countries)
