"""Statutory travel allowance rates (BMF ARVVwV 2025), EUR.

Rows are (country_code, country_name, city_name, allowance_8h, allowance_24h, hotel_max).
A row without a city is the country-wide rate.
"""

SOURCE_REFERENCE = "BMF ARVVwV 2025"

# Company billing rates applied on top of every statutory row
COMPANY_RATES: dict[str, float] = {
    "mileage_rate": 0.30,
    "travel_hour_rate": 98.00,
    "work_hour_rate": 132.00,
}

COUNTRY_RATES: list[tuple[str, str, str | None, float, float, float]] = [
    # Germany
    ("DEU", "Germany", None, 14, 28, 20),

    # Major European Countries
    ("FRA", "France", "Paris", 32, 48, 159),
    ("FRA", "France", None, 28, 42, 130),
    ("GBR", "United Kingdom", "London", 44, 66, 163),
    ("GBR", "United Kingdom", None, 35, 52, 99),
    ("ITA", "Italy", "Milan", 35, 52, 131),
    ("ITA", "Italy", "Rome", 35, 52, 131),
    ("ITA", "Italy", None, 32, 48, 103),
    ("ESP", "Spain", "Barcelona", 35, 52, 144),
    ("ESP", "Spain", "Madrid", 35, 52, 131),
    ("ESP", "Spain", "Palma de Mallorca", 29, 44, 142),
    ("ESP", "Spain", "Canary Islands", 24, 36, 103),
    ("ESP", "Spain", None, 32, 48, 103),
    ("NLD", "Netherlands", "Amsterdam", 35, 52, 122),
    ("NLD", "Netherlands", None, 32, 48, 122),
    ("BEL", "Belgium", "Brussels", 35, 52, 122),
    ("BEL", "Belgium", None, 32, 48, 122),
    ("AUT", "Austria", "Vienna", 35, 52, 122),
    ("AUT", "Austria", None, 32, 48, 122),
    ("CHE", "Switzerland", "Geneva", 44, 66, 186),
    ("CHE", "Switzerland", None, 43, 64, 180),
    ("SWE", "Sweden", None, 44, 66, 140),
    ("NOR", "Norway", "Oslo", 44, 66, 140),
    ("NOR", "Norway", None, 44, 66, 140),
    ("DNK", "Denmark", "Copenhagen", 34, 50, 193),
    ("DNK", "Denmark", None, 34, 50, 193),
    ("FIN", "Finland", "Helsinki", 34, 50, 193),
    ("FIN", "Finland", None, 34, 50, 193),
    ("POL", "Poland", "Warsaw", 27, 40, 143),
    ("POL", "Poland", "Breslau", 23, 34, 124),
    ("POL", "Poland", None, 23, 34, 124),
    ("CZE", "Czech Republic", None, 21, 32, 77),
    ("SVK", "Slovak Republic", None, 22, 33, 121),
    ("HUN", "Hungary", None, 21, 32, 85),
    ("ROU", "Romania", "Bucharest", 21, 32, 92),
    ("ROU", "Romania", None, 18, 27, 89),
    ("BGR", "Bulgaria", None, 18, 27, 89),
    ("GRC", "Greece", "Athens", 23, 34, 103),
    ("GRC", "Greece", None, 23, 34, 103),
    ("PRT", "Portugal", None, 21, 32, 111),
    ("IRL", "Ireland", "Dublin", 35, 52, 99),
    ("IRL", "Ireland", None, 35, 52, 99),
    ("LUX", "Luxembourg", None, 23, 34, 122),
    ("SVN", "Slovenia", None, 25, 38, 126),
    ("RUS", "Russian Federation", "Moscow", 20, 30, 235),
    ("RUS", "Russian Federation", "St. Petersburg", 19, 28, 133),
    ("RUS", "Russian Federation", None, 19, 28, 133),
    ("UKR", "Ukraine", None, 17, 26, 98),
    ("TUR", "Turkey", "Ankara", 21, 32, 110),
    ("TUR", "Turkey", "Izmir", 29, 44, 120),
    ("TUR", "Turkey", None, 16, 24, 107),

    # North America
    ("USA", "United States", "Atlanta", 52, 77, 182),
    ("USA", "United States", "Boston", 42, 63, 333),
    ("USA", "United States", "Chicago", 44, 65, 233),
    ("USA", "United States", "Houston", 41, 62, 204),
    ("USA", "United States", "Los Angeles", 43, 64, 262),
    ("USA", "United States", "Miami", 44, 65, 256),
    ("USA", "United States", "New York City", 44, 66, 308),
    ("USA", "United States", "San Francisco", 40, 59, 327),
    ("USA", "United States", "Washington, D.C.", 44, 66, 203),
    ("USA", "United States", None, 40, 59, 182),
    ("CAN", "Canada", "Toronto", 40, 59, 182),
    ("CAN", "Canada", "Vancouver", 40, 59, 182),
    ("CAN", "Canada", None, 40, 59, 182),
    ("MEX", "Mexico", "Mexico City", 29, 44, 143),
    ("MEX", "Mexico", None, 26, 39, 124),

    # Asia
    ("CHN", "China", "Beijing", 34, 51, 174),
    ("CHN", "China", "Shanghai", 34, 51, 174),
    ("CHN", "China", None, 34, 51, 174),
    ("JPN", "Japan", "Tokyo", 48, 71, 277),
    ("JPN", "Japan", None, 48, 71, 277),
    ("KOR", "South Korea", "Seoul", 34, 51, 174),
    ("KOR", "South Korea", None, 34, 51, 174),
    ("SGP", "Singapore", None, 48, 71, 277),
    ("IND", "India", "Mumbai", 29, 44, 143),
    ("IND", "India", "New Delhi", 29, 44, 143),
    ("IND", "India", None, 23, 34, 122),
    ("THA", "Thailand", None, 24, 36, 114),
    ("VNM", "Vietnam", None, 24, 36, 111),
    ("ARE", "United Arab Emirates", None, 44, 65, 156),
    ("SAU", "Saudi Arabia", "Jeddah", 38, 57, 181),
    ("SAU", "Saudi Arabia", "Riyadh", 37, 56, 186),
    ("SAU", "Saudi Arabia", None, 37, 56, 181),

    # South America
    ("BRA", "Brazil", "São Paulo", 29, 44, 143),
    ("BRA", "Brazil", "Rio de Janeiro", 29, 44, 143),
    ("BRA", "Brazil", None, 26, 39, 124),
    ("ARG", "Argentina", "Buenos Aires", 29, 44, 143),
    ("ARG", "Argentina", None, 26, 39, 124),

    # Africa
    ("ZAF", "South Africa", "Cape Town", 22, 33, 130),
    ("ZAF", "South Africa", "Johannesburg", 24, 36, 129),
    ("ZAF", "South Africa", None, 20, 29, 109),
    ("EGY", "Egypt", None, 27, 40, 144),

    # Oceania
    ("AUS", "Australia", "Sydney", 44, 66, 203),
    ("AUS", "Australia", None, 40, 59, 182),
]

# ISO 3166-1 alpha-2 → alpha-3
ALPHA2_TO_ALPHA3: dict[str, str] = {
    "PL": "POL", "DE": "DEU", "IT": "ITA", "FR": "FRA", "ES": "ESP",
    "PT": "PRT", "GB": "GBR", "IE": "IRL", "NL": "NLD", "BE": "BEL",
    "AT": "AUT", "CH": "CHE", "CZ": "CZE", "SK": "SVK", "HU": "HUN",
    "RO": "ROU", "BG": "BGR", "GR": "GRC", "HR": "HRV", "SI": "SVN",
    "DK": "DNK", "SE": "SWE", "NO": "NOR", "FI": "FIN", "EE": "EST",
    "LV": "LVA", "LT": "LTU", "MT": "MLT", "CY": "CYP", "LU": "LUX",
    "US": "USA", "CA": "CAN", "MX": "MEX", "BR": "BRA", "AR": "ARG",
    "CN": "CHN", "JP": "JPN", "KR": "KOR", "IN": "IND", "AU": "AUS",
    "NZ": "NZL", "ZA": "ZAF", "EG": "EGY", "TR": "TUR", "IL": "ISR",
    "AE": "ARE", "SA": "SAU", "RU": "RUS", "UA": "UKR", "BY": "BLR",
    "SG": "SGP", "TH": "THA", "VN": "VNM",
}

# Common spellings (lower-case) → table country name (lower-case)
COUNTRY_NAME_ALIASES: dict[str, str] = {
    "usa": "united states",
    "us": "united states",
    "uk": "united kingdom",
    "great britain": "united kingdom",
    "uae": "united arab emirates",
    "holland": "netherlands",
    "deutschland": "germany",
    "italien": "italy",
    "spanien": "spain",
    "frankreich": "france",
    "schweiz": "switzerland",
    "österreich": "austria",
    "polen": "poland",
    "tschechien": "czech republic",
    "czechia": "czech republic",
    "grossbritannien": "united kingdom",
    "großbritannien": "united kingdom",
}
