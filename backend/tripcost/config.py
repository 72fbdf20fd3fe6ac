from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    # OSRM routing
    osrm_base_url: str = "https://router.project-osrm.org"
    osrm_profile: str = "driving"
    osrm_timeout_seconds: float = 20.0
    osrm_max_retries: int = 2
    osrm_backoff_seconds: float = 1.0

    # Nominatim geocoding
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "tripcost/0.1"
    nominatim_timeout_seconds: float = 10.0

    # Haversine fallback
    fallback_average_speed_kmh: float = 80.0
    fallback_detour_factor: float = 1.3

    # Working day
    default_departure_time: str = "08:00"
    customer_work_hours_start: float = 8.0
    customer_work_hours_end: float = 16.0
    min_setup_hours: float = 0.5
    max_same_day_hours: float = 12.0
    max_daily_hours: float = 8.0

    # Road vs flight
    max_driving_hours_one_way: float = 15.0
    flight_search_threshold_hours: float = 4.0

    # Fuel model (EUR)
    fuel_consumption_l_per_100km: float = 7.0
    rental_fuel_consumption_l_per_100km: float = 7.0
    fuel_rate_per_liter: float = 2.00

    # Flight door-to-door buffers (minutes)
    time_to_airport_minutes: int = 45
    security_boarding_minutes: int = 120
    deboarding_luggage_minutes: int = 45
    airport_to_destination_minutes: int = 60
    default_flight_minutes: int = 105
    estimated_flight_minutes: int = 120

    # Destination ground transport (EUR)
    rental_car_price_per_day: float = 75.0
    default_ground_transport: float = 90.0
    taxi_cost_one_way: float = 45.0
    parking_cost_per_day: float = 15.0

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "TRIPCOST_",
        "extra": "ignore",
    }


settings = Settings()
