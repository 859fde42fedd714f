from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Geocoding provider
    geocoding_endpoint: str = "https://api.positionstack.com/v1/forward"
    geocoding_api_key: str = ""
    geocoding_query_param: str = "query"
    geocoding_key_param: str = "access_key"
    country_suffix: str = "Canada"

    # Secondary data providers
    energy_data_endpoint: str = "https://api.eia.gov/v2/total-energy/data/"
    energy_api_key: str = ""
    weather_endpoint: str = "https://api.open-meteo.com/v1/forecast"

    # Optional CORS relay; the target URL is passed as ?url=
    proxy_endpoint: str | None = None

    # Pipeline policies
    estimation_policy: Literal["regional", "coordinate"] = "regional"
    usage_policy: Literal["statistics", "seasonal", "weather"] = "seasonal"
    fallback_monthly_kwh: float = 650.0

    # Outbound HTTP (seconds)
    request_timeout: float = 10.0

    # Redis
    redis_url: str = "redis://localhost:6379"

    # Cache TTLs (seconds)
    cache_ttl_geocode: int = 86400  # 24 hours

    log_level: str = "INFO"

    model_config = {"env_prefix": "HOMEEST_"}


settings = Settings()
