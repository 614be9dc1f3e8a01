"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "weather-compare"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    service_name: str = "weather-compare"
    log_level: str = "INFO"
    log_format: str = "json"
    log_buffer_size: int = 200
    # SMHI point forecast (pmp3g)
    forecast_url_template: str = (
        "https://opendata-download-metfcst.smhi.se/api/category/pmp3g/version/2"
        "/geotype/point/lon/{lon}/lat/{lat}/data.json"
    )
    forecast_timeout: float = 15.0
    forecast_coordinate_decimals: int = 6
    # SMHI meteorological observations
    metobs_base_url: str = "https://opendata-download-metobs.smhi.se/api/version/1.0"
    metobs_timeout: float = 30.0
    metobs_hourly_archive: bool = False
    # Nominatim geocoding
    geocode_url: str = "https://nominatim.openstreetmap.org/search"
    geocode_user_agent: str = "WeatherCompareApp/1.0 (weather-compare-app)"
    geocode_country_codes: str = "se"
    geocode_default_limit: int = 30
    geocode_timeout: float = 10.0
    # Insight thresholds
    insight_temp_diff_threshold_c: float = 1.0
    insight_trend_change_threshold_c: float = 2.0
    insight_wind_chill_gap_c: float = 3.0
    insight_wind_chill_max_temp_c: float = 10.0
    insight_wind_chill_min_wind_kmh: float = 4.8
    insight_ideal_temp_c: float = 15.0
    insight_light_wind_limit_mps: float = 5.0
    metrics_enabled: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
