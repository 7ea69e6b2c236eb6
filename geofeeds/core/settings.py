from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # ──────────────────────────────────────────────────────────────
    # NASA EONET — natural events, categories and WMS layer catalog
    # ──────────────────────────────────────────────────────────────

    eonet_base_url: str = Field(
        default="https://eonet.gsfc.nasa.gov/api/v3",
        alias="EONET_BASE_URL",
    )

    # ──────────────────────────────────────────────────────────────
    # USGS earthquake summary feeds ({magnitude}_{period}.geojson)
    # ──────────────────────────────────────────────────────────────

    usgs_feed_base_url: str = Field(
        default="https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary",
        alias="USGS_FEED_BASE_URL",
    )

    # ──────────────────────────────────────────────────────────────
    # OpenWeatherMap current weather. No key → feed disabled.
    # ──────────────────────────────────────────────────────────────

    openweather_api_key: str = Field(default="", alias="OPENWEATHER_API_KEY")
    openweather_base_url: str = Field(
        default="https://api.openweathermap.org/data/2.5",
        alias="OPENWEATHER_BASE_URL",
    )
    openweather_place: str = Field(default="Spain", alias="OPENWEATHER_PLACE")
    openweather_units: str = Field(default="metric", alias="OPENWEATHER_UNITS")
    openweather_lang: str = Field(default="en", alias="OPENWEATHER_LANG")

    # HTTP
    feeds_timeout_s: float = Field(default=15.0, alias="FEEDS_TIMEOUT_S")
    feeds_user_agent: str = Field(default="geofeeds/1.0", alias="FEEDS_USER_AGENT")

    # Refresh policy
    refresh_interval_s: float = Field(default=300.0, alias="REFRESH_INTERVAL_S")  # 5 min
    refresh_retry_delay_s: float = Field(default=10.0, alias="REFRESH_RETRY_DELAY_S")
    auto_refresh_default: bool = Field(default=True, alias="AUTO_REFRESH_DEFAULT")

    # Overlays
    layer_catalog_cap: int = Field(default=10, alias="LAYER_CATALOG_CAP")
    layer_supported_service: str = Field(default="WMS", alias="LAYER_SUPPORTED_SERVICE")

    # Filters
    filter_default_limit: int = Field(default=50, alias="FILTER_DEFAULT_LIMIT")
    filter_max_limit: int = Field(default=500, alias="FILTER_MAX_LIMIT")

    # Marker sizing: radius = clamp(magnitude * k, min, max)
    marker_radius_k: float = Field(default=2.0, alias="MARKER_RADIUS_K")
    marker_radius_min: float = Field(default=4.0, alias="MARKER_RADIUS_MIN")
    marker_radius_max: float = Field(default=30.0, alias="MARKER_RADIUS_MAX")
    marker_icon_radius: float = Field(default=15.0, alias="MARKER_ICON_RADIUS")
    # Strong quakes open their popup as soon as they are drawn
    marker_open_popup_magnitude: float = Field(default=6.0, alias="MARKER_OPEN_POPUP_MAGNITUDE")


settings = Settings()
