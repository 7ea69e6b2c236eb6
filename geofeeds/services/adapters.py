# geofeeds/services/adapters.py
"""
Provider adapters.

One generic pipeline serves every feed; what differs per provider lives here:
  - build_query:  FilterCriteria → URL + query params
  - flat_records: pull a flat record list out of a non-GeoJSON document
  - reshape:      flat record → canonical GeoJSON Feature
  - properties:   canonical Feature → Event field values

Sources:
  - eonet:   NASA EONET v3 natural events (GeoJSON or flat `events` list)
  - usgs:    USGS real-time earthquake summary feeds (GeoJSON)
  - weather: OpenWeatherMap current weather by place (single observation)
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Type

from geofeeds.core.contracts import (
    CategoryOption,
    EventSource,
    FeedQuery,
    FilterCriteria,
    GeoJSON,
    ProviderKind,
)
from geofeeds.core.settings import settings
from geofeeds.core.time import epoch_ms_to_iso
from geofeeds.services.filters import to_query_params


def _safe_float(x: Any) -> Optional[float]:
    if isinstance(x, bool):
        return None
    try:
        f = float(x)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def _str_or_empty(x: Any) -> str:
    return str(x).strip() if x is not None else ""


def _latest_geometry(geoms: List[Any]) -> Optional[Dict[str, Any]]:
    # EONET lists an event's geometries oldest → newest
    for g in reversed(geoms):
        if isinstance(g, dict):
            return g
    return None


def _sources(raw: Any) -> List[EventSource]:
    out: List[EventSource] = []
    if not isinstance(raw, list):
        return out
    for s in raw:
        if isinstance(s, dict) and s.get("id") is not None:
            out.append(EventSource(id=str(s["id"]), url=_str_or_empty(s.get("url"))))
    return out


class FeedAdapter:
    """Base adapter. Defaults understand EONET-shaped canonical features."""

    provider: ProviderKind
    label: str = ""

    def build_query(self, criteria: FilterCriteria) -> FeedQuery:
        raise NotImplementedError

    def categories(self) -> List[CategoryOption]:
        return []

    def flat_records(self, document: Any) -> Optional[List[Any]]:
        if isinstance(document, dict) and isinstance(document.get("events"), list):
            return document["events"]
        return None

    def reshape(self, record: Dict[str, Any]) -> GeoJSON:
        geom = record.get("geometry")
        if isinstance(geom, list):
            geom = _latest_geometry(geom)
        g = geom if isinstance(geom, dict) else {}

        return {
            "type": "Feature",
            "id": record.get("id"),
            "properties": {
                "id": record.get("id"),
                "title": record.get("title"),
                "description": record.get("description") or "",
                "closed": record.get("closed"),
                "categories": record.get("categories") or [],
                "sources": record.get("sources") or [],
                "link": record.get("link"),
                "date": g.get("date"),
                "magnitudeValue": g.get("magnitudeValue"),
                "magnitudeUnit": g.get("magnitudeUnit"),
            },
            "geometry": geom,
        }

    def properties(self, feature: Dict[str, Any]) -> Dict[str, Any]:
        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            props = {}

        category_id: Optional[str] = None
        category_label: Optional[str] = None
        cats = props.get("categories")
        if isinstance(cats, list) and cats and isinstance(cats[0], dict):
            first = cats[0]
            if first.get("id") is not None:
                category_id = str(first["id"])
            category_label = _str_or_empty(first.get("title")) or None

        extra: Dict[str, Any] = {}
        mv = _safe_float(props.get("magnitudeValue"))
        if mv is not None:
            extra["magnitude_value"] = mv
            extra["magnitude_unit"] = _str_or_empty(props.get("magnitudeUnit"))

        return {
            "id": props.get("id") if props.get("id") is not None else feature.get("id"),
            "title": _str_or_empty(props.get("title")),
            "description": _str_or_empty(props.get("description")),
            # EONET `closed` is a close date or null; absent → still open
            "is_open": not bool(props.get("closed")),
            "category_id": category_id,
            "category_label": category_label,
            "magnitude": None,
            "sources": _sources(props.get("sources")),
            "occurred_at": _str_or_empty(props.get("date")) or None,
            "url": _str_or_empty(props.get("link")) or None,
            "extra": extra,
        }


# ══════════════════════════════════════════════════════════════
# NASA EONET
# ══════════════════════════════════════════════════════════════

class EonetAdapter(FeedAdapter):
    provider: ProviderKind = "eonet"
    label = "Natural events (NASA EONET)"

    def __init__(self, *, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.eonet_base_url).rstrip("/")
        self._categories: List[CategoryOption] = []

    @property
    def events_url(self) -> str:
        return f"{self.base_url}/events/geojson"

    @property
    def categories_url(self) -> str:
        return f"{self.base_url}/categories"

    @property
    def layers_url(self) -> str:
        return f"{self.base_url}/layers"

    def set_categories(self, categories: List[CategoryOption]) -> None:
        self._categories = list(categories)

    def categories(self) -> List[CategoryOption]:
        return list(self._categories)

    def build_query(self, criteria: FilterCriteria) -> FeedQuery:
        return FeedQuery(url=self.events_url, params=to_query_params(criteria))


# ══════════════════════════════════════════════════════════════
# USGS earthquakes
# ══════════════════════════════════════════════════════════════

USGS_MAGNITUDES: List[CategoryOption] = [
    CategoryOption(id="all", title="All magnitudes"),
    CategoryOption(id="1.0", title="M1.0+"),
    CategoryOption(id="2.5", title="M2.5+"),
    CategoryOption(id="4.5", title="M4.5+"),
    CategoryOption(id="significant", title="Significant"),
]


def usgs_period(window_days: Optional[int]) -> str:
    if window_days is None or window_days <= 1:
        return "day"
    if window_days <= 7:
        return "week"
    return "month"


class UsgsAdapter(FeedAdapter):
    provider: ProviderKind = "usgs"
    label = "Earthquakes (USGS)"

    def __init__(self, *, base_url: str | None = None) -> None:
        self.base_url = (base_url or settings.usgs_feed_base_url).rstrip("/")

    def categories(self) -> List[CategoryOption]:
        return list(USGS_MAGNITUDES)

    def build_query(self, criteria: FilterCriteria) -> FeedQuery:
        magnitude = criteria.category or "all"
        period = usgs_period(criteria.window_days)
        return FeedQuery(
            url=f"{self.base_url}/{magnitude}_{period}.geojson",
            params={"limit": str(criteria.limit)},
        )

    def flat_records(self, document: Any) -> Optional[List[Any]]:
        # Summary feeds are always FeatureCollections
        return None

    def properties(self, feature: Dict[str, Any]) -> Dict[str, Any]:
        props = feature.get("properties") or {}
        if not isinstance(props, dict):
            props = {}

        extra: Dict[str, Any] = {}
        geom = feature.get("geometry")
        coords = geom.get("coordinates") if isinstance(geom, dict) else None
        if isinstance(coords, list) and len(coords) > 2:
            depth = _safe_float(coords[2])
            if depth is not None:
                extra["depth_km"] = depth
        for key, out_key in (("place", "place"), ("magType", "mag_type"), ("status", "review_status")):
            v = _str_or_empty(props.get(key))
            if v:
                extra[out_key] = v

        place = _str_or_empty(props.get("place"))
        url = _str_or_empty(props.get("url")) or None
        return {
            "id": feature.get("id") if feature.get("id") is not None else props.get("code"),
            "title": _str_or_empty(props.get("title")) or place,
            "description": place,
            "is_open": True,
            "category_id": "earthquakes",
            "category_label": "Earthquake",
            "magnitude": _safe_float(props.get("mag")),
            "sources": [EventSource(id="USGS", url=url)] if url else [],
            "occurred_at": epoch_ms_to_iso(props.get("time")),
            "url": url,
            "extra": extra,
        }


# ══════════════════════════════════════════════════════════════
# OpenWeatherMap
# ══════════════════════════════════════════════════════════════

class WeatherAdapter(FeedAdapter):
    provider: ProviderKind = "weather"
    label = "Current weather (OpenWeatherMap)"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        place: str | None = None,
        base_url: str | None = None,
        units: str | None = None,
        lang: str | None = None,
    ) -> None:
        self.api_key = settings.openweather_api_key if api_key is None else api_key
        self.place = place or settings.openweather_place
        self.base_url = (base_url or settings.openweather_base_url).rstrip("/")
        self.units = units or settings.openweather_units
        self.lang = lang or settings.openweather_lang

    def build_query(self, criteria: FilterCriteria) -> FeedQuery:
        return FeedQuery(
            url=f"{self.base_url}/weather",
            params={
                "q": self.place,
                "appid": self.api_key,
                "units": self.units,
                "lang": self.lang,
            },
        )

    def flat_records(self, document: Any) -> Optional[List[Any]]:
        if isinstance(document, dict):
            if isinstance(document.get("list"), list):
                return document["list"]
            if "coord" in document:
                return [document]
        return None

    def reshape(self, record: Dict[str, Any]) -> GeoJSON:
        coord = record.get("coord")
        geometry = None
        if isinstance(coord, dict) and "lon" in coord and "lat" in coord:
            geometry = {"type": "Point", "coordinates": [coord.get("lon"), coord.get("lat")]}

        main = record.get("main") if isinstance(record.get("main"), dict) else {}
        wind = record.get("wind") if isinstance(record.get("wind"), dict) else {}
        sys_ = record.get("sys") if isinstance(record.get("sys"), dict) else {}
        weather = record.get("weather")
        first = weather[0] if isinstance(weather, list) and weather and isinstance(weather[0], dict) else {}

        name = _str_or_empty(record.get("name"))
        country = _str_or_empty(sys_.get("country"))

        extra: Dict[str, Any] = {}
        for key, value in (
            ("temperature", _safe_float(main.get("temp"))),
            ("humidity", _safe_float(main.get("humidity"))),
            ("wind_speed", _safe_float(wind.get("speed"))),
        ):
            if value is not None:
                extra[key] = value
        if self.units:
            extra["units"] = self.units

        return {
            "type": "Feature",
            "id": record.get("id"),
            "properties": {
                "id": record.get("id"),
                "title": ", ".join(p for p in (name, country) if p),
                "description": _str_or_empty(first.get("description")),
                "closed": None,
                "categories": [{"id": "tempExtremes", "title": "Weather"}],
                "sources": [],
                "extra": extra,
            },
            "geometry": geometry,
        }

    def properties(self, feature: Dict[str, Any]) -> Dict[str, Any]:
        values = super().properties(feature)
        props = feature.get("properties") or {}
        if isinstance(props, dict) and isinstance(props.get("extra"), dict):
            values["extra"] = dict(props["extra"])
        return values


ADAPTERS: Dict[str, Type[FeedAdapter]] = {
    "eonet": EonetAdapter,
    "usgs": UsgsAdapter,
    "weather": WeatherAdapter,
}


def adapter_for(provider: str) -> FeedAdapter:
    cls = ADAPTERS.get(provider)
    if cls is None:
        raise KeyError(f"no adapter for provider {provider!r}")
    return cls()
