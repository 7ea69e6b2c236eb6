# geofeeds/core/encoding.py
"""
Visual encodings for markers: colour, icon, radius, opacity.

Every function here is total. Unknown, empty or missing keys fall back to a
documented default; nothing raises.
"""
from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from geofeeds.core.settings import settings

DEFAULT_COLOR = "#00d4ff"
DEFAULT_ICON = "bi bi-geo"

OPEN_OPACITY = 1.0
CLOSED_OPACITY = 0.7

# ── EONET category → colour / icon ──────────────────────────────────────
# Thirteen EONET v3 categories. Icons are Bootstrap Icons class names.

CATEGORY_COLORS: Mapping[str, str] = MappingProxyType({
    "drought": "#8B4513",
    "dustHaze": "#DAA520",
    "earthquakes": "#DC143C",
    "floods": "#4169E1",
    "landslides": "#8B4513",
    "manmade": "#696969",
    "seaLakeIce": "#87CEEB",
    "severeStorms": "#9932CC",
    "snow": "#F0F8FF",
    "tempExtremes": "#FF4500",
    "volcanoes": "#FF6347",
    "waterColor": "#20B2AA",
    "wildfires": "#FF4500",
})

CATEGORY_ICONS: Mapping[str, str] = MappingProxyType({
    "drought": "bi bi-sun",
    "dustHaze": "bi bi-cloud-haze",
    "earthquakes": "bi bi-geo-alt",
    "floods": "bi bi-droplet",
    "landslides": "bi bi-mountain",
    "manmade": "bi bi-gear",
    "seaLakeIce": "bi bi-snow",
    "severeStorms": "bi bi-cloud-lightning-rain",
    "snow": "bi bi-snow2",
    "tempExtremes": "bi bi-thermometer-sun",
    "volcanoes": "bi bi-volcano",
    "waterColor": "bi bi-water",
    "wildfires": "bi bi-fire",
})

# ── Magnitude → colour ───────────────────────────────────────────────────
# (exclusive upper bound, colour), checked in ascending order. The last
# bucket catches everything >= 7.0.

MAGNITUDE_BUCKETS: Tuple[Tuple[float, str], ...] = (
    (3.0, "#2ecc71"),
    (5.0, "#f1c40f"),
    (6.0, "#e67e22"),
    (7.0, "#e74c3c"),
    (math.inf, "#c0392b"),
)


def _as_magnitude(x: Any) -> Optional[float]:
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return None
    f = float(x)
    return f if math.isfinite(f) else None


def color_for(category_id: Optional[str]) -> str:
    if not isinstance(category_id, str):
        return DEFAULT_COLOR
    return CATEGORY_COLORS.get(category_id, DEFAULT_COLOR)


def color_for_magnitude(magnitude: Any) -> str:
    m = _as_magnitude(magnitude)
    if m is None:
        return DEFAULT_COLOR
    for upper, color in MAGNITUDE_BUCKETS:
        if m < upper:
            return color
    return MAGNITUDE_BUCKETS[-1][1]


def icon_for(category_id: Optional[str]) -> str:
    if not isinstance(category_id, str):
        return DEFAULT_ICON
    return CATEGORY_ICONS.get(category_id, DEFAULT_ICON)


def radius_for(
    magnitude: Any,
    *,
    k: float | None = None,
    min_radius: float | None = None,
    max_radius: float | None = None,
) -> float:
    """clamp(magnitude * k, min_radius, max_radius); non-numeric → min_radius."""
    k = settings.marker_radius_k if k is None else k
    lo = settings.marker_radius_min if min_radius is None else min_radius
    hi = settings.marker_radius_max if max_radius is None else max_radius

    m = _as_magnitude(magnitude)
    if m is None:
        return lo
    return max(lo, min(hi, m * k))


def opacity_for(is_open: bool) -> float:
    return OPEN_OPACITY if is_open else CLOSED_OPACITY
