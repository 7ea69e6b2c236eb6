# geofeeds/core/geometry.py
"""
Geometry normalisation: any provider GeoJSON geometry → one marker position.

Providers encode coordinates as (lng, lat). Points map straight across;
everything else (polygons, lines, multi-geometries, collections) is reduced to
the centre of its bounding box. That is not a centroid — it only seeds where a
marker goes.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from geofeeds.core.contracts import BBox4, GeometryKind, Position
from geofeeds.core.errors import NormalizationError

BBox = Tuple[float, float, float, float]  # minLng,minLat,maxLng,maxLat


@dataclass(frozen=True)
class NormalizedGeometry:
    position: Position
    bbox: BBox4
    kind: GeometryKind


def _is_number(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return math.isfinite(v)


def _coord_pair(p: Any) -> Optional[Tuple[float, float]]:
    if isinstance(p, (list, tuple)) and len(p) >= 2 and _is_number(p[0]) and _is_number(p[1]):
        return float(p[0]), float(p[1])
    return None


def _collect_points(geom: Any, out: List[Tuple[float, float]], depth: int = 0) -> None:
    if depth > 8 or not isinstance(geom, dict):
        return

    if geom.get("type") == "GeometryCollection":
        geoms = geom.get("geometries")
        if isinstance(geoms, list):
            for sg in geoms:
                _collect_points(sg, out, depth + 1)
        return

    def walk(x: Any) -> None:
        pair = _coord_pair(x)
        if pair is not None:
            out.append(pair)
            return
        if isinstance(x, (list, tuple)):
            for v in x:
                walk(v)

    walk(geom.get("coordinates"))


def _bbox_of_coords(coords: List[Tuple[float, float]]) -> Optional[BBox]:
    if not coords:
        return None
    lngs = [c[0] for c in coords]
    lats = [c[1] for c in coords]
    return (min(lngs), min(lats), max(lngs), max(lats))


def _kind_of(geom_type: Any) -> GeometryKind:
    if geom_type == "Point":
        return "Point"
    if geom_type == "Polygon":
        return "Polygon"
    return "Other"


def _checked_position(lat: float, lng: float) -> Position:
    if abs(lat) > 90.0 or abs(lng) > 180.0:
        raise NormalizationError(f"position out of range: lat={lat} lng={lng}")
    return Position(lat=lat, lng=lng)


def normalize(geometry: Any) -> NormalizedGeometry:
    """
    Resolve a GeoJSON geometry to a position plus bounding box.

    Raises NormalizationError for missing/malformed coordinates or a position
    outside lat [-90, 90] / lng [-180, 180]. Callers drop the record.
    """
    if not isinstance(geometry, dict):
        raise NormalizationError("geometry missing or not an object")

    geom_type = geometry.get("type")
    kind = _kind_of(geom_type)

    if geom_type == "Point":
        pair = _coord_pair(geometry.get("coordinates"))
        if pair is None:
            raise NormalizationError("point coordinates missing or malformed")
        lng, lat = pair
        position = _checked_position(lat, lng)
        return NormalizedGeometry(
            position=position,
            bbox=BBox4(minLng=lng, minLat=lat, maxLng=lng, maxLat=lat),
            kind=kind,
        )

    if geom_type != "GeometryCollection" and not isinstance(geometry.get("coordinates"), (list, tuple)):
        raise NormalizationError(f"{geom_type or 'geometry'} has no coordinate array")

    pts: List[Tuple[float, float]] = []
    _collect_points(geometry, pts)
    bb = _bbox_of_coords(pts)
    if bb is None:
        raise NormalizationError(f"{geom_type or 'geometry'} has no usable coordinates")

    min_lng, min_lat, max_lng, max_lat = bb
    position = _checked_position((min_lat + max_lat) / 2.0, (min_lng + max_lng) / 2.0)
    return NormalizedGeometry(
        position=position,
        bbox=BBox4(minLng=min_lng, minLat=min_lat, maxLng=max_lng, maxLat=max_lat),
        kind=kind,
    )


def bounds_of(positions: List[Position]) -> Optional[BBox4]:
    """Bounding box around a set of marker positions (None when empty)."""
    bb = _bbox_of_coords([(p.lng, p.lat) for p in positions])
    if bb is None:
        return None
    return BBox4(minLng=bb[0], minLat=bb[1], maxLng=bb[2], maxLat=bb[3])
