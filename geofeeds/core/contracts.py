from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


# ──────────────────────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────────────────────

class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class BBox4(BaseModel):
    model_config = ConfigDict(frozen=True)

    minLng: float
    minLat: float
    maxLng: float
    maxLat: float


# Only Point/Polygon are told apart; everything else (lines, multi-geometries,
# collections) is "Other". Diagnostic only.
GeometryKind = Literal["Point", "Polygon", "Other"]

ProviderKind = Literal["eonet", "usgs", "weather"]

GeoJSON = Dict[str, Any]


# ──────────────────────────────────────────────────────────────
# Events
# ──────────────────────────────────────────────────────────────

class EventSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    url: str = ""


class Event(BaseModel):
    """One renderable record. Built fresh on every refresh, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    description: str = ""
    is_open: bool = True
    category_id: Optional[str] = None
    category_label: Optional[str] = None
    magnitude: Optional[float] = None
    position: Position
    bbox: Optional[BBox4] = None
    sources: List[EventSource] = Field(default_factory=list)
    raw_geometry_kind: GeometryKind = "Other"
    occurred_at: Optional[str] = None
    url: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


# ──────────────────────────────────────────────────────────────
# Filters
# ──────────────────────────────────────────────────────────────

FilterStatus = Literal["open", "closed"]


class FilterCriteria(BaseModel):
    """Snapshot of the user's filter selection, taken when a refresh begins."""

    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    status: Optional[FilterStatus] = None
    window_days: Optional[int] = Field(default=None, gt=0)
    limit: int = Field(default=50, gt=0)


class CategoryOption(BaseModel):
    id: str
    title: str = ""


class FeedQuery(BaseModel):
    url: str
    params: Dict[str, str] = Field(default_factory=dict)


# ──────────────────────────────────────────────────────────────
# Overlays
# ──────────────────────────────────────────────────────────────

class LayerDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    name: str = ""
    service_url: str = ""
    service_type_id: str = ""
    extra_parameters: Dict[str, Any] = Field(default_factory=dict)


class LayerStatus(BaseModel):
    descriptor: LayerDescriptor
    active: bool = False


class AttachedOverlay(BaseModel):
    handle: str
    descriptor: LayerDescriptor


# ──────────────────────────────────────────────────────────────
# Rendering
# ──────────────────────────────────────────────────────────────

class MarkerSpec(BaseModel):
    id: str
    position: Position
    color: str
    icon: str
    radius: float
    opacity: float
    popup_content: str = ""
    open_popup: bool = False


class RenderRequest(BaseModel):
    """Replace every marker of `group` with `markers`."""

    group: str
    markers: List[MarkerSpec] = Field(default_factory=list)
    bounds: Optional[BBox4] = None


class MapState(BaseModel):
    groups: Dict[str, RenderRequest] = Field(default_factory=dict)
    overlays: List[AttachedOverlay] = Field(default_factory=list)


# ──────────────────────────────────────────────────────────────
# Feed status
# ──────────────────────────────────────────────────────────────

RefreshState = Literal["idle", "loading"]


class FeedStatus(BaseModel):
    feed_id: str
    provider: ProviderKind
    label: str = ""
    state: RefreshState = "idle"
    loading: bool = False
    error: Optional[str] = None
    # Category list failed to load; filtering still works without validation
    catalog_error: Optional[str] = None
    auto_refresh: bool = True
    retry_pending: bool = False
    last_updated: Optional[str] = None
    event_count: int = 0
    dropped_last: int = 0
    dropped_total: int = 0
    filters: FilterCriteria = Field(default_factory=FilterCriteria)
    categories: List[CategoryOption] = Field(default_factory=list)
