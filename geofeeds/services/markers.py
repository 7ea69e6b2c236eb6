from __future__ import annotations

from html import escape
from typing import Iterable, List

from geofeeds.core.contracts import Event, MarkerSpec, RenderRequest
from geofeeds.core.encoding import (
    color_for,
    color_for_magnitude,
    icon_for,
    opacity_for,
    radius_for,
)
from geofeeds.core.geometry import bounds_of
from geofeeds.core.settings import settings


def popup_content(event: Event) -> str:
    icon = escape(icon_for(event.category_id))
    title = escape(event.title or "Untitled event")
    parts: List[str] = [
        '<div class="popup-content">',
        f'<div class="popup-title"><i class="{icon}"></i> {title}</div>',
    ]

    if event.category_label:
        parts.append(f'<div class="popup-category">{escape(event.category_label)}</div>')

    if event.is_open:
        parts.append('<div class="popup-status status-open">ACTIVE</div>')
    else:
        parts.append('<div class="popup-status status-closed">CLOSED</div>')

    if event.magnitude is not None:
        parts.append(f'<div class="popup-magnitude">Magnitude: {event.magnitude:.1f}</div>')
    depth = event.extra.get("depth_km")
    if isinstance(depth, (int, float)):
        parts.append(f'<div class="popup-depth">Depth: {depth:.1f} km</div>')
    temp = event.extra.get("temperature")
    if isinstance(temp, (int, float)):
        unit = "°C" if event.extra.get("units") == "metric" else ""
        parts.append(f'<div class="popup-temperature">{temp:.1f}{unit}</div>')

    if event.description:
        parts.append(f"<p>{escape(event.description)}</p>")
    if event.occurred_at:
        parts.append(f'<div class="popup-time">{escape(event.occurred_at)}</div>')

    if event.sources:
        links = ", ".join(
            f'<a href="{escape(s.url)}" target="_blank" rel="noopener">{escape(s.id)}</a>'
            for s in event.sources
        )
        parts.append(f"<p><strong>Sources:</strong><br>{links}</p>")

    parts.append("</div>")
    return "".join(parts)


def build_marker(event: Event) -> MarkerSpec:
    # Seismic records are sized and coloured by magnitude, everything else by category
    open_popup = False
    if event.magnitude is not None:
        color = color_for_magnitude(event.magnitude)
        radius = radius_for(event.magnitude)
        open_popup = event.magnitude >= settings.marker_open_popup_magnitude
    else:
        color = color_for(event.category_id)
        radius = settings.marker_icon_radius

    return MarkerSpec(
        id=event.id,
        position=event.position,
        color=color,
        icon=icon_for(event.category_id),
        radius=radius,
        opacity=opacity_for(event.is_open),
        popup_content=popup_content(event),
        open_popup=open_popup,
    )


def render_request(group: str, events: Iterable[Event]) -> RenderRequest:
    markers = [build_marker(ev) for ev in events]
    return RenderRequest(
        group=group,
        markers=markers,
        bounds=bounds_of([m.position for m in markers]),
    )
