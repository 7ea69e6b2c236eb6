"""
Unit tests for marker construction and popup content.
"""

from geofeeds.core.contracts import Event, EventSource, Position
from geofeeds.core.encoding import CLOSED_OPACITY, DEFAULT_COLOR, DEFAULT_ICON, OPEN_OPACITY
from geofeeds.services.markers import build_marker, popup_content, render_request


def _event(**kwargs):
    values = {"id": "E1", "title": "Fire", "position": Position(lat=40.0, lng=-3.0), "category_id": "wildfires"}
    values.update(kwargs)
    return Event(**values)


class TestBuildMarker:
    def test_category_marker(self):
        """Should colour and iconify by category when there is no magnitude."""
        m = build_marker(_event())
        assert m.color == "#FF4500"
        assert m.icon == "bi bi-fire"
        assert m.opacity == OPEN_OPACITY
        assert m.position == Position(lat=40.0, lng=-3.0)

    def test_closed_is_dimmed(self):
        """Should render closed events at reduced opacity."""
        assert build_marker(_event(is_open=False)).opacity == CLOSED_OPACITY

    def test_unknown_category(self):
        """Should fall back to the default colour and icon."""
        m = build_marker(_event(category_id="meteors"))
        assert (m.color, m.icon) == (DEFAULT_COLOR, DEFAULT_ICON)

    def test_magnitude_bucket_and_radius(self):
        """Should colour 6.5 in the below-7 bucket and draw it larger than 4.5."""
        strong = build_marker(_event(category_id="earthquakes", magnitude=6.5))
        moderate = build_marker(_event(category_id="earthquakes", magnitude=4.5))
        assert strong.color == "#e74c3c"
        assert strong.radius > moderate.radius

    def test_strong_quake_opens_popup(self):
        """Should open the popup from magnitude 6.0 upwards only."""
        assert build_marker(_event(category_id="earthquakes", magnitude=6.0)).open_popup is True
        assert build_marker(_event(category_id="earthquakes", magnitude=5.9)).open_popup is False
        assert build_marker(_event()).open_popup is False


class TestPopupContent:
    def test_fields(self):
        """Should show title, category, status and source links."""
        html = popup_content(_event(
            category_label="Wildfires",
            description="Spreading north",
            sources=[EventSource(id="InciWeb", url="https://inciweb.test/1")],
        ))
        assert "Fire" in html
        assert "Wildfires" in html
        assert "ACTIVE" in html
        assert "Spreading north" in html
        assert 'href="https://inciweb.test/1"' in html

    def test_closed_and_magnitude(self):
        """Should show the closed badge, magnitude and depth."""
        html = popup_content(_event(is_open=False, magnitude=5.25, extra={"depth_km": 10}))
        assert "CLOSED" in html
        assert "Magnitude: 5.2" in html or "Magnitude: 5.3" in html
        assert "Depth: 10.0 km" in html

    def test_escapes_markup(self):
        """Should escape provider text."""
        html = popup_content(_event(title="<script>alert(1)</script>"))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_untitled(self):
        """Should give untitled events a placeholder title."""
        assert "Untitled event" in popup_content(_event(title=""))


class TestRenderRequest:
    def test_bounds_cover_markers(self):
        """Should report the bounds of every marker in the group."""
        req = render_request("eonet", [
            _event(id="a", position=Position(lat=10, lng=20)),
            _event(id="b", position=Position(lat=-5, lng=30)),
        ])
        assert req.group == "eonet"
        assert [m.id for m in req.markers] == ["a", "b"]
        assert (req.bounds.minLat, req.bounds.maxLat, req.bounds.minLng, req.bounds.maxLng) == (-5, 10, 20, 30)

    def test_empty(self):
        """Should produce an empty group with no bounds."""
        req = render_request("usgs", [])
        assert req.markers == [] and req.bounds is None
