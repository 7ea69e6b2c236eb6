"""
Shared pytest fixtures for the geofeeds test suite.

Provides fakes for the pipeline's collaborators (clock, map surface, feed
source) plus small provider documents shaped like the real feeds.
"""

from typing import Any, Dict, List, Optional

import pytest

from geofeeds.core.contracts import LayerDescriptor
from geofeeds.core.errors import FetchError

# =============================================================================
# FAKES
# =============================================================================


class FakeTimer:
    def __init__(self, delay_s: float, fn, repeating: bool):
        self.delay_s = delay_s
        self.fn = fn
        self.repeating = repeating
        self.cancelled = False
        self.fired = 0

    @property
    def active(self) -> bool:
        if self.cancelled:
            return False
        return self.repeating or self.fired == 0

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Records timers; tests fire them explicitly."""

    def __init__(self):
        self.timers: List[FakeTimer] = []

    def call_later(self, delay_s, fn):
        t = FakeTimer(delay_s, fn, repeating=False)
        self.timers.append(t)
        return t

    def call_every(self, interval_s, fn):
        t = FakeTimer(interval_s, fn, repeating=True)
        self.timers.append(t)
        return t

    @property
    def one_shots(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.repeating]

    @property
    def pending_one_shots(self) -> List[FakeTimer]:
        return [t for t in self.one_shots if t.active]

    @property
    def periodic(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.repeating]

    async def fire(self, timer: FakeTimer) -> None:
        assert timer.active, "timer is not active"
        timer.fired += 1
        await timer.fn()


class RecordingSurface:
    def __init__(self):
        self.renders = []
        self.attached: Dict[str, LayerDescriptor] = {}
        self.attach_calls: List[LayerDescriptor] = []
        self.detach_calls: List[str] = []
        self._n = 0

    def render(self, request):
        self.renders.append(request)

    def attach_overlay(self, descriptor):
        self._n += 1
        handle = f"h{self._n}"
        self.attached[handle] = descriptor
        self.attach_calls.append(descriptor)
        return handle

    def detach_overlay(self, handle):
        self.detach_calls.append(handle)
        self.attached.pop(handle, None)


class StubFeedSource:
    """
    Returns queued responses in order (the last one repeats). A queued
    exception instance is raised instead of returned.
    """

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls: List[tuple] = []

    async def get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        self.calls.append((url, dict(params or {})))
        if not self.responses:
            raise FetchError("no response queued", url=url)
        resp = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(resp, Exception):
            raise resp
        return resp


# =============================================================================
# DOCUMENTS
# =============================================================================


def eonet_feature(event_id="EONET_1", lng=-3.0, lat=40.0, category="wildfires", closed=None):
    return {
        "type": "Feature",
        "properties": {
            "id": event_id,
            "title": f"Event {event_id}",
            "description": None,
            "link": f"https://eonet.gsfc.nasa.gov/api/v3/events/{event_id}",
            "closed": closed,
            "date": "2024-06-01T00:00:00Z",
            "categories": [{"id": category, "title": category.title()}],
            "sources": [{"id": "InciWeb", "url": "https://inciweb.example/1"}],
        },
        "geometry": {"type": "Point", "coordinates": [lng, lat]},
    }


def usgs_feature(event_id="us7000abcd", mag=4.5, lng=-117.5, lat=35.7, depth=8.2):
    return {
        "type": "Feature",
        "id": event_id,
        "properties": {
            "mag": mag,
            "place": "10 km N of Ridgecrest, CA",
            "time": 1717200000000,
            "url": f"https://earthquake.usgs.gov/earthquakes/eventpage/{event_id}",
            "status": "reviewed",
            "magType": "ml",
            "title": f"M {mag} - 10 km N of Ridgecrest, CA",
        },
        "geometry": {"type": "Point", "coordinates": [lng, lat, depth]},
    }


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def eonet_geojson():
    """EONET /events/geojson answer with two point events."""
    return {
        "type": "FeatureCollection",
        "features": [eonet_feature("EONET_1"), eonet_feature("EONET_2", lng=10.0, lat=-20.0, closed="2024-06-03T00:00:00Z")],
    }


@pytest.fixture
def eonet_flat():
    """EONET flat /events answer: geometry is a list of dated geometries."""
    return {
        "events": [
            {
                "id": "EONET_10",
                "title": "Tropical Storm Alpha",
                "closed": None,
                "categories": [{"id": "severeStorms", "title": "Severe Storms"}],
                "sources": [],
                "geometry": [
                    {"date": "2024-06-01T00:00:00Z", "type": "Point", "coordinates": [-60.0, 15.0]},
                    {"date": "2024-06-02T00:00:00Z", "type": "Point", "coordinates": [-62.0, 16.0],
                     "magnitudeValue": 45, "magnitudeUnit": "kts"},
                ],
            },
            {"id": "EONET_11", "title": "No geometry", "geometry": None},
        ]
    }


@pytest.fixture
def usgs_geojson():
    return {
        "type": "FeatureCollection",
        "features": [usgs_feature("us1", mag=2.1), usgs_feature("us2", mag=6.5, lng=140.0, lat=36.0)],
    }
