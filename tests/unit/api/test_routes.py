"""
Route tests: the API router mounted on a bare FastAPI app with the hub
dependency overridden by one built from fakes.
"""

import asyncio

import pytest
from conftest import FakeClock, StubFeedSource, eonet_feature
from fastapi import FastAPI
from fastapi.testclient import TestClient

from geofeeds.api import api_router
from geofeeds.api.deps import get_hub
from geofeeds.core.contracts import LayerDescriptor
from geofeeds.core.errors import FetchError
from geofeeds.services.adapters import EonetAdapter
from geofeeds.services.hub import FeedHub
from geofeeds.services.surface import InMemoryMapSurface


@pytest.fixture
def source():
    return StubFeedSource({"features": [eonet_feature("EONET_1"), eonet_feature("EONET_2", closed="2024-06-03")]})


@pytest.fixture
def hub(source):
    h = FeedHub(
        source=source,
        surface=InMemoryMapSurface(),
        clock=FakeClock(),
        adapters=[EonetAdapter(base_url="https://eonet.test")],
        layers_url="https://eonet.test/layers",
    )
    h.layers.load([
        LayerDescriptor(index=0, name="Fires", service_url="https://gibs.test", service_type_id="WMS_1_1_1"),
        LayerDescriptor(index=3, name="Smoke", service_url="https://gibs.test", service_type_id="WMS_1_3_0"),
    ])
    return h


@pytest.fixture
def client(hub):
    app = FastAPI()
    app.include_router(api_router)
    app.dependency_overrides[get_hub] = lambda: hub
    return TestClient(app)


# =============================================================================
# FEEDS
# =============================================================================


class TestFeedRoutes:
    def test_health(self, client):
        """Should answer the health probe."""
        assert client.get("/health").json() == {"ok": True}

    def test_list(self, client):
        """Should list one status per feed."""
        body = client.get("/feeds").json()
        assert [s["feed_id"] for s in body] == ["eonet"]
        assert body[0]["state"] == "idle"

    def test_unknown_feed(self, client):
        """Should 404 for a feed that is not configured."""
        r = client.get("/feeds/tsunami")
        assert r.status_code == 404
        assert r.json()["detail"]["code"] == "feed_not_found"

    def test_refresh_then_get(self, client):
        """Should refresh on demand and return the new events."""
        r = client.post("/feeds/eonet/refresh")
        assert r.status_code == 200
        assert r.json()["started"] is True
        assert r.json()["succeeded"] is True

        detail = client.get("/feeds/eonet").json()
        assert [e["id"] for e in detail["events"]] == ["EONET_1", "EONET_2"]
        assert detail["events"][1]["is_open"] is False
        assert detail["status"]["event_count"] == 2

    def test_refresh_failure_reports_error(self, client, hub, source):
        """Should report a failed refresh without an HTTP error."""
        source.responses = [FetchError("upstream down")]
        body = client.post("/feeds/eonet/refresh").json()
        assert body["succeeded"] is False
        assert "upstream down" in body["status"]["error"]
        assert body["status"]["retry_pending"] is True

    def test_update_filters(self, client, source):
        """Should apply form values and use them on the next refresh."""
        r = client.put("/feeds/eonet/filters", json={"status": "open", "window_days": "7", "limit": 20})
        assert r.status_code == 200
        assert r.json() == {"category": None, "status": "open", "window_days": 7, "limit": 20}

        client.post("/feeds/eonet/refresh")
        assert source.calls[-1][1] == {"status": "open", "days": "7", "limit": "20"}

    def test_bad_filter(self, client):
        """Should 400 on an invalid filter value."""
        r = client.put("/feeds/eonet/filters", json={"limit": 0})
        assert r.status_code == 400
        assert r.json()["detail"]["code"] == "bad_filter"

    def test_reset_filters_refreshes(self, client, hub, source):
        """Should restore defaults and immediately refresh."""
        client.put("/feeds/eonet/filters", json={"status": "closed"})
        body = client.post("/feeds/eonet/filters/reset").json()
        assert body["started"] is True
        assert body["status"]["filters"]["status"] is None
        assert source.calls[-1][1] == {"limit": "50"}

    def test_auto_refresh_toggle(self, client, hub):
        """Should flip the auto-refresh flag."""
        body = client.put("/feeds/eonet/auto-refresh", json={"enabled": False}).json()
        assert body["auto_refresh"] is False
        assert hub.controller("eonet").auto_refresh is False


# =============================================================================
# LAYERS AND MAP
# =============================================================================


class TestLayerRoutes:
    def test_list(self, client):
        """Should list catalog entries with their state."""
        body = client.get("/layers").json()
        assert [(l["descriptor"]["index"], l["active"]) for l in body["layers"]] == [(0, False), (3, False)]
        assert body["error"] is None

    def test_activate_and_deactivate(self, client):
        """Should attach then detach an overlay."""
        assert client.post("/layers/3/activate").json() == {"index": 3, "active": True}
        overlays = client.get("/map").json()["overlays"]
        assert [o["descriptor"]["name"] for o in overlays] == ["Smoke"]

        assert client.post("/layers/3/deactivate").json() == {"index": 3, "active": False}
        assert client.post("/layers/3/deactivate").status_code == 200
        assert client.get("/map").json()["overlays"] == []

    def test_activate_errors(self, client):
        """Should 404 unknown layers and 409 double activation."""
        assert client.post("/layers/9/activate").status_code == 404
        client.post("/layers/0/activate")
        r = client.post("/layers/0/activate")
        assert r.status_code == 409
        assert r.json()["detail"]["code"] == "layer_already_active"

    def test_map_after_refresh(self, client):
        """Should expose the rendered markers per feed."""
        client.post("/feeds/eonet/refresh")
        groups = client.get("/map").json()["groups"]
        markers = groups["eonet"]["markers"]
        assert [m["id"] for m in markers] == ["EONET_1", "EONET_2"]
        assert markers[1]["opacity"] == 0.7


# =============================================================================
# CATALOG ERRORS
# =============================================================================


class TestCatalogErrors:
    def test_category_failure_reported_on_feed(self, client, hub, source):
        """Should show a failed category load on the EONET feed status."""
        source.responses = [FetchError("categories down")]
        asyncio.run(hub.load_categories())

        listed = client.get("/feeds").json()[0]
        assert "categories down" in listed["catalog_error"]
        detail = client.get("/feeds/eonet").json()
        assert "categories down" in detail["status"]["catalog_error"]

    def test_category_recovery_clears_error(self, client, hub, source):
        """Should clear the catalog error once categories load."""
        source.responses = [FetchError("categories down")]
        asyncio.run(hub.load_categories())
        source.responses = [{"categories": [{"id": "wildfires", "title": "Wildfires"}]}]
        asyncio.run(hub.load_categories())

        assert client.get("/feeds/eonet").json()["status"]["catalog_error"] is None
