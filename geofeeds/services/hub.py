# geofeeds/services/hub.py
"""
FeedHub — owns everything one map session needs:
  - the map surface and the clock
  - the feed source (HTTP)
  - the overlay LayerRegistry
  - one RefreshController per enabled feed (eonet, usgs, weather when keyed)

No module-level state: the app builds one hub and hands it to the routers.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from geofeeds.core.contracts import FeedStatus
from geofeeds.core.errors import FetchError, ParseError, UnknownFeed
from geofeeds.core.settings import settings
from geofeeds.services.adapters import EonetAdapter, FeedAdapter, UsgsAdapter, WeatherAdapter
from geofeeds.services.catalog import fetch_categories, fetch_layer_catalog
from geofeeds.services.clock import AsyncioClock, Clock
from geofeeds.services.feed_source import FeedSource
from geofeeds.services.filters import FilterState
from geofeeds.services.layers import LayerRegistry
from geofeeds.services.refresh import RefreshController
from geofeeds.services.surface import InMemoryMapSurface

logger = logging.getLogger(__name__)


def default_adapters() -> List[FeedAdapter]:
    adapters: List[FeedAdapter] = [EonetAdapter(), UsgsAdapter()]
    if settings.openweather_api_key:
        adapters.append(WeatherAdapter())
    else:
        logger.info("[hub] OPENWEATHER_API_KEY not set — weather feed disabled")
    return adapters


class FeedHub:
    def __init__(
        self,
        *,
        source: FeedSource,
        surface: Optional[InMemoryMapSurface] = None,
        clock: Optional[Clock] = None,
        adapters: Optional[List[FeedAdapter]] = None,
        layers_url: str | None = None,
    ) -> None:
        self.source = source
        self.surface = surface or InMemoryMapSurface()
        self.clock = clock or AsyncioClock()
        self.layers = LayerRegistry(self.surface)
        self.layers_url = layers_url or f"{settings.eonet_base_url.rstrip('/')}/layers"

        # "categories" / "layers" → last catalog error message
        self.errors: Dict[str, str] = {}

        self.controllers: Dict[str, RefreshController] = {}
        for adapter in adapters if adapters is not None else default_adapters():
            filters = FilterState(known_categories=[c.id for c in adapter.categories()])
            self.controllers[adapter.provider] = RefreshController(
                feed_id=adapter.provider,
                adapter=adapter,
                source=self.source,
                surface=self.surface,
                clock=self.clock,
                filters=filters,
            )

    def controller(self, feed_id: str) -> RefreshController:
        c = self.controllers.get(feed_id)
        if c is None:
            raise UnknownFeed(feed_id)
        return c

    def statuses(self) -> List[FeedStatus]:
        return [c.status() for c in self.controllers.values()]

    async def load_categories(self) -> None:
        for c in self.controllers.values():
            if not isinstance(c.adapter, EonetAdapter):
                continue
            try:
                cats = await fetch_categories(self.source, c.adapter.categories_url)
            except (FetchError, ParseError) as e:
                c.catalog_error = f"Could not load event categories: {e}"
                self.errors["categories"] = c.catalog_error
                logger.warning("[hub] categories failed: %s", e)
                continue
            c.adapter.set_categories(cats)
            c.filters.set_known_categories(cat.id for cat in cats)
            c.catalog_error = None
            self.errors.pop("categories", None)

    async def load_layers(self) -> None:
        try:
            descriptors = await fetch_layer_catalog(self.source, self.layers_url)
        except (FetchError, ParseError) as e:
            self.errors["layers"] = f"Could not load layers: {e}"
            logger.warning("[hub] layer catalog failed: %s", e)
            return
        self.layers.load(descriptors)
        self.errors.pop("layers", None)

    async def start(self) -> None:
        """Initial load of catalogs and every feed in parallel, then arm timers."""
        await asyncio.gather(
            self.load_categories(),
            self.load_layers(),
            *(c.refresh(reason="startup") for c in self.controllers.values()),
        )
        for c in self.controllers.values():
            c.start()
        logger.info("[hub] started feeds=%s", ",".join(self.controllers))

    async def close(self) -> None:
        for c in self.controllers.values():
            c.close()
        self.layers.close()

        close_clock = getattr(self.clock, "close", None)
        if close_clock is not None:
            await close_clock()
        aclose = getattr(self.source, "aclose", None)
        if aclose is not None:
            await aclose()
        logger.info("[hub] closed")
