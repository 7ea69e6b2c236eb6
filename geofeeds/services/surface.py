# geofeeds/services/surface.py
"""
Map surface boundary.

The pipeline only emits render requests and overlay attach/detach calls;
pan/zoom/tiles belong to whatever client draws the map. InMemoryMapSurface
keeps the latest state so the HTTP API can hand it to that client.
"""
from __future__ import annotations

import itertools
import logging
from typing import Dict, Protocol

from geofeeds.core.contracts import AttachedOverlay, LayerDescriptor, MapState, RenderRequest

logger = logging.getLogger(__name__)


class MapSurface(Protocol):
    def render(self, request: RenderRequest) -> None: ...

    def attach_overlay(self, descriptor: LayerDescriptor) -> str: ...

    def detach_overlay(self, handle: str) -> None: ...


class InMemoryMapSurface:
    def __init__(self) -> None:
        self._groups: Dict[str, RenderRequest] = {}
        self._overlays: Dict[str, LayerDescriptor] = {}
        self._seq = itertools.count(1)

    def render(self, request: RenderRequest) -> None:
        self._groups[request.group] = request
        logger.debug("surface_render group=%s markers=%d", request.group, len(request.markers))

    def attach_overlay(self, descriptor: LayerDescriptor) -> str:
        handle = f"overlay-{next(self._seq)}"
        self._overlays[handle] = descriptor
        logger.info("surface_attach handle=%s layer=%r", handle, descriptor.name)
        return handle

    def detach_overlay(self, handle: str) -> None:
        descriptor = self._overlays.pop(handle, None)
        if descriptor is None:
            logger.warning("surface_detach_unknown handle=%s", handle)
            return
        logger.info("surface_detach handle=%s layer=%r", handle, descriptor.name)

    def state(self) -> MapState:
        return MapState(
            groups=dict(self._groups),
            overlays=[AttachedOverlay(handle=h, descriptor=d) for h, d in self._overlays.items()],
        )
