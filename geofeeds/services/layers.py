# geofeeds/services/layers.py
"""
Overlay catalog + which overlays are attached to the map.

index → (LayerDescriptor, handle | absent). A handle is stored exactly while
the overlay is attached. Misuse (unknown index, double activate) raises; it
is a caller bug, not a transient condition.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from geofeeds.core.contracts import LayerDescriptor, LayerStatus
from geofeeds.core.errors import AlreadyActive, UnknownLayer
from geofeeds.core.settings import settings
from geofeeds.services.surface import MapSurface

logger = logging.getLogger(__name__)


class LayerRegistry:
    def __init__(self, surface: MapSurface, *, supported_service: str | None = None) -> None:
        self.surface = surface
        self.supported_service = supported_service or settings.layer_supported_service
        self._catalog: Dict[int, LayerDescriptor] = {}
        self._handles: Dict[int, str] = {}

    def supports(self, descriptor: LayerDescriptor) -> bool:
        return bool(descriptor.service_type_id) and self.supported_service in descriptor.service_type_id

    def load(self, descriptors: Iterable[LayerDescriptor]) -> int:
        """Replace the catalog. Unsupported service types are skipped silently."""
        # Indices are reassigned on every load; old handles would dangle
        self.close()

        catalog: Dict[int, LayerDescriptor] = {}
        skipped = 0
        for d in descriptors:
            if self.supports(d):
                catalog[d.index] = d
            else:
                skipped += 1
        self._catalog = catalog

        logger.info("layers_loaded supported=%d skipped=%d", len(catalog), skipped)
        return len(catalog)

    def descriptor(self, index: int) -> LayerDescriptor:
        d = self._catalog.get(index)
        if d is None:
            raise UnknownLayer(index)
        return d

    def descriptors(self) -> List[LayerDescriptor]:
        return [self._catalog[i] for i in sorted(self._catalog)]

    def is_active(self, index: int) -> bool:
        return index in self._handles

    def active_indices(self) -> List[int]:
        return sorted(self._handles)

    def statuses(self) -> List[LayerStatus]:
        return [LayerStatus(descriptor=d, active=self.is_active(d.index)) for d in self.descriptors()]

    def activate(self, index: int) -> str:
        descriptor = self.descriptor(index)
        if index in self._handles:
            raise AlreadyActive(index)

        handle = self.surface.attach_overlay(descriptor)
        self._handles[index] = handle
        logger.info("layer_activated index=%d name=%r", index, descriptor.name)
        return handle

    def deactivate(self, index: int) -> None:
        handle = self._handles.pop(index, None)
        if handle is None:
            return
        self.surface.detach_overlay(handle)
        logger.info("layer_deactivated index=%d", index)

    def set_active(self, index: int, enabled: bool) -> bool:
        """Idempotent toggle for UI checkboxes. Returns the resulting state."""
        self.descriptor(index)
        if enabled and not self.is_active(index):
            self.activate(index)
        elif not enabled:
            self.deactivate(index)
        return self.is_active(index)

    def close(self) -> None:
        for index in list(self._handles):
            self.deactivate(index)
