from __future__ import annotations

from fastapi import APIRouter, Depends

from geofeeds.api.deps import get_hub
from geofeeds.core.contracts import MapState
from geofeeds.services.hub import FeedHub

router = APIRouter()


@router.get("/map", response_model=MapState)
def map_state(hub: FeedHub = Depends(get_hub)) -> MapState:
    """Everything the map client should currently draw: markers per feed + overlays."""
    return hub.surface.state()
