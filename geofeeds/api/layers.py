from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from geofeeds.api.deps import get_hub
from geofeeds.core.contracts import LayerStatus
from geofeeds.core.errors import AlreadyActive, UnknownLayer, conflict, not_found
from geofeeds.services.hub import FeedHub

router = APIRouter(prefix="/layers")


class LayersResponse(BaseModel):
    layers: List[LayerStatus] = Field(default_factory=list)
    error: Optional[str] = None


class LayerToggleResult(BaseModel):
    index: int
    active: bool


@router.get("", response_model=LayersResponse)
def layers_list(hub: FeedHub = Depends(get_hub)) -> LayersResponse:
    return LayersResponse(layers=hub.layers.statuses(), error=hub.errors.get("layers"))


@router.post("/{index}/activate", response_model=LayerToggleResult)
def layer_activate(index: int, hub: FeedHub = Depends(get_hub)) -> LayerToggleResult:
    try:
        hub.layers.activate(index)
    except UnknownLayer as e:
        not_found("layer_not_found", str(e))
    except AlreadyActive as e:
        conflict("layer_already_active", str(e))
    return LayerToggleResult(index=index, active=True)


@router.post("/{index}/deactivate", response_model=LayerToggleResult)
def layer_deactivate(index: int, hub: FeedHub = Depends(get_hub)) -> LayerToggleResult:
    hub.layers.deactivate(index)
    return LayerToggleResult(index=index, active=False)

