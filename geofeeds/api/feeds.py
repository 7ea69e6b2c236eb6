from __future__ import annotations

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from geofeeds.api.deps import get_hub
from geofeeds.core.contracts import Event, FeedStatus, FilterCriteria
from geofeeds.core.errors import InvalidFilter, UnknownFeed, bad_request, not_found
from geofeeds.services.hub import FeedHub
from geofeeds.services.refresh import RefreshController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/feeds")


def _controller(hub: FeedHub, feed_id: str) -> RefreshController:
    try:
        return hub.controller(feed_id)
    except UnknownFeed as e:
        not_found("feed_not_found", str(e))


class FeedDetail(BaseModel):
    status: FeedStatus
    events: List[Event] = Field(default_factory=list)


class RefreshResult(BaseModel):
    started: bool
    succeeded: bool
    status: FeedStatus


# Values arrive straight from form controls; "" clears a field
class FiltersUpdate(BaseModel):
    category: Optional[str] = None
    status: Optional[str] = None
    window_days: Optional[Union[int, str]] = None
    limit: Optional[Union[int, str]] = None


class AutoRefreshUpdate(BaseModel):
    enabled: bool


@router.get("", response_model=List[FeedStatus])
def feeds_list(hub: FeedHub = Depends(get_hub)) -> List[FeedStatus]:
    return hub.statuses()


@router.get("/{feed_id}", response_model=FeedDetail)
def feed_get(feed_id: str, hub: FeedHub = Depends(get_hub)) -> FeedDetail:
    c = _controller(hub, feed_id)
    return FeedDetail(status=c.status(), events=list(c.events))


@router.post("/{feed_id}/refresh", response_model=RefreshResult)
async def feed_refresh(feed_id: str, hub: FeedHub = Depends(get_hub)) -> RefreshResult:
    c = _controller(hub, feed_id)
    if c.loading:
        return RefreshResult(started=False, succeeded=False, status=c.status())
    ok = await c.refresh(reason="manual")
    return RefreshResult(started=True, succeeded=ok, status=c.status())


@router.put("/{feed_id}/filters", response_model=FilterCriteria)
def feed_filters_update(
    feed_id: str,
    req: FiltersUpdate,
    hub: FeedHub = Depends(get_hub),
) -> FilterCriteria:
    c = _controller(hub, feed_id)
    try:
        return c.filters.update(**req.model_dump(exclude_unset=True))
    except InvalidFilter as e:
        bad_request("bad_filter", str(e))


@router.post("/{feed_id}/filters/reset", response_model=RefreshResult)
async def feed_filters_reset(feed_id: str, hub: FeedHub = Depends(get_hub)) -> RefreshResult:
    c = _controller(hub, feed_id)
    c.filters.reset()
    if c.loading:
        return RefreshResult(started=False, succeeded=False, status=c.status())
    ok = await c.refresh(reason="filters_reset")
    return RefreshResult(started=True, succeeded=ok, status=c.status())


@router.put("/{feed_id}/auto-refresh", response_model=FeedStatus)
def feed_auto_refresh(
    feed_id: str,
    req: AutoRefreshUpdate,
    hub: FeedHub = Depends(get_hub),
) -> FeedStatus:
    c = _controller(hub, feed_id)
    c.set_auto_refresh(req.enabled)
    logger.info("auto_refresh feed=%s enabled=%s", feed_id, req.enabled)
    return c.status()
