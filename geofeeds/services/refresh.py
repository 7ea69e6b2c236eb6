# geofeeds/services/refresh.py
"""
Refresh controller: fetch → translate → render, one feed per instance.

State machine: idle → loading → idle. A refresh requested while one is in
flight is rejected, never queued, so the event set is only ever replaced by
one complete batch at a time.

On success the event set is replaced wholesale and the error cleared. On
FetchError/ParseError the previous event set stays on the map, the error is
surfaced and one retry is scheduled. A failed retry does not schedule
another; the periodic timer takes over from there.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from geofeeds.core.contracts import Event, FeedStatus, FilterCriteria
from geofeeds.core.errors import FetchError, ParseError
from geofeeds.core.settings import settings
from geofeeds.core.time import utc_now_iso
from geofeeds.services.adapters import FeedAdapter
from geofeeds.services.clock import Clock, Timer
from geofeeds.services.feed_source import FeedSource
from geofeeds.services.filters import FilterState
from geofeeds.services.markers import render_request
from geofeeds.services.surface import MapSurface
from geofeeds.services.translate import TranslationBatch, translate_document

logger = logging.getLogger(__name__)


class RefreshController:
    def __init__(
        self,
        *,
        feed_id: str,
        adapter: FeedAdapter,
        source: FeedSource,
        surface: MapSurface,
        clock: Clock,
        filters: FilterState | None = None,
        interval_s: float | None = None,
        retry_delay_s: float | None = None,
        auto_refresh: bool | None = None,
    ) -> None:
        self.feed_id = feed_id
        self.adapter = adapter
        self.source = source
        self.surface = surface
        self.clock = clock
        self.filters = filters or FilterState()
        self.interval_s = float(settings.refresh_interval_s if interval_s is None else interval_s)
        self.retry_delay_s = float(settings.refresh_retry_delay_s if retry_delay_s is None else retry_delay_s)
        self.auto_refresh = settings.auto_refresh_default if auto_refresh is None else bool(auto_refresh)

        self._loading = False
        self._events: Tuple[Event, ...] = ()
        self._error: Optional[str] = None
        self._retry: Optional[Timer] = None
        self._periodic: Optional[Timer] = None

        self.catalog_error: Optional[str] = None
        self.last_updated: Optional[str] = None
        self.dropped_last = 0
        self.dropped_total = 0

    # ── read side ────────────────────────────────────────────────────────

    @property
    def state(self) -> str:
        return "loading" if self._loading else "idle"

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def retry_pending(self) -> bool:
        return self._retry is not None and self._retry.active

    def status(self) -> FeedStatus:
        return FeedStatus(
            feed_id=self.feed_id,
            provider=self.adapter.provider,
            label=self.adapter.label,
            state=self.state,  # type: ignore[arg-type]
            loading=self._loading,
            error=self._error,
            catalog_error=self.catalog_error,
            auto_refresh=self.auto_refresh,
            retry_pending=self.retry_pending,
            last_updated=self.last_updated,
            event_count=len(self._events),
            dropped_last=self.dropped_last,
            dropped_total=self.dropped_total,
            filters=self.filters.snapshot(),
            categories=self.adapter.categories(),
        )

    # ── refresh cycle ────────────────────────────────────────────────────

    async def refresh(self, *, reason: str = "manual") -> bool:
        """Run one cycle. Returns False if rejected (already loading) or failed."""
        if self._loading:
            logger.info("refresh_rejected feed=%s reason=%s in_flight=1", self.feed_id, reason)
            return False

        self._loading = True
        criteria = self.filters.snapshot()
        try:
            query = self.adapter.build_query(criteria)
            logger.info("refresh_start feed=%s reason=%s url=%s", self.feed_id, reason, query.url[:120])
            document = await self.source.get_json(query.url, query.params)
            batch = translate_document(document, self.adapter)
        except (FetchError, ParseError) as exc:
            self._fail(exc, reason)
            return False
        else:
            self._succeed(batch, criteria)
            return True
        finally:
            self._loading = False

    def _succeed(self, batch: TranslationBatch, criteria: FilterCriteria) -> None:
        # Static summary feeds ignore `limit`; cap client-side as well
        self._events = tuple(batch.events[: criteria.limit])
        self._error = None
        self.dropped_last = batch.dropped
        self.dropped_total += batch.dropped
        self.last_updated = utc_now_iso()

        if self._retry is not None:
            self._retry.cancel()
            self._retry = None

        self.surface.render(render_request(self.feed_id, self._events))
        logger.info(
            "refresh_ok feed=%s events=%d dropped=%d",
            self.feed_id, len(self._events), batch.dropped,
        )

    def _fail(self, exc: Exception, reason: str) -> None:
        self._error = f"Error loading {self.adapter.label or self.feed_id}: {exc}"
        logger.warning("refresh_failed feed=%s reason=%s err=%s", self.feed_id, reason, exc)

        if reason == "retry":
            return
        if self.retry_pending:
            return
        self._retry = self.clock.call_later(self.retry_delay_s, self._on_retry)
        logger.info("refresh_retry_scheduled feed=%s delay_s=%.1f", self.feed_id, self.retry_delay_s)

    async def _on_retry(self) -> None:
        self._retry = None
        await self.refresh(reason="retry")

    async def _on_tick(self) -> None:
        # Checked at fire time so toggling needs no reschedule
        if not self.auto_refresh:
            logger.debug("refresh_tick_skipped feed=%s auto_refresh=0", self.feed_id)
            return
        await self.refresh(reason="periodic")

    # ── lifecycle ────────────────────────────────────────────────────────

    def set_auto_refresh(self, enabled: bool) -> None:
        self.auto_refresh = bool(enabled)

    def start(self) -> None:
        if self._periodic is None:
            self._periodic = self.clock.call_every(self.interval_s, self._on_tick)

    def close(self) -> None:
        if self._periodic is not None:
            self._periodic.cancel()
            self._periodic = None
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None
