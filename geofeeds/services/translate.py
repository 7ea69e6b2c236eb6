# geofeeds/services/translate.py
"""
Provider records → canonical Events.

Two document shapes are accepted:
  - geometry-collection: `{"features": [...]}`, consumed as-is
  - flat list: whatever `adapter.flat_records` recognises; each element is
    reshaped into a Feature by the adapter first

Both then go through the same `_translate_feature` path. A bad record is
dropped and counted; it never aborts the batch.
"""
from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from geofeeds.core.contracts import Event
from geofeeds.core.errors import NormalizationError
from geofeeds.core.geometry import normalize
from geofeeds.services.adapters import FeedAdapter, adapter_for

logger = logging.getLogger(__name__)

Provider = Union[FeedAdapter, str]


@dataclass
class TranslationBatch:
    events: List[Event] = field(default_factory=list)
    dropped: int = 0

    @property
    def total(self) -> int:
        return len(self.events) + self.dropped


def _resolve(provider: Provider) -> FeedAdapter:
    if isinstance(provider, FeedAdapter):
        return provider
    return adapter_for(provider)


def _stable_id(parts: List[str]) -> str:
    h = hashlib.sha256()
    for p in parts:
        h.update((p or "").encode("utf-8"))
        h.update(b"\x1f")
    return h.hexdigest()[:24]


def _is_feature(record: Dict[str, Any]) -> bool:
    return record.get("type") == "Feature" or isinstance(record.get("properties"), dict)


def _translate_feature(feature: Dict[str, Any], adapter: FeedAdapter) -> Optional[Event]:
    geometry = feature.get("geometry")
    if not geometry:
        logger.debug("record_dropped provider=%s reason=no_geometry", adapter.provider)
        return None

    norm = normalize(geometry)
    values = adapter.properties(feature)

    event_id = values.pop("id", None)
    if event_id is None or str(event_id).strip() == "":
        event_id = _stable_id([
            adapter.provider,
            str(values.get("title") or ""),
            json.dumps(geometry, sort_keys=True, default=str),
        ])

    return Event(
        id=str(event_id),
        position=norm.position,
        bbox=norm.bbox,
        raw_geometry_kind=norm.kind,
        **values,
    )


def translate(record: Any, provider: Provider) -> Optional[Event]:
    """Translate one raw record (Feature or flat record). Never raises."""
    try:
        adapter = _resolve(provider)
    except KeyError as exc:
        logger.warning("translate_unknown_provider %s", exc)
        return None

    if not isinstance(record, dict):
        logger.debug("record_dropped provider=%s reason=not_an_object", adapter.provider)
        return None

    try:
        feature = record if _is_feature(record) else adapter.reshape(record)
        return _translate_feature(feature, adapter)
    except NormalizationError as exc:
        logger.debug("record_dropped provider=%s reason=geometry err=%s", adapter.provider, exc)
        return None
    except Exception as exc:
        logger.warning("record_dropped provider=%s reason=malformed err=%s", adapter.provider, exc)
        return None


def translate_document(document: Any, provider: Provider) -> TranslationBatch:
    """
    Translate a whole provider response. An unrecognised document yields an
    empty batch (logged), not an error: an empty result is a valid result.
    """
    adapter = _resolve(provider)

    records: Optional[List[Any]] = None
    if isinstance(document, dict) and isinstance(document.get("features"), list):
        records = document["features"]
    else:
        records = adapter.flat_records(document)

    if records is None:
        logger.warning("translate_unrecognised_document provider=%s type=%s", adapter.provider, type(document).__name__)
        return TranslationBatch()

    batch = TranslationBatch()
    for rec in records:
        ev = translate(rec, adapter)
        if ev is None:
            batch.dropped += 1
        else:
            batch.events.append(ev)

    if batch.dropped:
        logger.info(
            "translate provider=%s events=%d dropped=%d",
            adapter.provider, len(batch.events), batch.dropped,
        )
    return batch
