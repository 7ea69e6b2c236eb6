from __future__ import annotations

import logging
from typing import Any, Dict, List

from geofeeds.core.contracts import CategoryOption, LayerDescriptor
from geofeeds.core.errors import ParseError
from geofeeds.core.settings import settings
from geofeeds.services.feed_source import FeedSource

logger = logging.getLogger(__name__)


def _flatten_parameters(raw: Any) -> Dict[str, Any]:
    # EONET ships WMS parameters as a list of single-key dicts
    out: Dict[str, Any] = {}
    if isinstance(raw, dict):
        out.update(raw)
    elif isinstance(raw, list):
        for item in raw:
            if isinstance(item, dict):
                out.update(item)
    return out


def parse_layer_catalog(data: Any, *, cap: int | None = None) -> List[LayerDescriptor]:
    """
    Truncate to the first `cap` entries, then index them in load order.
    Non-object entries keep their slot so indices match the provider's order.
    """
    cap = settings.layer_catalog_cap if cap is None else cap

    raw = data.get("layers") if isinstance(data, dict) else data
    if not isinstance(raw, list):
        raise ParseError("layer catalog has no 'layers' list")

    out: List[LayerDescriptor] = []
    for i, layer in enumerate(raw[: max(0, cap)]):
        if not isinstance(layer, dict):
            continue
        out.append(
            LayerDescriptor(
                index=i,
                name=str(layer.get("name") or f"Layer {i + 1}"),
                service_url=str(layer.get("serviceUrl") or ""),
                service_type_id=str(layer.get("serviceTypeId") or ""),
                extra_parameters=_flatten_parameters(layer.get("parameters")),
            )
        )
    return out


async def fetch_layer_catalog(source: FeedSource, url: str, *, cap: int | None = None) -> List[LayerDescriptor]:
    data = await source.get_json(url)
    layers = parse_layer_catalog(data, cap=cap)
    logger.info("layer_catalog_fetched url=%s layers=%d", url[:120], len(layers))
    return layers


def parse_categories(data: Any) -> List[CategoryOption]:
    raw = data.get("categories") if isinstance(data, dict) else data
    if not isinstance(raw, list):
        raise ParseError("category list has no 'categories' list")

    out: List[CategoryOption] = []
    for c in raw:
        if isinstance(c, dict) and c.get("id") is not None:
            out.append(CategoryOption(id=str(c["id"]), title=str(c.get("title") or c["id"])))
    return out


async def fetch_categories(source: FeedSource, url: str) -> List[CategoryOption]:
    data = await source.get_json(url)
    cats = parse_categories(data)
    logger.info("categories_fetched url=%s categories=%d", url[:120], len(cats))
    return cats
