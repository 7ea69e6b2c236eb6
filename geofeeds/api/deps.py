from __future__ import annotations

from geofeeds.services.hub import FeedHub


def get_hub() -> FeedHub:
    raise RuntimeError("FeedHub must be provided by app dependency override")
