from __future__ import annotations

from typing import Optional

from fastapi import HTTPException


# ──────────────────────────────────────────────────────────────
# Domain errors
# ──────────────────────────────────────────────────────────────

class GeoFeedsError(Exception):
    """Base class for every error raised by the feed pipeline."""


class FetchError(GeoFeedsError):
    """Network failure or non-2xx answer from a provider."""

    def __init__(self, message: str, *, url: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(GeoFeedsError):
    """Provider answered but the body could not be decoded."""


class NormalizationError(GeoFeedsError):
    """A single record's geometry has no usable position."""


class UnknownLayer(GeoFeedsError):
    def __init__(self, index: int):
        super().__init__(f"no layer with index {index} in the catalog")
        self.index = index


class AlreadyActive(GeoFeedsError):
    def __init__(self, index: int):
        super().__init__(f"layer {index} is already attached")
        self.index = index


class InvalidFilter(GeoFeedsError, ValueError):
    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field


class UnknownFeed(GeoFeedsError):
    def __init__(self, feed_id: str):
        super().__init__(f"unknown feed: {feed_id}")
        self.feed_id = feed_id


# ──────────────────────────────────────────────────────────────
# HTTP boundary
# ──────────────────────────────────────────────────────────────

def bad_request(code: str, message: str):
    raise HTTPException(status_code=400, detail={"code": code, "message": message})


def not_found(code: str, message: str):
    raise HTTPException(status_code=404, detail={"code": code, "message": message})


def conflict(code: str, message: str):
    raise HTTPException(status_code=409, detail={"code": code, "message": message})
