# geofeeds/services/filters.py
"""
Filter selection → validated, immutable FilterCriteria → query params.

The UI edits a FilterState; every refresh takes `snapshot()` once at start,
so edits made while a fetch is in flight only affect the next refresh.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from geofeeds.core.contracts import FilterCriteria
from geofeeds.core.errors import InvalidFilter
from geofeeds.core.settings import settings

logger = logging.getLogger(__name__)

_STATUSES = ("open", "closed")
_FIELDS = ("category", "status", "window_days", "limit")


def _positive_int(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidFilter(field, "must be a positive integer")
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidFilter(field, f"must be a positive integer, got {value!r}") from None
    if n <= 0:
        raise InvalidFilter(field, f"must be a positive integer, got {n}")
    return n


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class FilterState:
    def __init__(
        self,
        *,
        default_limit: int | None = None,
        max_limit: int | None = None,
        known_categories: Optional[Iterable[str]] = None,
    ) -> None:
        self.default_limit = int(default_limit or settings.filter_default_limit)
        self.max_limit = int(max_limit or settings.filter_max_limit)
        self._known: set[str] = set(known_categories or ())
        self._current = FilterCriteria(limit=self.default_limit)

    @property
    def known_categories(self) -> set[str]:
        return set(self._known)

    def set_known_categories(self, categories: Iterable[str]) -> None:
        self._known = set(categories)

    def update(self, **changes: Any) -> FilterCriteria:
        """
        Apply a partial edit. Blank values clear a field (limit falls back to
        the default). Nothing changes if any field is invalid.
        """
        unknown = set(changes) - set(_FIELDS)
        if unknown:
            raise InvalidFilter(sorted(unknown)[0], "unknown filter field")

        values: Dict[str, Any] = self._current.model_dump()

        if "category" in changes:
            category = changes["category"]
            if _blank(category):
                values["category"] = None
            else:
                category = str(category).strip()
                if self._known and category not in self._known:
                    raise InvalidFilter("category", f"unknown category {category!r}")
                values["category"] = category

        if "status" in changes:
            status = changes["status"]
            if _blank(status):
                values["status"] = None
            else:
                status = str(status).strip().lower()
                if status not in _STATUSES:
                    raise InvalidFilter("status", f"must be one of {', '.join(_STATUSES)}")
                values["status"] = status

        if "window_days" in changes:
            days = changes["window_days"]
            values["window_days"] = None if _blank(days) else _positive_int("window_days", days)

        if "limit" in changes:
            limit = changes["limit"]
            n = self.default_limit if _blank(limit) else _positive_int("limit", limit)
            if n > self.max_limit:
                raise InvalidFilter("limit", f"must be at most {self.max_limit}")
            values["limit"] = n

        self._current = FilterCriteria(**values)
        logger.debug("filters_updated %s", self._current.model_dump())
        return self._current

    def reset(self) -> FilterCriteria:
        self._current = FilterCriteria(limit=self.default_limit)
        return self._current

    def snapshot(self) -> FilterCriteria:
        # FilterCriteria is frozen; handing out the instance is safe
        return self._current


def to_query_params(criteria: FilterCriteria) -> Dict[str, str]:
    params: Dict[str, str] = {}
    if criteria.category:
        params["category"] = criteria.category
    if criteria.status:
        params["status"] = criteria.status
    if criteria.window_days:
        params["days"] = str(criteria.window_days)
    params["limit"] = str(criteria.limit)
    return params
