"""List-screen plumbing shared by every resource page.

Search, filter, sort and pagination over records that are either already on
the page (server-paginated resources) or fetched in full (small catalogs).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from flask import current_app

from .api_client import ApiError


ITEMS_PER_PAGE = 10
SORT_DIRECTIONS = ("asc", "desc")

T = TypeVar("T")


def get_field(record: Any, path: str) -> Any:
    """Read ``path`` (dotted for nested values, e.g. ``plan.name``) from a dict or object."""
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value


# ---------- Search / filter ----------

def matches_search(record: Any, query: str, fields: Sequence[str]) -> bool:
    needle = (query or "").strip().casefold()
    if not needle:
        return True
    for name in fields:
        value = get_field(record, name)
        if value is None:
            continue
        if needle in str(value).casefold():
            return True
    return False


def filter_records(records: Iterable[T], query: str, fields: Sequence[str],
                   predicate: Optional[Callable[[T], bool]] = None) -> List[T]:
    return [
        r for r in records
        if matches_search(r, query, fields) and (predicate is None or predicate(r))
    ]


# ---------- Sorting ----------

@dataclass(frozen=True)
class SortSpec:
    key: str
    direction: str = "asc"

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


def next_sort(current: Optional[SortSpec], key: str) -> SortSpec:
    """Clicking a column: same column flips asc -> desc, anything else starts ascending."""
    if current is not None and current.key == key and current.direction == "asc":
        return SortSpec(key, "desc")
    return SortSpec(key, "asc")


def _comparable(value: Any):
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value).casefold())


def sort_records(records: Iterable[T], sort: Optional[SortSpec]) -> List[T]:
    """Stable sort by ``sort.key``; records missing the value always go last."""
    items = list(records)
    if sort is None:
        return items
    present = [r for r in items if get_field(r, sort.key) not in (None, "")]
    missing = [r for r in items if get_field(r, sort.key) in (None, "")]
    present.sort(key=lambda r: _comparable(get_field(r, sort.key)), reverse=sort.descending)
    return present + missing


# ---------- Pagination ----------

@dataclass
class Pagination:
    current_page: int = 1
    total_pages: int = 1
    total_count: int = 0
    limit: int = ITEMS_PER_PAGE
    has_next_page: bool = False
    has_prev_page: bool = False

    @property
    def next_page(self) -> Optional[int]:
        return self.current_page + 1 if self.has_next_page else None

    @property
    def prev_page(self) -> Optional[int]:
        return self.current_page - 1 if self.has_prev_page else None

    @property
    def pages(self) -> List[Union[int, str]]:
        return page_numbers(self.current_page, self.total_pages)

    @classmethod
    def from_api(cls, raw: Optional[Mapping[str, Any]], item_count: int = 0,
                 limit: int = ITEMS_PER_PAGE) -> "Pagination":
        if not raw:
            return cls.for_total(item_count, 1, limit)
        current = int(raw.get("currentPage") or 1)
        total_pages = max(int(raw.get("totalPages") or 1), 1)
        return cls(
            current_page=current,
            total_pages=total_pages,
            total_count=int(raw.get("totalCount") or item_count),
            limit=int(raw.get("limit") or limit),
            has_next_page=bool(raw.get("hasNextPage", current < total_pages)),
            has_prev_page=bool(raw.get("hasPrevPage", current > 1)),
        )

    @classmethod
    def for_total(cls, total_count: int, page: int, limit: int = ITEMS_PER_PAGE) -> "Pagination":
        total_pages = max(math.ceil(total_count / limit), 1) if limit else 1
        page = min(max(page, 1), total_pages)
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
            limit=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


@dataclass
class Page(Generic[T]):
    items: List[T]
    pagination: Pagination
    stats: Dict[str, Any] = field(default_factory=dict)


def paginate(records: Sequence[T], page: int, per_page: int = ITEMS_PER_PAGE) -> Page[T]:
    pagination = Pagination.for_total(len(records), page, per_page)
    start = (pagination.current_page - 1) * per_page
    return Page(items=list(records[start:start + per_page]), pagination=pagination)


def page_numbers(current: int, total: int) -> List[Union[int, str]]:
    """Page links to show: first, current +-1, last, with "..." for the gaps."""
    if total <= 1:
        return [1]
    pages: List[Union[int, str]] = [1]
    start = max(2, current - 1)
    end = min(total - 1, current + 1)
    if start > 2:
        pages.append("...")
    pages.extend(range(start, end + 1))
    if end < total - 1:
        pages.append("...")
    pages.append(total)
    return pages


# ---------- Query state ----------

@dataclass
class ListQuery:
    search: str = ""
    filters: Dict[str, str] = field(default_factory=dict)
    page: int = 1
    sort: Optional[SortSpec] = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any], filters: Optional[Mapping[str, str]] = None,
                  sort_keys: Sequence[str] = ()) -> "ListQuery":
        try:
            page = max(int(args.get("page", 1) or 1), 1)
        except (TypeError, ValueError):
            page = 1

        chosen: Dict[str, str] = {}
        for name, default in (filters or {}).items():
            chosen[name] = (args.get(name) or "").strip() or default

        sort = None
        sort_key = (args.get("sort") or "").strip()
        if sort_key and sort_key in sort_keys:
            direction = (args.get("dir") or "asc").strip()
            sort = SortSpec(sort_key, direction if direction in SORT_DIRECTIONS else "asc")

        return cls(
            search=(args.get("q") or "").strip(),
            filters=chosen,
            page=page,
            sort=sort,
        )

    def url_args(self, **overrides: Any) -> Dict[str, Any]:
        args: Dict[str, Any] = {}
        if self.search:
            args["q"] = self.search
        args.update({k: v for k, v in self.filters.items() if v})
        if self.sort is not None:
            args["sort"] = self.sort.key
            args["dir"] = self.sort.direction
        if self.page > 1:
            args["page"] = self.page
        for key, value in overrides.items():
            if value in (None, ""):
                args.pop(key, None)
            else:
                args[key] = value
        return args

    def sort_args(self, key: str) -> Dict[str, Any]:
        target = next_sort(self.sort, key)
        return self.url_args(sort=target.key, dir=target.direction)

    def page_args(self, page: int) -> Dict[str, Any]:
        return self.url_args(page=page if page > 1 else None)

    def sort_indicator(self, key: str) -> str:
        if self.sort is None or self.sort.key != key:
            return ""
        return "↑" if self.sort.direction == "asc" else "↓"


class ListScreen(Generic[T]):
    """Fetch state for one screen: idle -> loading -> loaded | error.

    A failed load keeps whatever data the screen already had.
    """

    def __init__(self, data: Optional[T] = None):
        self.status = "idle"
        self.data = data
        self.error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.status == "loaded"

    def load(self, fetch: Callable[[], T], failure_message: str = "Failed to load data") -> bool:
        self.status = "loading"
        try:
            result = fetch()
        except ApiError as exc:
            current_app.logger.warning("%s: %s", failure_message, exc, exc_info=True)
            self.status = "error"
            self.error = f"{failure_message}: {exc.message}"
            return False
        self.data = result
        self.error = None
        self.status = "loaded"
        return True
