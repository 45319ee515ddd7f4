"""
Parsing of image listing query parameters.
Turns an untrusted flat key-value mapping into a typed, immutable request,
defaulting invalid values instead of failing the whole request.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Tuple
import logging

from app.config import settings

logger = logging.getLogger(__name__)

DEFAULT_SORT = "created_at.desc"
DEFAULT_THUMB_SIZE = 400


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ImageQueryParams:
    """Typed filter/sort/pagination request for an image listing."""
    q: Optional[str] = None
    status: Optional[str] = None
    format: Optional[str] = None
    nsfw: Optional[bool] = None
    tagged: Optional[bool] = None
    tags: Tuple[str, ...] = field(default_factory=tuple)
    sort_field: str = "created_at"
    direction: SortDirection = SortDirection.DESC
    limit: int = 48
    cursor: Optional[str] = None
    thumb_size: int = DEFAULT_THUMB_SIZE
    collection_id: Optional[int] = None


def _optional_str(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    return value


def parse_tristate(value: Optional[str]) -> Optional[bool]:
    """Map "true"/"false" to a boolean; anything else means no filter."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def parse_tags(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated tag list into trimmed, non-empty tokens."""
    if not value:
        return ()
    return tuple(t.strip() for t in value.split(",") if t.strip())


def parse_sort(value: Optional[str]) -> Tuple[str, SortDirection]:
    """
    Split "<field>.<direction>" on the last dot.

    The field name is passed through untouched; an unknown column surfaces as a
    store error when the query runs. Any direction other than "asc" sorts
    descending.
    """
    raw = value or DEFAULT_SORT
    sort_field, sep, direction = raw.rpartition(".")
    if not sep:
        sort_field, direction = raw, SortDirection.DESC.value
    if not sort_field:
        sort_field = DEFAULT_SORT.split(".")[0]
    return sort_field, SortDirection.ASC if direction == "asc" else SortDirection.DESC


def parse_limit(value: Optional[str], default: Optional[int] = None, cap: Optional[int] = None) -> int:
    """Parse a page size, falling back to the default and capping it."""
    default = default if default is not None else settings.PAGE_SIZE
    cap = cap if cap is not None else settings.MAX_PAGE_SIZE
    try:
        limit = int(value) if value not in (None, "") else default
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-integer limit {value!r}")
        limit = default
    if limit < 1:
        limit = default
    return min(limit, cap)


def parse_thumb_size(value: Optional[str]) -> int:
    try:
        size = int(value) if value else 0
    except ValueError:
        size = 0
    return size if size > 0 else DEFAULT_THUMB_SIZE


def parse_image_query(params: Mapping[str, str], collection_id: Optional[int] = None) -> ImageQueryParams:
    """
    Build ImageQueryParams from request query parameters.

    Args:
        params: Raw query parameters (e.g. request.query_params)
        collection_id: Route-scoped collection restricting the listing

    Returns:
        ImageQueryParams: Parsed request
    """
    sort_field, direction = parse_sort(params.get("sort"))
    q = params.get("q")
    return ImageQueryParams(
        q=q if q and q.strip() else None,
        status=_optional_str(params.get("status")),
        format=_optional_str(params.get("format")),
        nsfw=parse_tristate(params.get("nsfw")),
        tagged=parse_tristate(params.get("tagged")),
        tags=parse_tags(params.get("tags")),
        sort_field=sort_field,
        direction=direction,
        limit=parse_limit(params.get("limit")),
        cursor=_optional_str(params.get("cursor")),
        thumb_size=parse_thumb_size(params.get("thumb_w")),
        collection_id=collection_id,
    )
