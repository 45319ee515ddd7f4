"""
Result enrichment: attach display URLs to every row of a page.

Rows are resolved concurrently and re-joined by position. Resolutions go
through a per-request cache that coalesces duplicate (bucket, key) lookups
and bounds how many run at once.
"""
import asyncio
import logging
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from app.config import settings
from app.models import Image
from app.schemas import ImageRow
from app.services.cdn_service import get_cdn_provider, get_cdn_url, get_optimized_url, supports_variants
from app.services.storage_service import generate_signed_url
from app.utils.captions import extract_caption_text

logger = logging.getLogger(__name__)

THUMB_QUALITY = 80
PLACEHOLDER_QUALITY = 20
PLACEHOLDER_BLUR = 8
THUMB_FORMAT = "webp"

UrlResolver = Callable[[str, str], Awaitable[Optional[str]]]


class CoalescingUrlCache:
    """
    Bounded request-coalescing cache for URL resolution.

    Concurrent requests for the same (bucket, key) share one in-flight
    resolution. At most `max_concurrency` resolutions run at the same time,
    and the oldest entries are evicted past `max_entries`.
    """

    def __init__(self, resolve: UrlResolver, max_entries: int, max_concurrency: int):
        self._resolve = resolve
        self._max_entries = max(1, max_entries)
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self._tasks: "OrderedDict[Tuple[str, str], asyncio.Task]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._tasks)

    async def _run(self, bucket: str, key: str) -> Optional[str]:
        async with self._semaphore:
            return await self._resolve(bucket, key)

    async def get(self, bucket: str, key: str) -> Optional[str]:
        cache_key = (bucket, key)
        task = self._tasks.get(cache_key)
        if task is None:
            task = asyncio.ensure_future(self._run(bucket, key))
            self._tasks[cache_key] = task
            while len(self._tasks) > self._max_entries:
                self._tasks.popitem(last=False)
        else:
            self._tasks.move_to_end(cache_key)
        return await task


async def resolve_image_url(bucket: str, key: str) -> Optional[str]:
    """
    Full-size display URL: the CDN URL when a CDN is configured,
    otherwise a signed storage URL.
    """
    if get_cdn_provider() is not None:
        return get_cdn_url(key)
    return await generate_signed_url(bucket, key, settings.SIGNED_URL_TTL_SECONDS)


def placeholder_size(thumb_size: int) -> int:
    return max(12, min(40, int(thumb_size / 6 + 0.5)))


def variant_urls(s3_key: str, thumb_size: int) -> Dict[str, str]:
    """Thumbnail and blurred placeholder URLs for CDN-backed grids."""
    ph_size = placeholder_size(thumb_size)
    return {
        "thumb_url": get_optimized_url(
            s3_key,
            width=thumb_size,
            height=thumb_size,
            quality=THUMB_QUALITY,
            fetch_format=THUMB_FORMAT,
        ),
        "placeholder_url": get_optimized_url(
            s3_key,
            width=ph_size,
            height=ph_size,
            quality=PLACEHOLDER_QUALITY,
            fetch_format=THUMB_FORMAT,
            blur=PLACEHOLDER_BLUR,
        ),
    }


async def enrich_images(
    images: Iterable[Image],
    thumb_size: int,
    resolve: UrlResolver = resolve_image_url,
) -> List[ImageRow]:
    """
    Convert ORM images to ImageRow and attach display URLs.

    Args:
        images: Images in page order
        thumb_size: Square edge for the thumbnail variant
        resolve: Coroutine producing the full-size URL for (bucket, key)

    Returns:
        List[ImageRow]: Rows in the same order as `images`
    """
    rows = [ImageRow.model_validate(image) for image in images]
    cache = CoalescingUrlCache(
        resolve,
        max_entries=settings.MAX_PAGE_SIZE,
        max_concurrency=settings.MAX_CONCURRENT_SIGNING,
    )

    urls = await asyncio.gather(*[
        cache.get(row.s3_bucket or settings.S3_DEFAULT_BUCKET, row.s3_key)
        for row in rows
    ])

    provider = get_cdn_provider()
    use_variants = supports_variants(provider)
    for row, url in zip(rows, urls):
        row.signed_url = url
        if use_variants:
            variants = variant_urls(row.s3_key, thumb_size)
            row.thumb_url = variants["thumb_url"]
            row.placeholder_url = variants["placeholder_url"]
        row.caption_text = extract_caption_text(row.caption) or None

    logger.debug(f"Enriched {len(rows)} rows ({len(cache)} distinct objects, cdn={provider})")
    return rows
