"""
Image catalog routes.
Listing with search, filters and cursor pagination, plus the liked toggle
and storage preview redirects.
"""
from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.config import settings
from app.database import get_db
from app.exceptions import NotFoundError, ValidationError
from app.schemas import ImagePage, ImageRow, LikeUpdate, OkResponse, ImageCollectionsResponse
from app.services import collection_service, image_service
from app.services.enrichment import enrich_images
from app.services.query_params import parse_image_query, DEFAULT_THUMB_SIZE
from app.services.storage_service import generate_signed_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])

LIST_CACHE_CONTROL = "s-maxage=15, stale-while-revalidate=60"


async def build_image_page(db: AsyncSession, request: Request, collection_id: Optional[int] = None) -> ImagePage:
    """
    Parse listing parameters, run the query and enrich the resulting page.
    Shared by the catalog and collection-scoped listings.
    """
    params = parse_image_query(request.query_params, collection_id=collection_id)
    result = await image_service.list_images(db, params)
    items = await enrich_images(result.images, params.thumb_size)
    return ImagePage(items=items, next_cursor=result.next_cursor, total=result.total)


@router.get("/images", response_model=ImagePage)
async def list_images(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a page of images.

    Query parameters: q, status, format, nsfw, tags, tagged, sort, limit,
    cursor, thumb_w. Pass the returned nextCursor back as `cursor` to fetch
    the following page; a null nextCursor means there are no more results.

    Returns:
        ImagePage: {items, nextCursor, total}

    Raises:
        ValidationError: 400 if the cursor is malformed
        StoreError: 500 if the query fails
    """
    page = await build_image_page(db, request)
    response.headers["Cache-Control"] = LIST_CACHE_CONTROL
    return page


@router.patch("/images", response_model=OkResponse)
async def update_liked(
    payload: LikeUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Toggle the denormalized liked flag on an image.
    """
    await image_service.set_liked(db, payload.id, payload.liked)
    logger.info(f"Set liked={payload.liked} on image {payload.id}")
    return OkResponse()


@router.get("/images/preview")
async def preview_image(
    key: Optional[str] = None,
    bucket: Optional[str] = None,
):
    """
    Redirect to a signed URL for a stored object.
    Used for collection cover tiles, which only carry bucket and key.
    """
    if not key:
        raise ValidationError("Missing key")

    url = await generate_signed_url(bucket or settings.S3_DEFAULT_BUCKET, key, settings.SIGNED_URL_TTL_SECONDS)
    if not url:
        raise NotFoundError("Not found")
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get("/images/{image_id}", response_model=ImageRow)
async def get_image(
    image_id: int,
    thumb_w: int = DEFAULT_THUMB_SIZE,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a single image with resolved display URLs.
    """
    image = await image_service.get_image(db, image_id)
    rows = await enrich_images([image], thumb_w if thumb_w > 0 else DEFAULT_THUMB_SIZE)
    return rows[0]


@router.get("/images/{image_id}/collections", response_model=ImageCollectionsResponse)
async def get_image_collections(
    image_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    List the collections an image belongs to.
    """
    collections = await collection_service.collections_for_image(db, image_id)
    return ImageCollectionsResponse(
        collection_ids=[c.id for c in collections],
        collection_names=[c.name for c in collections if c.name],
    )
