"""
Image catalog queries and the `liked` flag mutation.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy import select, update, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, StoreError
from app.models import Image
from app.services.pagination import apply_keyset, next_cursor
from app.services.query_params import ImageQueryParams
from app.services.search import build_filters

logger = logging.getLogger(__name__)


@dataclass
class ImagePageResult:
    images: List[Image]
    next_cursor: Optional[str]
    total: Optional[int]


def store_error(e: SQLAlchemyError) -> StoreError:
    """Wrap a SQLAlchemy failure, passing the driver's message through."""
    orig = getattr(e, "orig", None)
    return StoreError(str(orig) if orig is not None else str(e))


async def list_images(db: AsyncSession, params: ImageQueryParams) -> ImagePageResult:
    """
    Run one page of a filtered, keyset-paginated image listing.

    Args:
        db: Database session
        params: Parsed listing request

    Returns:
        ImagePageResult: Page rows, continuation cursor and filtered total

    Raises:
        ValidationError: If the cursor does not match the sort column type
        StoreError: If the sort field is unknown or the query fails
    """
    filters = build_filters(params)
    stmt = apply_keyset(
        select(Image).where(*filters),
        params.sort_field,
        params.direction,
        params.cursor,
        params.limit,
    )

    try:
        result = await db.execute(stmt)
        images = list(result.scalars().all())
        total = await db.scalar(select(func.count()).select_from(Image).where(*filters))
    except SQLAlchemyError as e:
        logger.error(f"Image listing query failed: {str(e)}")
        raise store_error(e)

    cursor = next_cursor(images, params.sort_field, params.limit)
    logger.info(
        f"Retrieved {len(images)} images "
        f"(collection: {params.collection_id}, sort: {params.sort_field}.{params.direction.value}, "
        f"cursor: {params.cursor}, next: {cursor})"
    )
    return ImagePageResult(images=images, next_cursor=cursor, total=total)


async def get_image(db: AsyncSession, image_id: int) -> Image:
    try:
        image = await db.get(Image, image_id)
    except SQLAlchemyError as e:
        raise store_error(e)
    if image is None:
        raise NotFoundError(f"Image {image_id} not found")
    return image


async def ensure_images_exist(db: AsyncSession, image_ids: Sequence[int]) -> None:
    """
    Raises:
        NotFoundError: If any of `image_ids` has no matching image
    """
    wanted = set(image_ids)
    if not wanted:
        return
    try:
        found = set((await db.execute(select(Image.id).where(Image.id.in_(wanted)))).scalars().all())
    except SQLAlchemyError as e:
        raise store_error(e)
    missing = sorted(wanted - found)
    if len(missing) == 1:
        raise NotFoundError(f"Image {missing[0]} not found")
    if missing:
        raise NotFoundError(f"Images not found: {', '.join(str(i) for i in missing)}")


async def set_liked(db: AsyncSession, image_id: int, liked: bool) -> None:
    """
    Update the denormalized `liked` flag.
    Updating a missing image is a no-op, matching a plain UPDATE ... WHERE id.
    """
    try:
        await db.execute(update(Image).where(Image.id == image_id).values(liked=liked))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to set liked={liked} on image {image_id}: {str(e)}")
        raise store_error(e)
