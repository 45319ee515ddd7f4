"""
Bulk collection membership routes for multi-selected images.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas import BulkCollectionRequest, BulkCollectionResponse
from app.services import collection_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulk", tags=["bulk"])

BULK_ACTIONS = ("add", "remove")


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


@router.post("/collections", response_model=BulkCollectionResponse, response_model_exclude_none=True)
async def bulk_collections(
    payload: BulkCollectionRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Add or remove many images to/from one collection.

    Body: {imageIds, collectionId, action: "add" | "remove"}

    Returns:
        BulkCollectionResponse: Count of images added or removed and a message

    Raises:
        ValidationError: 400 if any field is missing or the action is unknown
    """
    if not payload.image_ids:
        raise ValidationError("imageIds array is required")
    if not payload.collection_id:
        raise ValidationError("collectionId is required")
    if payload.action not in BULK_ACTIONS:
        raise ValidationError('action must be "add" or "remove"')

    count = await collection_service.bulk_update_membership(
        db, payload.collection_id, payload.image_ids, payload.action
    )
    logger.info(f"Bulk {payload.action}: {count} image(s), collection {payload.collection_id}")

    if payload.action == "add":
        return BulkCollectionResponse(
            added=count,
            message=f"Successfully added {count} image{_plural(count)} to collection",
        )
    return BulkCollectionResponse(
        removed=count,
        message=f"Successfully removed {count} image{_plural(count)} from collection",
    )
