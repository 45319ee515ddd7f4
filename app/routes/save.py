"""
Save shortcut routes.
Saving attaches an image to the reserved collection and sets its liked flag;
unsaving reverses both.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas import SaveRequest, SaveResponse
from app.services import collection_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/save", tags=["save"])


@router.post("", response_model=SaveResponse)
async def save_image(
    payload: SaveRequest,
    db: AsyncSession = Depends(get_db)
):
    if not payload.image_id:
        raise ValidationError("imageId required")
    collection = await collection_service.save_image(db, payload.image_id, payload.collection_name)
    logger.info(f"Saved image {payload.image_id} to collection {collection.id}")
    return SaveResponse(collection_id=collection.id)


@router.delete("", response_model=SaveResponse)
async def unsave_image(
    payload: SaveRequest,
    db: AsyncSession = Depends(get_db)
):
    if not payload.image_id:
        raise ValidationError("imageId required")
    collection = await collection_service.unsave_image(db, payload.image_id, payload.collection_name)
    logger.info(f"Unsaved image {payload.image_id}")
    return SaveResponse(collection_id=collection.id if collection else None)
