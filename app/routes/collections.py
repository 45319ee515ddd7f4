"""
Collection routes: collection management and single-image membership.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from app.database import get_db
from app.exceptions import ValidationError
from app.schemas import (
    CollectionCreate,
    CollectionPreview,
    CollectionResponse,
    CollectionWithPreviews,
    ImagePage,
    MembershipRequest,
    OkResponse,
)
from app.services import collection_service
from app.routes.images import build_image_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get("", response_model=List[CollectionWithPreviews])
async def list_collections(db: AsyncSession = Depends(get_db)):
    """
    Get all collections with up to four preview images each.
    The reserved saved collection is listed first, then newest first.
    """
    collections = await collection_service.list_collections(db)
    logger.info(f"Retrieved {len(collections)} collections")
    return [
        CollectionWithPreviews(
            id=collection.id,
            name=collection.name,
            description=collection.description,
            created_at=collection.created_at,
            previews=[CollectionPreview.model_validate(image) for image in previews],
        )
        for collection, previews in collections
    ]


@router.post("", response_model=CollectionResponse, status_code=status.HTTP_201_CREATED)
async def create_collection(
    payload: CollectionCreate,
    db: AsyncSession = Depends(get_db)
):
    if not payload.name or not payload.name.strip():
        raise ValidationError("Name required")
    collection = await collection_service.create_collection(db, payload.name, payload.description)
    return CollectionResponse.model_validate(collection)


@router.delete("/{collection_id}", response_model=OkResponse)
async def delete_collection(
    collection_id: int,
    db: AsyncSession = Depends(get_db)
):
    if collection_id <= 0:
        raise ValidationError("Invalid id")
    await collection_service.delete_collection(db, collection_id)
    return OkResponse()


@router.get("/{collection_id}/images", response_model=ImagePage)
async def list_collection_images(
    collection_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a page of images belonging to a collection.
    Accepts the same filter, sort and cursor parameters as GET /api/images.
    """
    return await build_image_page(db, request, collection_id=collection_id)


@router.post("/{collection_id}/images", response_model=OkResponse, status_code=status.HTTP_201_CREATED)
async def add_collection_image(
    collection_id: int,
    payload: MembershipRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Add an image to a collection. Adding an existing member succeeds.

    Raises:
        ValidationError: 400 if imageId is missing
        NotFoundError: 404 if the collection does not exist
    """
    if not payload.image_id:
        raise ValidationError("imageId required")
    await collection_service.add_image(db, collection_id, payload.image_id)
    return OkResponse()


@router.delete("/{collection_id}/images", response_model=OkResponse)
async def remove_collection_image(
    collection_id: int,
    payload: MembershipRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Remove an image from a collection. Removing a non-member succeeds.
    """
    if not payload.image_id:
        raise ValidationError("imageId required")
    await collection_service.remove_image(db, collection_id, payload.image_id)
    return OkResponse()
