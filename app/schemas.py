"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints with automatic validation and serialization.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List


class ImageRow(BaseModel):
    """
    Page-row projection of an image, shared by every endpoint returning images.
    URL fields are filled in by the enrichment step after the query runs.
    """
    id: int
    uid: str
    s3_bucket: Optional[str] = None
    s3_key: str
    bytes: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    status: Optional[str] = None
    nsfw: Optional[bool] = None
    liked: bool = False
    caption: Optional[str] = None
    tags: List[str] = []
    tagged: Optional[bool] = None
    last_tagged_at: Optional[datetime] = None
    created_at: datetime

    signed_url: Optional[str] = Field(None, serialization_alias="signedUrl")
    thumb_url: Optional[str] = Field(None, serialization_alias="thumbUrl")
    placeholder_url: Optional[str] = Field(None, serialization_alias="placeholderUrl")
    caption_text: Optional[str] = Field(None, serialization_alias="captionText")

    model_config = ConfigDict(
        from_attributes=True,  # Enable conversion from SQLAlchemy models
        populate_by_name=True,
    )

    @field_validator("liked", mode="before")
    @classmethod
    def coerce_liked(cls, v):
        return bool(v)


class ImagePage(BaseModel):
    """
    One page of a keyset-paginated image listing.
    """
    items: List[ImageRow]
    next_cursor: Optional[str] = Field(None, serialization_alias="nextCursor")
    total: Optional[int] = None


class LikeUpdate(BaseModel):
    """
    Request schema for PATCH /api/images.
    """
    id: int
    liked: bool


class MembershipRequest(BaseModel):
    """
    Request schema for adding or removing a single collection member.
    """
    image_id: Optional[int] = Field(None, alias="imageId")

    model_config = ConfigDict(populate_by_name=True)


class SaveRequest(BaseModel):
    """
    Request schema for the save shortcut (POST/DELETE /api/save).
    """
    image_id: Optional[int] = Field(None, alias="imageId")
    collection_name: Optional[str] = Field(None, alias="collectionName")

    model_config = ConfigDict(populate_by_name=True)


class SaveResponse(BaseModel):
    ok: bool = True
    collection_id: Optional[int] = Field(None, serialization_alias="collectionId")


class BulkCollectionRequest(BaseModel):
    """
    Request schema for POST /api/bulk/collections.
    Fields are optional so that missing values produce specific messages.
    """
    image_ids: Optional[List[int]] = Field(None, alias="imageIds")
    collection_id: Optional[int] = Field(None, alias="collectionId")
    action: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class BulkCollectionResponse(BaseModel):
    success: bool = True
    added: Optional[int] = None
    removed: Optional[int] = None
    message: str


class CollectionCreate(BaseModel):
    """
    Request schema for creating a collection.
    """
    name: Optional[str] = None
    description: Optional[str] = None


class CollectionResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CollectionPreview(BaseModel):
    """Minimal image reference used to render collection cover tiles."""
    id: int
    s3_bucket: Optional[str] = None
    s3_key: str

    model_config = ConfigDict(from_attributes=True)


class CollectionWithPreviews(CollectionResponse):
    previews: List[CollectionPreview] = []


class ImageCollectionsResponse(BaseModel):
    collection_ids: List[int] = Field(serialization_alias="collectionIds")
    collection_names: List[str] = Field(serialization_alias="collectionNames")


class OkResponse(BaseModel):
    ok: bool = True
