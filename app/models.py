"""
SQLAlchemy models for the application.
All database models inherit from Base (declarative base).
"""
from sqlalchemy import Column, Integer, BigInteger, String, Text, Boolean, DateTime, ForeignKey, UniqueConstraint, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class Image(Base):
    """
    Image catalog entry.
    Rows are written by the ingestion pipeline; this service only toggles
    `liked` and manages collection membership.
    """
    __tablename__ = "images"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String, nullable=False, unique=True)
    s3_bucket = Column(String, nullable=True)
    s3_key = Column(String, nullable=False)
    bytes = Column(BigInteger, nullable=True)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    format = Column(String, nullable=True)
    status = Column(String, nullable=True, index=True)
    nsfw = Column(Boolean, nullable=True)
    liked = Column(Boolean, nullable=False, default=False, server_default=false())
    caption = Column(Text, nullable=True)
    tagged = Column(Boolean, nullable=True)
    last_tagged_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    tag_rows = relationship(
        "ImageTag",
        back_populates="image",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ImageTag.tag",
    )
    memberships = relationship("CollectionImage", back_populates="image", passive_deletes=True)

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]


class ImageTag(Base):
    """One tag in an image's tag set."""
    __tablename__ = "image_tags"

    image_id = Column(Integer, ForeignKey("images.id", ondelete="CASCADE"), primary_key=True)
    tag = Column(String, primary_key=True, index=True)

    image = relationship("Image", back_populates="tag_rows")


class Collection(Base):
    """Named, operator-curated set of images."""
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    memberships = relationship("CollectionImage", back_populates="collection", passive_deletes=True)


class CollectionImage(Base):
    """
    Collection membership (many-to-many join).
    The pair is unique so that attaching twice is a no-op.
    """
    __tablename__ = "collection_images"
    __table_args__ = (
        UniqueConstraint("collection_id", "image_id", name="uq_collection_images_pair"),
    )

    id = Column(Integer, primary_key=True)
    collection_id = Column(Integer, ForeignKey("collections.id", ondelete="CASCADE"), nullable=False, index=True)
    image_id = Column(Integer, ForeignKey("images.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    collection = relationship("Collection", back_populates="memberships")
    image = relationship("Image", back_populates="memberships")
