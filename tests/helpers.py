"""Builders for test data."""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Collection, CollectionImage, Image, ImageTag

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


async def fake_signed_url(bucket: str, key: str, ttl_seconds: int) -> Optional[str]:
    return f"https://signed.test/{bucket}/{key}?ttl={ttl_seconds}"


def make_image(
    image_id: int,
    *,
    s3_key: Optional[str] = None,
    caption: Optional[str] = None,
    tags: Iterable[str] = (),
    uid: Optional[str] = None,
    created_at: Optional[datetime] = None,
    **fields,
) -> Image:
    return Image(
        id=image_id,
        uid=uid or f"uid-{image_id}",
        s3_key=s3_key or f"images/image{image_id}.jpg",
        caption=caption,
        created_at=created_at or BASE_TIME + timedelta(minutes=image_id),
        tag_rows=[ImageTag(tag=t) for t in tags],
        **fields,
    )


async def add_images(session: AsyncSession, *images: Image) -> None:
    session.add_all(images)
    await session.commit()


async def add_collection(
    session: AsyncSession,
    collection_id: int,
    name: str,
    image_ids: Iterable[int] = (),
) -> Collection:
    collection = Collection(
        id=collection_id,
        name=name,
        created_at=BASE_TIME + timedelta(days=collection_id),
    )
    session.add(collection)
    await session.flush()
    session.add_all([
        CollectionImage(collection_id=collection_id, image_id=image_id) for image_id in image_ids
    ])
    await session.commit()
    return collection
