"""
Collection management and membership mutations.

Membership writes are idempotent: attaching an existing pair is ignored by
the store (ON CONFLICT DO NOTHING) and removing a non-member deletes nothing.
Each mutation step commits on its own; multi-step flows such as save/unsave
are not wrapped in a single transaction.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import NotFoundError
from app.models import Collection, CollectionImage, Image
from app.services.image_service import ensure_images_exist, set_liked, store_error

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 4


def is_reserved_name(name: Optional[str]) -> bool:
    return bool(name) and name.strip().lower() == settings.SAVED_COLLECTION_NAME.lower()


def _insert_ignore(db: AsyncSession):
    """Dialect-specific INSERT supporting ON CONFLICT DO NOTHING."""
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert(CollectionImage)
    return postgresql.insert(CollectionImage)


async def _commit(db: AsyncSession, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to {action}: {str(e)}")
        raise store_error(e)


async def get_collection(db: AsyncSession, collection_id: int) -> Collection:
    try:
        collection = await db.get(Collection, collection_id)
    except SQLAlchemyError as e:
        raise store_error(e)
    if collection is None:
        raise NotFoundError(f"Collection {collection_id} not found")
    return collection


async def list_collections(db: AsyncSession) -> List[Tuple[Collection, List[Image]]]:
    """
    All collections, newest first, each with up to four preview images.
    The reserved "saved" collection is always listed first.
    """
    try:
        collections = list((await db.execute(
            select(Collection).order_by(Collection.created_at.desc(), Collection.id.desc())
        )).scalars().all())

        previews: Dict[int, List[Image]] = {c.id: [] for c in collections}
        if collections:
            ranked = (
                select(
                    CollectionImage.collection_id.label("collection_id"),
                    CollectionImage.image_id.label("image_id"),
                    func.row_number().over(
                        partition_by=CollectionImage.collection_id,
                        order_by=CollectionImage.id,
                    ).label("position"),
                )
                .where(CollectionImage.collection_id.in_(list(previews)))
                .subquery()
            )
            rows = await db.execute(
                select(ranked.c.collection_id, Image)
                .join(Image, Image.id == ranked.c.image_id)
                .where(ranked.c.position <= PREVIEW_LIMIT)
                .order_by(ranked.c.collection_id, ranked.c.position)
            )
            for collection_id, image in rows.all():
                previews[collection_id].append(image)
    except SQLAlchemyError as e:
        logger.error(f"Failed to list collections: {str(e)}")
        raise store_error(e)

    # Stable sort keeps newest-first order within each group
    collections.sort(key=lambda c: 0 if is_reserved_name(c.name) else 1)
    return [(c, previews[c.id]) for c in collections]


async def create_collection(db: AsyncSession, name: str, description: Optional[str] = None) -> Collection:
    collection = Collection(name=name.strip(), description=description)
    db.add(collection)
    await _commit(db, f"create collection {name!r}")
    await db.refresh(collection)
    logger.info(f"Created collection {collection.id} ({collection.name})")
    return collection


async def delete_collection(db: AsyncSession, collection_id: int) -> None:
    """Delete a collection and its memberships; a missing id is a no-op."""
    try:
        await db.execute(delete(CollectionImage).where(CollectionImage.collection_id == collection_id))
        await db.execute(delete(Collection).where(Collection.id == collection_id))
    except SQLAlchemyError as e:
        await db.rollback()
        raise store_error(e)
    await _commit(db, f"delete collection {collection_id}")
    logger.info(f"Deleted collection {collection_id}")


async def find_collection_by_name(db: AsyncSession, name: str) -> Optional[Collection]:
    """
    Look up a collection by name; the reserved name matches case-insensitively.
    The oldest match wins when names collide.
    """
    if is_reserved_name(name):
        condition = func.lower(Collection.name) == name.strip().lower()
    else:
        condition = Collection.name == name
    try:
        return await db.scalar(
            select(Collection).where(condition).order_by(Collection.id).limit(1)
        )
    except SQLAlchemyError as e:
        raise store_error(e)


async def find_or_create_collection(db: AsyncSession, name: str) -> Collection:
    collection = await find_collection_by_name(db, name)
    if collection is None:
        collection = await create_collection(db, name)
    return collection


async def add_images(db: AsyncSession, collection_id: int, image_ids: Sequence[int]) -> None:
    """Idempotently attach images to a collection."""
    if not image_ids:
        return
    values = [{"collection_id": collection_id, "image_id": image_id} for image_id in dict.fromkeys(image_ids)]
    stmt = _insert_ignore(db).values(values).on_conflict_do_nothing(
        index_elements=["collection_id", "image_id"]
    )
    try:
        await db.execute(stmt)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to add images {list(image_ids)} to collection {collection_id}: {str(e)}")
        raise store_error(e)
    await _commit(db, f"add images to collection {collection_id}")
    logger.info(f"Attached {len(values)} image(s) to collection {collection_id}")


async def remove_images(db: AsyncSession, collection_id: int, image_ids: Sequence[int]) -> None:
    """Detach images from a collection; non-members are ignored."""
    if not image_ids:
        return
    try:
        await db.execute(
            delete(CollectionImage).where(
                CollectionImage.collection_id == collection_id,
                CollectionImage.image_id.in_(list(image_ids)),
            )
        )
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to remove images {list(image_ids)} from collection {collection_id}: {str(e)}")
        raise store_error(e)
    await _commit(db, f"remove images from collection {collection_id}")
    logger.info(f"Detached {len(image_ids)} image(s) from collection {collection_id}")


async def add_image(db: AsyncSession, collection_id: int, image_id: int) -> None:
    await get_collection(db, collection_id)
    await ensure_images_exist(db, [image_id])
    await add_images(db, collection_id, [image_id])


async def remove_image(db: AsyncSession, collection_id: int, image_id: int) -> None:
    await remove_images(db, collection_id, [image_id])


def _target_name(collection_name: Optional[str]) -> str:
    return (collection_name or settings.SAVED_COLLECTION_NAME).strip() or settings.SAVED_COLLECTION_NAME


async def save_image(db: AsyncSession, image_id: int, collection_name: Optional[str] = None) -> Collection:
    """
    Save shortcut: find-or-create the named collection (the reserved one by
    default) and attach the image. `images.liked` mirrors membership in the
    reserved collection only.

    Raises:
        NotFoundError: If the image does not exist; no collection is created
    """
    name = _target_name(collection_name)
    await ensure_images_exist(db, [image_id])
    collection = await find_or_create_collection(db, name)
    await add_images(db, collection.id, [image_id])
    if is_reserved_name(name):
        await set_liked(db, image_id, True)
    return collection


async def unsave_image(db: AsyncSession, image_id: int, collection_name: Optional[str] = None) -> Optional[Collection]:
    """
    Reverse of save_image: detach from the collection (if it exists), and
    clear `images.liked` when it is the reserved collection.
    """
    name = _target_name(collection_name)
    collection = await find_collection_by_name(db, name)
    if collection is not None:
        await remove_images(db, collection.id, [image_id])
    if is_reserved_name(name):
        await set_liked(db, image_id, False)
    return collection


async def collections_for_image(db: AsyncSession, image_id: int) -> List[Collection]:
    try:
        result = await db.execute(
            select(Collection)
            .join(CollectionImage, CollectionImage.collection_id == Collection.id)
            .where(CollectionImage.image_id == image_id)
            .order_by(CollectionImage.id)
        )
    except SQLAlchemyError as e:
        raise store_error(e)
    return list(result.scalars().all())


async def bulk_update_membership(db: AsyncSession, collection_id: int, image_ids: Sequence[int], action: str) -> int:
    """
    Apply one membership action to many images.

    Returns:
        int: Number of image ids the action was applied to

    Raises:
        NotFoundError: On add, if the collection or any image does not exist
    """
    if action == "add":
        await get_collection(db, collection_id)
        await ensure_images_exist(db, image_ids)
        await add_images(db, collection_id, image_ids)
    else:
        await remove_images(db, collection_id, image_ids)
    return len(image_ids)
