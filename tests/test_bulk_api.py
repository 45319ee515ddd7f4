"""API tests for bulk collection membership."""

import pytest
from sqlalchemy import select

from app.models import CollectionImage
from tests.helpers import add_collection


async def members(session_factory, collection_id):
    async with session_factory() as session:
        result = await session.execute(
            select(CollectionImage.image_id)
            .where(CollectionImage.collection_id == collection_id)
            .order_by(CollectionImage.image_id)
        )
        return list(result.scalars().all())


@pytest.fixture
async def picks(db, five_images):
    await add_collection(db, 1, "Picks", image_ids=[1])


class TestBulkCollections:
    async def test_add(self, client, picks, session_factory):
        response = await client.post(
            "/api/bulk/collections", json={"imageIds": [1, 2, 3], "collectionId": 1, "action": "add"}
        )
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "added": 3,
            "message": "Successfully added 3 images to collection",
        }
        assert await members(session_factory, 1) == [1, 2, 3]

    async def test_remove(self, client, picks, session_factory):
        response = await client.post(
            "/api/bulk/collections", json={"imageIds": [1], "collectionId": 1, "action": "remove"}
        )
        assert response.json() == {
            "success": True,
            "removed": 1,
            "message": "Successfully removed 1 image from collection",
        }
        assert await members(session_factory, 1) == []

    async def test_duplicate_ids_are_attached_once(self, client, picks, session_factory):
        await client.post(
            "/api/bulk/collections", json={"imageIds": [2, 2, 1], "collectionId": 1, "action": "add"}
        )
        assert await members(session_factory, 1) == [1, 2]

    @pytest.mark.parametrize("payload,message", [
        ({"collectionId": 1, "action": "add"}, "imageIds array is required"),
        ({"imageIds": [], "collectionId": 1, "action": "add"}, "imageIds array is required"),
        ({"imageIds": [1], "action": "add"}, "collectionId is required"),
        ({"imageIds": [1], "collectionId": 1}, 'action must be "add" or "remove"'),
        ({"imageIds": [1], "collectionId": 1, "action": "move"}, 'action must be "add" or "remove"'),
    ])
    async def test_validation(self, client, payload, message):
        response = await client.post("/api/bulk/collections", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == message

    async def test_non_array_image_ids(self, client):
        response = await client.post(
            "/api/bulk/collections", json={"imageIds": "1,2", "collectionId": 1, "action": "add"}
        )
        assert response.status_code == 400

    async def test_add_to_missing_collection(self, client, five_images):
        response = await client.post(
            "/api/bulk/collections", json={"imageIds": [1, 2], "collectionId": 99, "action": "add"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Collection 99 not found"

    async def test_add_with_missing_images_attaches_nothing(self, client, picks, session_factory):
        response = await client.post(
            "/api/bulk/collections", json={"imageIds": [2, 998, 999], "collectionId": 1, "action": "add"}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Images not found: 998, 999"
        assert await members(session_factory, 1) == [1]

    async def test_remove_ignores_unknown_images(self, client, picks, session_factory):
        response = await client.post(
            "/api/bulk/collections", json={"imageIds": [1, 999], "collectionId": 1, "action": "remove"}
        )
        assert response.status_code == 200
        assert await members(session_factory, 1) == []
