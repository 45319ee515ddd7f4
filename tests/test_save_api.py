"""API tests for the save shortcut."""

from app.models import Collection
from tests.helpers import add_collection


async def collection_ids(client, collection_id):
    response = await client.get(f"/api/collections/{collection_id}/images", params={"sort": "id.asc"})
    return [item["id"] for item in response.json()["items"]]


class TestSave:
    async def test_save_then_unsave(self, client, five_images):
        response = await client.post("/api/save", json={"imageId": 3})
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        saved_id = body["collectionId"]

        assert (await client.get("/api/images/3")).json()["liked"] is True
        assert await collection_ids(client, saved_id) == [3]

        collections = (await client.get("/api/collections")).json()
        assert collections[0]["name"] == "Saved"

        response = await client.request("DELETE", "/api/save", json={"imageId": 3})
        assert response.status_code == 200
        assert response.json()["collectionId"] == saved_id

        assert (await client.get("/api/images/3")).json()["liked"] is False
        assert await collection_ids(client, saved_id) == []

    async def test_save_twice_keeps_one_membership(self, client, five_images):
        first = (await client.post("/api/save", json={"imageId": 1})).json()
        second = (await client.post("/api/save", json={"imageId": 1})).json()
        assert first["collectionId"] == second["collectionId"]
        assert await collection_ids(client, first["collectionId"]) == [1]

    async def test_reuses_saved_collection_case_insensitively(self, client, db, five_images, session_factory):
        await add_collection(db, 7, "saved")

        body = (await client.post("/api/save", json={"imageId": 2})).json()
        assert body["collectionId"] == 7

        async with session_factory() as session:
            assert await session.get(Collection, 7) is not None

    async def test_named_collection(self, client, five_images):
        body = (await client.post("/api/save", json={"imageId": 2, "collectionName": "Favorites"})).json()
        collections = (await client.get("/api/collections")).json()
        assert [(c["id"], c["name"]) for c in collections] == [(body["collectionId"], "Favorites")]

    async def test_unsave_without_collection_clears_liked(self, client, five_images):
        await client.patch("/api/images", json={"id": 4, "liked": True})

        response = await client.request("DELETE", "/api/save", json={"imageId": 4})
        assert response.status_code == 200
        assert response.json()["collectionId"] is None
        assert (await client.get("/api/images/4")).json()["liked"] is False

    async def test_missing_image_creates_no_collection(self, client, five_images):
        response = await client.post("/api/save", json={"imageId": 999})
        assert response.status_code == 404
        assert (await client.get("/api/collections")).json() == []

    async def test_other_collections_leave_liked_alone(self, client, five_images):
        await client.post("/api/save", json={"imageId": 2, "collectionName": "Portfolio"})
        assert (await client.get("/api/images/2")).json()["liked"] is False

    async def test_unsave_from_other_collection_keeps_saved_state(self, client, five_images):
        saved = (await client.post("/api/save", json={"imageId": 1})).json()
        await client.post("/api/save", json={"imageId": 1, "collectionName": "Portfolio"})

        response = await client.request("DELETE", "/api/save", json={"imageId": 1, "collectionName": "Portfolio"})
        assert response.status_code == 200

        assert (await client.get("/api/images/1")).json()["liked"] is True
        assert await collection_ids(client, saved["collectionId"]) == [1]

    async def test_requires_image_id(self, client):
        response = await client.post("/api/save", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "imageId required"
