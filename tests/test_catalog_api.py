"""Tests for director and genre endpoints."""

import pytest

pytestmark = pytest.mark.asyncio


class TestDirectorEndpoints:
    async def test_create_and_get(self, async_client, admin_headers):
        response = await async_client.post(
            "/director",
            json={"name": "Denis Villeneuve", "dob": "1967-10-03", "nationality": "Canada"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        director_id = response.json()["id"]

        response = await async_client.get(f"/director/{director_id}")
        assert response.status_code == 200
        assert response.json()["dob"] == "1967-10-03"

    async def test_list_pages(self, async_client, director_factory):
        for name in ["A", "B", "C"]:
            await director_factory(name=name)

        response = await async_client.get("/director", params={"page": 2, "take": 2})

        assert response.status_code == 200
        assert [d["name"] for d in response.json()] == ["C"]

    async def test_update(self, async_client, admin_headers, director_factory):
        director = await director_factory()

        response = await async_client.patch(
            f"/director/{director.id}", json={"nationality": "UK"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["nationality"] == "UK"
        assert response.json()["name"] == "Christopher Nolan"

    async def test_delete_removes_movies(self, async_client, admin_headers, movie_factory):
        movie = await movie_factory()

        response = await async_client.delete(
            f"/director/{movie.director_id}", headers=admin_headers
        )
        assert response.status_code == 200

        response = await async_client.get(f"/movie/{movie.id}")
        assert response.status_code == 404

    async def test_missing_director(self, async_client):
        response = await async_client.get("/director/999")
        assert response.status_code == 404

    async def test_mutations_require_admin(self, async_client, user_headers):
        response = await async_client.post(
            "/director", json={"name": "Nobody"}, headers=user_headers
        )
        assert response.status_code == 403


class TestGenreEndpoints:
    async def test_create(self, async_client, admin_headers):
        response = await async_client.post(
            "/genre", json={"name": "sci-fi"}, headers=admin_headers
        )
        assert response.status_code == 201
        assert response.json()["name"] == "sci-fi"

    async def test_duplicate_name(self, async_client, admin_headers, genre_factory):
        await genre_factory(name="horror")

        response = await async_client.post(
            "/genre", json={"name": "horror"}, headers=admin_headers
        )
        assert response.status_code == 409

    async def test_rename(self, async_client, admin_headers, genre_factory):
        genre = await genre_factory(name="comedy")

        response = await async_client.patch(
            f"/genre/{genre.id}", json={"name": "dark comedy"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["name"] == "dark comedy"

    async def test_delete(self, async_client, admin_headers, genre_factory):
        genre = await genre_factory()

        response = await async_client.delete(f"/genre/{genre.id}", headers=admin_headers)
        assert response.status_code == 200

        response = await async_client.get(f"/genre/{genre.id}")
        assert response.status_code == 404

    async def test_paid_user_is_not_admin(self, async_client, user_factory, token_service):
        from moviecatalog.models.user import Role
        from tests.conftest import bearer_header

        paid = await user_factory(email="paid@test.com", role=Role.paid_user)
        headers = bearer_header(token_service.issue_token(paid, False))

        response = await async_client.post("/genre", json={"name": "noir"}, headers=headers)
        assert response.status_code == 403
