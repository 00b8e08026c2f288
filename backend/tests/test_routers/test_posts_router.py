"""
Tests for the posts and comments routers.
"""

from fastapi.testclient import TestClient

import repositories.db_models as db_models


class TestPostsRouter:
    """Tests for /api/posts."""

    def test_create_and_feed(self, client: TestClient, auth_headers: dict):
        created = client.post(
            "/api/posts", json={"content": "<b>Concurso</b> de oratoria"}, headers=auth_headers
        )

        assert created.status_code == 201
        assert created.json()["content"] == "Concurso de oratoria"

        feed = client.get("/api/posts", headers=auth_headers).json()
        assert [p["id"] for p in feed] == [created.json()["id"]]
        assert feed[0]["author"]["first_name"] == "Ana"

    def test_unverified_cannot_post(self, client: TestClient, unverified_auth_headers: dict):
        response = client.post(
            "/api/posts", json={"content": "Hola"}, headers=unverified_auth_headers
        )
        assert response.status_code == 403

    def test_empty_content(self, client: TestClient, auth_headers: dict):
        assert client.post("/api/posts", json={"content": ""}, headers=auth_headers).status_code == 422

    def test_reaction_toggle(
        self, client: TestClient, other_auth_headers: dict, test_post: db_models.Post
    ):
        on = client.post(f"/api/posts/{test_post.id}/reactions", headers=other_auth_headers)
        assert on.json() == {"reacted": True, "reaction_count": 1}

        post = client.get(f"/api/posts/{test_post.id}", headers=other_auth_headers).json()
        assert post["user_has_reacted"] is True

        off = client.post(f"/api/posts/{test_post.id}/reactions", headers=other_auth_headers)
        assert off.json() == {"reacted": False, "reaction_count": 0}

    def test_edit_and_delete_permissions(
        self,
        client: TestClient,
        auth_headers: dict,
        other_auth_headers: dict,
        test_post: db_models.Post,
    ):
        forbidden = client.patch(
            f"/api/posts/{test_post.id}", json={"content": "x"}, headers=other_auth_headers
        )
        assert forbidden.status_code == 403

        edited = client.patch(
            f"/api/posts/{test_post.id}", json={"content": "Ya la encontré"}, headers=auth_headers
        )
        assert edited.json()["content"] == "Ya la encontré"

        assert client.delete(f"/api/posts/{test_post.id}", headers=auth_headers).status_code == 204
        assert client.get(f"/api/posts/{test_post.id}", headers=auth_headers).status_code == 404


class TestCommentsRouter:
    """Tests for post comments."""

    def test_comment_flow(
        self,
        client: TestClient,
        auth_headers: dict,
        other_auth_headers: dict,
        test_post: db_models.Post,
    ):
        created = client.post(
            f"/api/posts/{test_post.id}/comments",
            json={"content": "Te la mando por correo"},
            headers=other_auth_headers,
        )
        assert created.status_code == 201
        comment_id = created.json()["id"]

        comments = client.get(f"/api/posts/{test_post.id}/comments", headers=auth_headers).json()
        assert [c["id"] for c in comments] == [comment_id]

        assert client.delete(f"/api/comments/{comment_id}", headers=auth_headers).status_code == 403
        assert (
            client.delete(f"/api/comments/{comment_id}", headers=other_auth_headers).status_code
            == 204
        )

    def test_comment_on_missing_post(self, client: TestClient, auth_headers: dict):
        response = client.post(
            "/api/posts/999/comments", json={"content": "Hola"}, headers=auth_headers
        )
        assert response.status_code == 404
