"""
Tests for comment endpoints:
- GET/POST /api/articles/{slug}/comments
- DELETE /api/articles/{slug}/comments/{id}
"""

import pytest
from httpx import AsyncClient

from conduit.models import Article, User
from conduit.services.articles import ArticleStore


@pytest.fixture
async def article(db_session, jake: User) -> Article:
    return await ArticleStore(db_session).create(
        jake.user_id, "How to train your dragon", "Ever wonder how?", "You have to believe", []
    )


class TestComments:
    """Comment endpoint tests."""

    async def test_add_and_list(
        self, async_client: AsyncClient, article: Article, alice: User, token_for, auth_headers
    ):
        headers = auth_headers(token_for(alice))
        url = f"/api/articles/{article.slug}/comments"

        response = await async_client.post(
            url, json={"comment": {"body": "Great article!"}}, headers=headers
        )
        assert response.status_code == 201
        comment = response.json()["comment"]
        assert comment["body"] == "Great article!"
        assert comment["author"]["username"] == "alice"
        assert isinstance(comment["id"], int)

        response = await async_client.get(url)
        assert response.status_code == 200
        assert [c["body"] for c in response.json()["comments"]] == ["Great article!"]

    async def test_comment_on_missing_article_returns_404(
        self, async_client: AsyncClient, alice: User, token_for, auth_headers
    ):
        response = await async_client.post(
            "/api/articles/no-such-article/comments",
            json={"comment": {"body": "Hello"}},
            headers=auth_headers(token_for(alice)),
        )
        assert response.status_code == 404

    async def test_empty_body_returns_422(
        self, async_client: AsyncClient, article: Article, alice: User, token_for, auth_headers
    ):
        response = await async_client.post(
            f"/api/articles/{article.slug}/comments",
            json={"comment": {"body": ""}},
            headers=auth_headers(token_for(alice)),
        )
        assert response.status_code == 422

    async def test_delete_own_comment(
        self, async_client: AsyncClient, article: Article, alice: User, token_for, auth_headers
    ):
        headers = auth_headers(token_for(alice))
        url = f"/api/articles/{article.slug}/comments"
        created = await async_client.post(url, json={"comment": {"body": "oops"}}, headers=headers)
        comment_id = created.json()["comment"]["id"]

        response = await async_client.delete(f"{url}/{comment_id}", headers=headers)
        assert response.status_code == 204

        response = await async_client.get(url)
        assert response.json()["comments"] == []

    async def test_delete_someone_elses_comment_returns_403(
        self,
        async_client: AsyncClient,
        article: Article,
        jake: User,
        alice: User,
        token_for,
        auth_headers,
    ):
        url = f"/api/articles/{article.slug}/comments"
        created = await async_client.post(
            url, json={"comment": {"body": "mine"}}, headers=auth_headers(token_for(alice))
        )
        comment_id = created.json()["comment"]["id"]

        response = await async_client.delete(
            f"{url}/{comment_id}", headers=auth_headers(token_for(jake))
        )
        assert response.status_code == 403

    async def test_delete_missing_comment_returns_404(
        self, async_client: AsyncClient, article: Article, alice: User, token_for, auth_headers
    ):
        response = await async_client.delete(
            f"/api/articles/{article.slug}/comments/999",
            headers=auth_headers(token_for(alice)),
        )
        assert response.status_code == 404
