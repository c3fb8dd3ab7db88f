"""Tests for the comment board service and endpoints."""

import pytest

from riley.configs.system import CommentsConfig
from riley.core.service.comments import CommentService
from riley.core.service.models import BadRequest, NotFound
from riley.infra.db import InMemoryCommentStore
from riley.infra.identity import Identity

COMMENTS = "/api/v1/comments"


def _auth(token: str = "token-u1") -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# =========================================================================
# Service
# =========================================================================


class TestCommentService:
    @pytest.fixture
    def service(self) -> CommentService:
        return CommentService(
            InMemoryCommentStore(), CommentsConfig(list_limit=2, max_length=20)
        )

    @pytest.mark.asyncio
    async def test_add_strips_and_names_author(self, service):
        identity = Identity(uid="u1", email="ada@example.com")
        comment = await service.add(identity, "  great shots  ")
        assert comment.text == "great shots"
        assert comment.user_name == "ada"
        assert comment.user_email == "ada@example.com"
        assert comment.like_count == 0

    @pytest.mark.asyncio
    async def test_add_prefers_profile_name(self, service):
        comment = await service.add(Identity(uid="u1", name="Ada L."), "hello")
        assert comment.user_name == "Ada L."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   "])
    async def test_add_rejects_blank(self, service, text):
        with pytest.raises(BadRequest, match="required"):
            await service.add(Identity(uid="u1"), text)

    @pytest.mark.asyncio
    async def test_add_rejects_too_long(self, service):
        with pytest.raises(BadRequest, match="20"):
            await service.add(Identity(uid="u1"), "x" * 21)

    @pytest.mark.asyncio
    async def test_list_respects_limit(self, service):
        for i in range(3):
            await service.add(Identity(uid="u1"), f"c{i}")
        comments = await service.list_recent()
        assert [c.text for c in comments] == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_toggle_unknown(self, service):
        with pytest.raises(NotFound):
            await service.toggle_like(Identity(uid="u1"), "cmt_missing")


# =========================================================================
# API
# =========================================================================


class TestCommentAPI:
    def test_list_is_public(self, client):
        response = client.get(COMMENTS)
        assert response.status_code == 200
        assert response.json() == {"success": True, "comments": []}

    def test_post_requires_auth(self, client, comment_store):
        response = client.post(COMMENTS, json={"text": "hi"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_post_and_list(self, client):
        response = client.post(
            COMMENTS, json={"text": "Lovely portfolio"}, headers=_auth()
        )
        assert response.status_code == 200
        comment = response.json()["comment"]
        assert comment["text"] == "Lovely portfolio"
        assert comment["userId"] == "u1"
        assert comment["userName"] == "u1"
        assert comment["userEmail"] == "u1@local"
        assert comment["likes"] == []
        assert comment["likeCount"] == 0

        listed = client.get(COMMENTS).json()["comments"]
        assert [c["id"] for c in listed] == [comment["id"]]

    def test_blank_comment(self, client):
        response = client.post(COMMENTS, json={"text": " "}, headers=_auth())
        assert response.status_code == 400
        assert response.json()["code"] == "BAD_REQUEST"

    def test_like_toggles_per_user(self, client):
        comment_id = client.post(
            COMMENTS, json={"text": "nice"}, headers=_auth()
        ).json()["comment"]["id"]
        like = f"{COMMENTS}/{comment_id}/like"

        first = client.post(like, headers=_auth("token-u2")).json()["comment"]
        assert first["likes"] == ["u2"]
        assert first["likeCount"] == 1

        second = client.post(like, headers=_auth("token-u1")).json()["comment"]
        assert second["likeCount"] == 2

        undone = client.post(like, headers=_auth("token-u2")).json()["comment"]
        assert undone["likes"] == ["u1"]
        assert undone["likeCount"] == 1

    def test_like_unknown_comment(self, client):
        response = client.post(f"{COMMENTS}/cmt_missing/like", headers=_auth())
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
