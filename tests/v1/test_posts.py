# mypy: ignore-errors
# tests/v1/test_posts.py
"""Tests for post, comment and feed endpoints."""

from fastapi import status


def test_create_post(client, auth_token, community) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={
            "community_slug": community.slug,
            "title": "First post",
            "content_type": "text",
            "content": '{"type": "doc"}',
        },
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "success"
    assert data["community_slug"] == community.slug


def test_create_post_invalid_title(client, auth_token, community) -> None:
    response = client.post(
        "/api/v1/posts/",
        json={"community_slug": community.slug, "title": "", "content": "{}"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Post title is required."


def test_create_comment(client, other_auth_token, test_post) -> None:
    response = client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"text": "Interesting"},
        headers=other_auth_token,
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["comment_id"]


def test_feed_reflects_new_votes(client, auth_token, test_post) -> None:
    before = client.get("/api/v1/posts/feed")
    assert before.status_code == status.HTTP_200_OK
    assert before.json()["items"][0]["score"] == 0

    client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
        headers=auth_token,
    )

    after = client.get("/api/v1/posts/feed")
    assert after.json()["items"][0]["score"] == 1


def test_feed_reflects_new_posts(client, auth_token, community) -> None:
    assert client.get("/api/v1/posts/feed").json()["items"] == []

    client.post(
        "/api/v1/posts/",
        json={"community_slug": community.slug, "title": "Brand new", "content": "{}"},
        headers=auth_token,
    )

    feed = client.get("/api/v1/posts/feed").json()
    assert [item["title"] for item in feed["items"]] == ["Brand new"]
    assert feed["total"] == 1


def test_feed_pagination(client, auth_token, community) -> None:
    for number in range(11):
        client.post(
            "/api/v1/posts/",
            json={"community_slug": community.slug, "title": f"Post {number:02d}", "content": "{}"},
            headers=auth_token,
        )

    first = client.get("/api/v1/posts/feed").json()
    second = client.get("/api/v1/posts/feed", params={"page": 2}).json()

    assert first["total"] == 11
    assert first["total_pages"] == 2
    assert len(first["items"]) == 10
    assert second["page"] == 2
    assert len(second["items"]) == 1


def test_feed_reflects_new_comments(client, other_auth_token, test_post) -> None:
    assert client.get("/api/v1/posts/feed").json()["items"][0]["comment_count"] == 0

    client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"text": "First!"},
        headers=other_auth_token,
    )

    assert client.get("/api/v1/posts/feed").json()["items"][0]["comment_count"] == 1


def test_get_post_detail(client, auth_token, test_post, test_comment) -> None:
    client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
        headers=auth_token,
    )

    response = client.get(f"/api/v1/posts/{test_post.id}", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["score"] == 1
    assert data["my_vote"] == "upvote"
    assert data["community"]["slug"] == "test-community"
    assert [comment["content"] for comment in data["comments"]] == ["Nice post"]


def test_get_post_detail_anonymous(client, test_post) -> None:
    response = client.get(f"/api/v1/posts/{test_post.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["my_vote"] is None


def test_get_post_detail_bad_token(client, test_post) -> None:
    response = client.get(
        f"/api/v1/posts/{test_post.id}", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_get_missing_post(client) -> None:
    response = client.get("/api/v1/posts/missing")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Post not found."
