# mypy: ignore-errors
# tests/v1/test_votes.py
"""Tests for vote-related endpoints."""

from fastapi import status


def test_cast_upvote(client, auth_token, test_post) -> None:
    """Test casting an upvote on a post."""
    response = client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "success"
    assert data["message"] == "Vote registered!"
    assert data["action"] == "created"
    assert data["score"] == 1


def test_repeat_vote_toggles_off(client, auth_token, test_post) -> None:
    payload = {"votable_id": test_post.id, "vote_type": "downvote"}
    client.post("/api/v1/votes/", json=payload, headers=auth_token)
    response = client.post("/api/v1/votes/", json=payload, headers=auth_token)

    data = response.json()
    assert data["action"] == "removed"
    assert data["vote_type"] is None
    assert data["score"] == 0


def test_switch_vote(client, auth_token, test_post) -> None:
    client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
        headers=auth_token,
    )
    response = client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "DOWNVOTE"},
        headers=auth_token,
    )

    data = response.json()
    assert data["action"] == "switched"
    assert data["message"] == "Vote updated!"
    assert data["score"] == -1


def test_vote_invalid_type(client, auth_token, test_post) -> None:
    """Test voting with an unknown vote type."""
    response = client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "sideways"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {
        "status": "error",
        "message": "Invalid vote type.",
        "type": "InvalidInput",
    }


def test_vote_nonexistent_post(client, auth_token) -> None:
    """Test voting on a non-existent post."""
    response = client.post(
        "/api/v1/votes/",
        json={"votable_id": "missing", "vote_type": "upvote"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_vote_requires_auth(client, test_post) -> None:
    response = client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["status"] == "error"


def test_vote_summary(client, auth_token, other_auth_token, test_post) -> None:
    client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
        headers=auth_token,
    )
    client.post(
        "/api/v1/votes/",
        json={"votable_id": test_post.id, "vote_type": "upvote"},
        headers=other_auth_token,
    )

    response = client.get(f"/api/v1/votes/post/{test_post.id}", headers=auth_token)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "votable_id": test_post.id,
        "votable_type": "post",
        "score": 2,
        "my_vote": "upvote",
    }


def test_vote_on_comment(client, auth_token, test_comment) -> None:
    response = client.post(
        "/api/v1/votes/",
        json={"votable_id": test_comment.id, "votable_type": "comment", "vote_type": "upvote"},
        headers=auth_token,
    )

    assert response.status_code == status.HTTP_200_OK
    summary = client.get(f"/api/v1/votes/comment/{test_comment.id}", headers=auth_token)
    assert summary.json()["score"] == 1
