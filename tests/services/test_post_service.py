# mypy: ignore-errors
# tests/services/test_post_service.py
"""Tests for posts, comments and the home feed."""

import pytest

from tenxr_community.core.exceptions import InvalidInput, NotFound
from tenxr_community.models import Community
from tenxr_community.services import invalidation, post_service, vote_ledger


def test_create_text_post(db_session, test_user, community, bus, published) -> None:
    post = post_service.create_post(
        db_session,
        test_user,
        community_slug=community.slug,
        title="  Hello World!  ",
        content_type="text",
        content='{"type": "doc"}',
        bus=bus,
    )

    assert post.title == "Hello World!"
    assert post.slug == "hello-world"
    assert post.community_id == community.id
    assert post.media_url is None
    assert published == [invalidation.community(community.slug), invalidation.HOME_FEED]


def test_create_image_post(db_session, test_user, community, bus) -> None:
    post = post_service.create_post(
        db_session,
        test_user,
        community_slug=community.slug,
        title="A picture",
        content_type="image",
        image_url="https://cdn.example.test/cat.png",
        bus=bus,
    )

    assert post.content is None
    assert post.media_url == "https://cdn.example.test/cat.png"


@pytest.mark.parametrize(
    ("fields", "message"),
    [
        ({"title": ""}, "title is required"),
        ({"title": "ab"}, "at least 3"),
        ({"title": "t" * 301}, "no more than 300"),
        ({"content_type": "video"}, "Invalid post type"),
        ({"content": None}, "content is required"),
        ({"content_type": "image", "content": None}, "Image is required"),
    ],
)
def test_invalid_posts(db_session, test_user, community, bus, fields, message) -> None:
    values = {"title": "Valid title", "content_type": "text", "content": "{}"}
    values.update(fields)
    with pytest.raises(InvalidInput, match=message):
        post_service.create_post(
            db_session, test_user, community_slug=community.slug, bus=bus, **values
        )


def test_post_to_missing_community(db_session, test_user, bus) -> None:
    with pytest.raises(NotFound, match="Community not found"):
        post_service.create_post(
            db_session,
            test_user,
            community_slug="nowhere",
            title="Lost post",
            content_type="text",
            content="{}",
            bus=bus,
        )


def test_create_comment(db_session, other_user, test_post, bus, published) -> None:
    comment = post_service.create_comment(
        db_session, other_user, post_id=test_post.id, text=" Great read ", bus=bus
    )

    assert comment.content == "Great read"
    assert published == [invalidation.post(test_post.id), invalidation.HOME_FEED]


def test_comment_validation(db_session, other_user, test_post, bus) -> None:
    with pytest.raises(InvalidInput, match="Comment text is required"):
        post_service.create_comment(db_session, other_user, post_id=test_post.id, text="  ", bus=bus)
    with pytest.raises(NotFound, match="Post not found"):
        post_service.create_comment(db_session, other_user, post_id="missing", text="hi", bus=bus)


def test_home_feed_includes_scores(db_session, test_user, other_user, test_post, bus) -> None:
    vote_ledger.cast_vote(
        db_session, user_id=other_user.id, votable_id=test_post.id, vote_type="upvote", bus=bus
    )

    feed = post_service.home_feed(db_session)

    assert feed.total == 1
    item = feed.items[0]
    assert item["id"] == test_post.id
    assert item["community_slug"] == "test-community"
    assert item["author_username"] == "tester"
    assert item["score"] == 1
    assert item["comment_count"] == 0


def _add_posts(db_session, author, community, count):
    posts = []
    for number in range(count):
        posts.append(
            post_service.create_post(
                db_session,
                author,
                community_slug=community.slug,
                title=f"Post number {number}",
                content_type="text",
                content="{}",
            )
        )
    return posts


def test_home_feed_pages_newest_first(db_session, test_user, community) -> None:
    posts = _add_posts(db_session, test_user, community, 12)

    first = post_service.home_feed(db_session, page=1)
    second = post_service.home_feed(db_session, page=2)

    assert first.total == 12
    assert first.total_pages == 2
    assert len(first.items) == post_service.FEED_PAGE_SIZE
    assert len(second.items) == 2
    seen = [item["id"] for item in first.items + second.items]
    assert sorted(seen) == sorted(post.id for post in posts)
    assert len(set(seen)) == 12


@pytest.mark.parametrize("page", [0, -3, None])
def test_invalid_page_falls_back_to_first(db_session, test_post, page) -> None:
    feed = post_service.home_feed(db_session, page=page)
    assert feed.page == 1
    assert [item["id"] for item in feed.items] == [test_post.id]


def test_empty_feed_has_one_page(db_session) -> None:
    feed = post_service.home_feed(db_session)
    assert feed.items == []
    assert feed.total == 0
    assert feed.total_pages == 1


def test_home_feed_counts_comments(db_session, other_user, test_post, test_comment) -> None:
    post_service.create_comment(db_session, other_user, post_id=test_post.id, text="Second")
    assert post_service.home_feed(db_session).items[0]["comment_count"] == 2


def test_community_feed_only_lists_its_posts(db_session, test_user, community) -> None:
    other = Community(name="Elsewhere", slug="elsewhere", created_by=test_user.id)
    db_session.add(other)
    db_session.flush()
    mine = _add_posts(db_session, test_user, community, 2)
    _add_posts(db_session, test_user, other, 1)

    feed = post_service.community_feed(db_session, community.slug)

    assert feed.total == 2
    assert sorted(item["id"] for item in feed.items) == sorted(post.id for post in mine)


def test_community_feed_missing_community(db_session) -> None:
    with pytest.raises(NotFound, match="Community not found"):
        post_service.community_feed(db_session, "nowhere")


def test_post_detail_includes_comments_and_votes(
    db_session, test_user, other_user, test_post, test_comment
) -> None:
    vote_ledger.cast_vote(
        db_session, user_id=test_user.id, votable_id=test_post.id, vote_type="upvote"
    )
    vote_ledger.cast_vote(
        db_session,
        user_id=test_user.id,
        votable_id=test_comment.id,
        votable_type="comment",
        vote_type="downvote",
    )

    detail = post_service.post_detail(db_session, test_post.id, viewer_id=test_user.id)

    assert detail["title"] == test_post.title
    assert detail["community"]["slug"] == "test-community"
    assert detail["author"]["username"] == "tester"
    assert detail["score"] == 1
    assert detail["my_vote"] == "upvote"
    assert len(detail["comments"]) == 1
    comment = detail["comments"][0]
    assert comment["content"] == "Nice post"
    assert comment["author"]["username"] == other_user.username
    assert comment["score"] == -1
    assert comment["my_vote"] == "downvote"


def test_post_detail_for_anonymous_reader(db_session, test_post, test_comment) -> None:
    detail = post_service.post_detail(db_session, test_post.id)

    assert detail["my_vote"] is None
    assert detail["comments"][0]["my_vote"] is None


def test_post_detail_missing_post(db_session) -> None:
    with pytest.raises(NotFound, match="Post not found"):
        post_service.post_detail(db_session, "missing")
