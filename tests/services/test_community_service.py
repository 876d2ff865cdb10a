# mypy: ignore-errors
# tests/services/test_community_service.py
"""Tests for community creation and description edits."""

import pytest

from tenxr_community.core.exceptions import Conflict, Forbidden, InvalidInput, NotFound
from tenxr_community.services import community_service, invalidation


def test_create_community_derives_slug(db_session, test_user, bus, published) -> None:
    community = community_service.create_community(db_session, test_user, "  Rust Lovers ", bus=bus)

    assert community.name == "Rust Lovers"
    assert community.slug == "rust-lovers"
    assert community.created_by == test_user.id
    assert published == [invalidation.HOME_FEED]


@pytest.mark.parametrize(
    ("name", "message"),
    [
        ("", "name is required"),
        ("ab", "at least 3"),
        ("x" * 51, "no more than 50"),
        ("!!!", "can only contain"),
    ],
)
def test_invalid_community_names(db_session, test_user, bus, name, message) -> None:
    with pytest.raises(InvalidInput, match=message):
        community_service.create_community(db_session, test_user, name, bus=bus)


def test_duplicate_name_conflicts(db_session, test_user, community, bus) -> None:
    with pytest.raises(Conflict, match="name already exists"):
        community_service.create_community(db_session, test_user, community.name, bus=bus)


def test_duplicate_slug_conflicts(db_session, test_user, community, bus) -> None:
    with pytest.raises(Conflict, match="URL already exists"):
        community_service.create_community(db_session, test_user, "test   community", bus=bus)


def test_creator_updates_description(db_session, test_user, community, bus, published) -> None:
    updated = community_service.update_description(
        db_session, test_user, community.slug, "  All about tests ", bus=bus
    )

    assert updated.description == "All about tests"
    assert published == [invalidation.community(community.slug)]


def test_empty_description_clears_it(db_session, test_user, community, bus) -> None:
    updated = community_service.update_description(db_session, test_user, community.slug, "", bus=bus)
    assert updated.description is None


def test_only_creator_may_edit(db_session, other_user, community, bus) -> None:
    with pytest.raises(Forbidden):
        community_service.update_description(db_session, other_user, community.slug, "mine", bus=bus)


def test_edit_missing_community(db_session, test_user, bus) -> None:
    with pytest.raises(NotFound):
        community_service.update_description(db_session, test_user, "nowhere", "text", bus=bus)


def test_description_length_limit(db_session, test_user, community, bus) -> None:
    with pytest.raises(InvalidInput, match="no more than 500"):
        community_service.update_description(
            db_session, test_user, community.slug, "d" * 501, bus=bus
        )
