# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tenxr_community.core.security import create_access_token
from tenxr_community.db.session import Base
from tenxr_community.db.session import get_db as app_get_session
from tenxr_community.main import app as fastapi_app
from tenxr_community.models import Comment, Community, Post, User
from tenxr_community.services.invalidation import InvalidationBus
from tenxr_community.services.view_cache import get_view_cache

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        # Session commits and rollbacks stay inside a savepoint of the outer transaction.
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def clear_view_cache() -> Iterator[None]:
    """Drop cached views so no payload outlives the rows it was built from."""
    get_view_cache().clear()
    yield
    get_view_cache().clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def bus() -> InvalidationBus:
    """A private invalidation bus for observing published scopes."""
    return InvalidationBus()


@pytest.fixture()
def published(bus: InvalidationBus) -> list[str]:
    """Scopes published on ``bus`` during the test, in order."""
    scopes: list[str] = []
    bus.subscribe(scopes.append)
    return scopes


def make_user(db_session: Session, username: str | None = None) -> User:
    """Persist a user linked to a fresh auth subject."""
    number = next(_USER_COUNTER)
    user = User(auth_user_id=f"auth|{number:06d}", username=username)
    db_session.add(user)
    db_session.flush()
    db_session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    """Return authorization headers carrying ``user``'s auth subject."""
    token = create_access_token(user.auth_user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def test_user(db_session: Session) -> Iterator[User]:
    """Create and return a persisted test user."""
    yield make_user(db_session, "tester")


@pytest.fixture()
def other_user(db_session: Session) -> Iterator[User]:
    """Create and return a second persisted user."""
    yield make_user(db_session, "other_user")


@pytest.fixture()
def third_user(db_session: Session) -> Iterator[User]:
    yield make_user(db_session, "third")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def community(db_session: Session, test_user: User) -> Iterator[Community]:
    """Create a default test community owned by ``test_user``."""
    community = Community(
        name="Test Community",
        slug="test-community",
        description="Test community description",
        created_by=test_user.id,
    )
    db_session.add(community)
    db_session.flush()
    db_session.refresh(community)
    yield community


@pytest.fixture()
def test_post(db_session: Session, test_user: User, community: Community) -> Iterator[Post]:
    """Create a baseline text post."""
    post = Post(
        community_id=community.id,
        author_id=test_user.id,
        title="Test post",
        content='{"type": "doc"}',
        content_type="text",
        slug="test-post",
    )
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    yield post


@pytest.fixture()
def test_comment(db_session: Session, other_user: User, test_post: Post) -> Iterator[Comment]:
    """Create a comment on ``test_post``."""
    comment = Comment(post_id=test_post.id, author_id=other_user.id, content="Nice post")
    db_session.add(comment)
    db_session.flush()
    db_session.refresh(comment)
    yield comment


@pytest.fixture()
def user_factory(db_session: Session):
    """Return a callable creating additional persisted users."""

    def _create(username: str | None = None) -> User:
        return make_user(db_session, username)

    return _create


@pytest.fixture()
def headers_for():
    """Return a callable building authorization headers for any user."""
    return auth_headers
