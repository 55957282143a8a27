# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")

from chorus_graph.api.v1.dependencies import get_emitter
from chorus_graph.core.security import create_access_token
from chorus_graph.db.session import Base
from chorus_graph.db.session import get_db as app_get_session
from chorus_graph.main import app as fastapi_app
from chorus_graph.models import (
    Community,
    CommunityVisibility,
    Follow,
    Post,
    PostVisibility,
    User,
)
from chorus_graph.services import memberships
from chorus_graph.services.identity import IdentityContext
from chorus_graph.services.notifications import CollectingNotificationEmitter

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture()
def engine() -> Iterator[Engine]:
    """Provide a fresh in-memory database per test."""
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
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def emitter() -> CollectingNotificationEmitter:
    """Collect notification events emitted during a test."""
    return CollectingNotificationEmitter()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    emitter: CollectingNotificationEmitter,
) -> Iterator[None]:
    def _get_session_override() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_emitter] = lambda: emitter
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_emitter, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with unique ids."""

    def _make(username: str | None = None, display_name: str | None = None) -> User:
        number = next(_USER_COUNTER)
        handle = (username or f"user{number}").lower()
        user = User(id=f"u-{number:04d}-{handle}", username=handle, display_name=display_name)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


def identity_of(user: User) -> IdentityContext:
    return IdentityContext(user_id=user.id)


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return authorization headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(user.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice", "Alice")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob", "Bob")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol", "Carol")


@pytest.fixture()
def make_community(db_session: Session) -> Callable[..., Community]:
    """Return a factory creating communities through the registry."""

    def _make(
        creator: User,
        name: str,
        visibility: CommunityVisibility = CommunityVisibility.PUBLIC,
    ) -> Community:
        community, _ = memberships.create_community(
            db_session, identity_of(creator), name=name, visibility=visibility
        )
        return community

    return _make


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory persisting posts directly."""

    def _make(
        author: User,
        visibility: PostVisibility = PostVisibility.PUBLIC,
        community: Community | None = None,
        parent: Post | None = None,
        body: str = "hello",
    ) -> Post:
        post = Post(
            author_id=author.id,
            community_id=community.id if community else None,
            parent_id=parent.id if parent else None,
            visibility=visibility,
            body_md=body,
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make


@pytest.fixture()
def follow(db_session: Session) -> Callable[[User, User], Follow]:
    """Return a helper recording that ``follower`` follows ``following``."""

    def _follow(follower: User, following: User) -> Follow:
        edge = Follow(follower_id=follower.id, following_id=following.id)
        db_session.add(edge)
        db_session.commit()
        return edge

    return _follow
