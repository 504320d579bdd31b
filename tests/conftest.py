# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-jwt-secret-key-for-cask-notes")
os.environ.setdefault("OPERATION_SIGNING_SECRET", "test-operation-signing-secret-0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from cask_notes.api.v1.dependencies import get_media_store_dep
from cask_notes.core.passwords import hash_password
from cask_notes.core.signer import OperationSigner, get_operation_signer
from cask_notes.core.tokens import CallerIdentity, create_access_token
from cask_notes.db.session import Base
from cask_notes.db.session import get_db as app_get_session
from cask_notes.main import app as fastapi_app
from cask_notes.models import OwnershipMode, Post, User
from cask_notes.services.media import LocalMediaStore
from cask_notes.services.post_authority import PostOwnershipAuthority

TEST_DB_URL = "sqlite://"
ANON_PASSWORD = "oak-cask"


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
    # Service commits become savepoint releases inside the outer transaction.
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
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


@pytest.fixture()
def media_store(tmp_path: Path) -> LocalMediaStore:
    """Media store rooted in a per-test temporary directory."""
    return LocalMediaStore(tmp_path / "media")


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    media_store: LocalMediaStore,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_media_store_dep] = lambda: media_store
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_media_store_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def signer() -> OperationSigner:
    return get_operation_signer()


@pytest.fixture()
def authority(db_session: Session, media_store: LocalMediaStore) -> PostOwnershipAuthority:
    return PostOwnershipAuthority(db_session, media_store=media_store)


def _persist_user(db_session: Session, **fields: object) -> User:
    user = User(**fields)
    db_session.add(user)
    db_session.flush()
    db_session.refresh(user)
    return user


@pytest.fixture()
def member_user(db_session: Session) -> User:
    """A registered member."""
    return _persist_user(
        db_session,
        email="alice@example.com",
        nickname="Alice",
        password_hash=hash_password("alice-password"),
        is_anonymous=False,
    )


@pytest.fixture()
def other_member(db_session: Session) -> User:
    """A second registered member."""
    return _persist_user(
        db_session,
        email="bob@example.com",
        nickname="Bob",
        password_hash=hash_password("bob-password"),
        is_anonymous=False,
    )


@pytest.fixture()
def anonymous_user(db_session: Session) -> User:
    """An anonymous session identity."""
    return _persist_user(db_session, is_anonymous=True)


def _as_caller(user: User) -> CallerIdentity:
    return CallerIdentity(
        user_id=user.id,
        is_anonymous=user.is_anonymous,
        display_name=user.display_name,
    )


def _auth_headers(user: User) -> dict[str, str]:
    token = create_access_token(user.id, anonymous=user.is_anonymous)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def member_caller(member_user: User) -> CallerIdentity:
    return _as_caller(member_user)


@pytest.fixture()
def other_caller(other_member: User) -> CallerIdentity:
    return _as_caller(other_member)


@pytest.fixture()
def anonymous_caller(anonymous_user: User) -> CallerIdentity:
    return _as_caller(anonymous_user)


@pytest.fixture()
def member_headers(member_user: User) -> dict[str, str]:
    return _auth_headers(member_user)


@pytest.fixture()
def other_headers(other_member: User) -> dict[str, str]:
    return _auth_headers(other_member)


@pytest.fixture()
def anonymous_headers(anonymous_user: User) -> dict[str, str]:
    return _auth_headers(anonymous_user)


@pytest.fixture()
def member_post(db_session: Session, member_user: User) -> Post:
    """A post owned by ``member_user``."""
    post = Post(
        ownership_mode=OwnershipMode.MEMBER,
        owner_user_id=member_user.id,
        edit_password_hash=None,
        title="Lagavulin 16",
        content="<p>Peat and sherry.</p>",
        author_name="Alice",
        tags=["islay"],
        view_count=0,
    )
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    return post


@pytest.fixture()
def anonymous_post(db_session: Session, anonymous_user: User) -> Post:
    """A password-protected post created by ``anonymous_user``'s session."""
    post = Post(
        ownership_mode=OwnershipMode.ANONYMOUS,
        owner_user_id=anonymous_user.id,
        edit_password_hash=hash_password(ANON_PASSWORD),
        title="Glenfarclas 105",
        content="<p>Cask strength.</p>",
        author_name="Anonymous whisky lover",
        tags=["speyside"],
        view_count=0,
    )
    db_session.add(post)
    db_session.flush()
    db_session.refresh(post)
    return post
