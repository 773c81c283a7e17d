"""
Test cases for the user store adapter.
"""
import uuid

import pytest

from seniko.auth.models import User
from seniko.auth.store import UserStore
from seniko.base_microservice import create_session_factory
from seniko.errors import DuplicateEmail, StoreUnavailable


def _user(email="alice@example.com", username="alice"):
    return User(id=uuid.uuid4(), username=username, email=email, password_hash="$2b$04$notarealhash")


@pytest.mark.asyncio
async def test_create_and_find_by_email(session):
    store = UserStore(session)
    created = await store.create(_user())

    found = await store.find_by_email("alice@example.com")

    assert found is not None
    assert found.id == created.id
    assert found.created_at is not None


@pytest.mark.asyncio
async def test_find_by_email_missing(session):
    assert await UserStore(session).find_by_email("nobody@example.com") is None


@pytest.mark.asyncio
async def test_find_by_id(session):
    store = UserStore(session)
    created = await store.create(_user())

    assert (await store.find_by_id(created.id)).email == "alice@example.com"
    assert await store.find_by_id(uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_duplicate_email_rejected_by_unique_index(app):
    async with app.state.session_factory() as session:
        await UserStore(session).create(_user())

    async with app.state.session_factory() as session:
        store = UserStore(session)
        with pytest.raises(DuplicateEmail):
            await store.create(_user(username="impostor"))
        # the session is usable again after the rollback
        assert (await store.find_by_email("alice@example.com")).username == "alice"


@pytest.mark.asyncio
async def test_unreachable_store(tmp_path):
    engine, session_factory = create_session_factory(
        f"sqlite+aiosqlite:///{tmp_path / 'no' / 'such' / 'dir.db'}"
    )
    try:
        async with session_factory() as session:
            with pytest.raises(StoreUnavailable):
                await UserStore(session).find_by_email("alice@example.com")
        async with session_factory() as session:
            with pytest.raises(StoreUnavailable):
                await UserStore(session).create(_user())
    finally:
        await engine.dispose()
