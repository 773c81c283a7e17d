"""
Shared fixtures: an application backed by a throwaway SQLite database.
"""
import pytest
from httpx import AsyncClient, ASGITransport

from seniko.auth.jwt import TokenIssuer
from seniko.auth.passwords import PasswordHasher
from seniko.auth.store import UserStore
from seniko.auth.users import AuthService
from seniko.base_microservice import init_models
from seniko.config import JwtSettings, Settings
from seniko.main import create_app

# 64 bytes, the recommended minimum for HS512
TEST_SECRET = "s" * 64


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'seniko.db'}"


@pytest.fixture
def settings(database_url):
    return Settings(
        jwt=JwtSettings(secret_key=TEST_SECRET),
        database_url=database_url,
        password_hash_rounds=4,
        rate_limit="1000 per minute",
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    await init_models(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(base_url="http://test", transport=transport) as ac:
        yield ac


@pytest.fixture
async def session(app):
    async with app.state.session_factory() as session:
        yield session


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer(settings):
    return TokenIssuer(settings.jwt)


@pytest.fixture
def auth_service(session, hasher, token_issuer):
    return AuthService(UserStore(session), hasher, token_issuer)
