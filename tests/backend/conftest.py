import os
import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

os.environ.setdefault("JWT_SECRET", "test-secret")

from store_rating.core import db as db_module
from store_rating.core.security import hash_password
from store_rating.main import app
from store_rating.models import Role, Store, User


TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """Fresh schema without an HTTP client, for service-level tests."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    # Use ASGITransport without lifespan parameter (not supported in all httpx versions)
    try:
        transport = ASGITransport(app=app, lifespan="off")
    except TypeError:
        # Fallback for httpx versions that don't support lifespan parameter
        transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create users of any role directly via ORM.
    """

    async def _create_user(role: Role = Role.USER, password: str = "UserPass!23", **fields) -> tuple[User, str]:
        tag = uuid.uuid4().hex[:6]
        user = await User.create(
            name=fields.pop("name", f"Test {role.value} account {tag}"),
            email=fields.pop("email", f"{role.value}_{tag}@mail.com"),
            password_hash=hash_password(password),
            role=role,
            **fields,
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def create_admin(create_user):
    async def _create_admin(password: str = "AdminPass!23") -> tuple[User, str]:
        return await create_user(Role.ADMIN, password)

    return _create_admin


@pytest_asyncio.fixture
async def create_store():
    """
    Factory fixture to create stores directly via ORM.
    """

    async def _create_store(name: str | None = None, owner: User | None = None, **fields) -> Store:
        tag = uuid.uuid4().hex[:6]
        return await Store.create(
            name=name or f"Store {tag}",
            email=fields.pop("email", f"store_{tag}@mail.com"),
            address=fields.pop("address", f"{tag} Market Street"),
            owner=owner,
            **fields,
        )

    return _create_store


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(email: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/auth/login",
            json={"email": email, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["token"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def login_as(create_user, auth_header_factory):
    """
    Create a user with the given role and return (user, headers) for it.
    """

    async def _login_as(role: Role = Role.USER, **fields) -> tuple[User, dict[str, str]]:
        user, password = await create_user(role, **fields)
        return user, await auth_header_factory(user.email, password)

    return _login_as
