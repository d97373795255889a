"""
StoreRatingClient driven against the app in-process through ASGITransport.
"""
import pytest
import pytest_asyncio
from httpx import ASGITransport

from store_rating.client import ApiError, StoreRatingClient
from store_rating.main import app


pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def api(db):
    async with StoreRatingClient("http://testserver", transport=ASGITransport(app=app)) as c:
        yield c


async def test_register_rate_and_rerate(api, create_store):
    store = await create_store(name="Neighbourhood Deli")

    user = await api.register("End To End Test Customer", "e2e@mail.com", "Passw0rd!")
    assert api.is_authenticated
    assert user["role"] == "user"
    api.logout()
    await api.login("e2e@mail.com", "Passw0rd!")

    result = await api.submit_rating(store.id, 4)
    assert result["created"] is True
    listed = await api.list_stores(search="deli")
    assert listed["stores"][0]["average_rating"] == 4
    assert listed["stores"][0]["user_rating"] == 4

    result = await api.submit_rating(store.id, 2)
    assert result["created"] is False
    detail = await api.get_store(store.id)
    assert detail["average_rating"] == 2
    assert detail["total_ratings"] == 1

    mine = await api.my_ratings()
    assert [(r["store_name"], r["rating"]) for r in mine] == [("Neighbourhood Deli", 2)]

    await api.delete_rating(store.id)
    assert (await api.get_store(store.id))["user_rating"] is None


async def test_login_verify_and_logout(api, create_user):
    account, password = await create_user()

    user = await api.login(account.email, password)
    assert user["id"] == account.id
    assert (await api.verify())["email"] == account.email

    api.logout()
    assert not api.is_authenticated
    with pytest.raises(ApiError) as exc_info:
        await api.list_stores()
    assert exc_info.value.status_code == 401
    assert exc_info.value.code == "AUTH_REQUIRED"


async def test_bad_login_raises(api, create_user):
    account, _ = await create_user()
    with pytest.raises(ApiError) as exc_info:
        await api.login(account.email, "WrongPass!1")
    assert exc_info.value.code == "AUTH_INVALID_CREDENTIALS"
    assert not api.is_authenticated


async def test_rejected_token_clears_session(db, create_user):
    account, _ = await create_user()
    async with StoreRatingClient("http://testserver", token="forged.token.value", transport=ASGITransport(app=app)) as api:
        with pytest.raises(ApiError) as exc_info:
            await api.verify()
        assert exc_info.value.status_code == 403
        assert api.token is None

    async with StoreRatingClient("http://testserver", transport=ASGITransport(app=app)) as api:
        await api.login(account.email, "UserPass!23")
        await account.delete()
        with pytest.raises(ApiError) as exc_info:
            await api.verify()
        assert exc_info.value.code == "AUTH_USER_NOT_FOUND"
        assert not api.is_authenticated


async def test_validation_errors_carry_details(api, create_store):
    store = await create_store()
    await api.register("Validation Details Customer", "details@mail.com", "Passw0rd!")

    with pytest.raises(ApiError) as exc_info:
        await api.submit_rating(store.id, 9)
    assert exc_info.value.status_code == 400
    assert exc_info.value.details[0]["field"] == "rating"
    # A validation failure is not an auth failure
    assert api.is_authenticated


async def test_change_password(api):
    await api.register("Password Changing Customer", "pw@mail.com", "Passw0rd!")
    await api.change_password("Passw0rd!", "N3wPassword?")
    api.logout()

    await api.login("pw@mail.com", "N3wPassword?")
    assert api.is_authenticated
