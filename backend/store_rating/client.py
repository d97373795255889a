# store_rating/client.py
"""
Async HTTP client for the Store Rating API.

Each StoreRatingClient instance owns its session: the bearer token lives on
the instance and is attached per request, never in shared default headers.
Logging in or registering sets it, logging out clears it, and any 401/403
answer clears it too (the session is treated as expired).

    async with StoreRatingClient("http://localhost:5000") as api:
        await api.login("someone@mail.com", "Passw0rd!")
        stores = await api.list_stores(search="cafe")
"""
from typing import Any, Optional

import httpx


class ApiError(Exception):
    """Non-2xx API response, carrying the server's error code and message."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[list] = None):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or []
        super().__init__(f"{status_code} {code}: {message}")


class StoreRatingClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self.token = token
        self.user: Optional[dict] = None

    async def __aenter__(self) -> "StoreRatingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def logout(self) -> None:
        self.token = None
        self.user = None

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        resp = await self._http.request(method, f"/api{path}", headers=headers, **kwargs)
        if resp.status_code in (401, 403):
            self.logout()
        if resp.is_error:
            raise self._to_error(resp)
        return resp.json()

    @staticmethod
    def _to_error(resp: httpx.Response) -> ApiError:
        try:
            err = resp.json().get("error") or {}
        except ValueError:
            err = {}
        return ApiError(
            resp.status_code,
            err.get("code", "HTTP_ERROR"),
            err.get("message", resp.reason_phrase),
            err.get("details"),
        )

    def _start_session(self, data: dict) -> dict:
        self.token = data["token"]
        self.user = data["user"]
        return data["user"]

    # ---- auth ----
    async def register(self, name: str, email: str, password: str, address: Optional[str] = None) -> dict:
        payload = {"name": name, "email": email, "password": password}
        if address is not None:
            payload["address"] = address
        return self._start_session(await self._request("POST", "/auth/register", json=payload))

    async def login(self, email: str, password: str) -> dict:
        return self._start_session(
            await self._request("POST", "/auth/login", json={"email": email, "password": password})
        )

    async def verify(self) -> dict:
        """Re-validate the current token and refresh the cached user."""
        data = await self._request("GET", "/auth/verify")
        self.user = data["user"]
        return self.user

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._request(
            "PUT",
            "/auth/password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # ---- stores ----
    async def list_stores(
        self,
        search: Optional[str] = None,
        sort_by: str = "name",
        sort_order: str = "ASC",
        page: int = 1,
        limit: int = 10,
    ) -> dict:
        params = {"sortBy": sort_by, "sortOrder": sort_order, "page": page, "limit": limit}
        if search:
            params["search"] = search
        return await self._request("GET", "/stores", params=params)

    async def get_store(self, store_id: int) -> dict:
        return (await self._request("GET", f"/stores/{store_id}"))["store"]

    # ---- ratings ----
    async def submit_rating(self, store_id: int, rating: int, comment: Optional[str] = None) -> dict:
        payload: dict[str, Any] = {"store_id": store_id, "rating": rating}
        if comment is not None:
            payload["comment"] = comment
        return await self._request("POST", "/ratings", json=payload)

    async def delete_rating(self, store_id: int) -> None:
        await self._request("DELETE", f"/ratings/store/{store_id}")

    async def my_ratings(self) -> list[dict]:
        return (await self._request("GET", "/ratings/my-ratings"))["ratings"]
