"""REST client for the course portal API."""

import logging
from typing import Any, Optional

import requests

import config

logger = logging.getLogger(__name__)

TOKEN_KEY = "auth_token"


class ApiError(Exception):
    """Non-2xx response (or transport failure) from the portal API."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ApiClient:
    """
    Thin JSON-over-HTTP wrapper. The bearer token lives in the local store
    under auth_token so it survives restarts.
    """

    def __init__(
        self,
        base_url: str = config.PORTAL_API_URL,
        store=None,
        timeout: float = config.HTTP_TIMEOUT_SEC,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.store = store
        self.timeout = timeout
        self.session = session or requests.Session()
        self.token: Optional[str] = store.get_item(TOKEN_KEY) if store is not None else None

    def set_token(self, token: str) -> None:
        self.token = token
        if self.store is not None:
            self.store.set_item(TOKEN_KEY, token)

    def clear_token(self) -> None:
        self.token = None
        if self.store is not None:
            self.store.remove_item(TOKEN_KEY)

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, endpoint: str, json: Any = None, params: Optional[dict] = None) -> Any:
        headers = {"Content-Type": "application/json", **self.auth_headers()}
        try:
            r = self.session.request(
                method,
                self.url_for(endpoint),
                json=json,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(str(e)) from e

        if not r.ok:
            try:
                message = r.json().get("error") or f"HTTP {r.status_code}"
            except (ValueError, AttributeError):
                message = f"HTTP {r.status_code}"
            raise ApiError(message, status=r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            return r.text

    def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self.request("POST", endpoint, json=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self.request("PUT", endpoint, json=data)

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)

    # --- Auth ---

    def login(self, username: str, password: str) -> dict:
        data = self.post("/auth/login", {"username": username, "password": password})
        if data and data.get("token"):
            self.set_token(data["token"])
        return data

    def register(self, username: str, email: str, password: str) -> dict:
        data = self.post("/auth/register", {"username": username, "email": email, "password": password})
        if data and data.get("token"):
            self.set_token(data["token"])
        return data

    def logout(self) -> None:
        try:
            self.post("/auth/logout")
        finally:
            self.clear_token()

    # --- Analytics ---

    def track_page_visit(self, visit: dict) -> Any:
        return self.post(config.PAGE_VISIT_ENDPOINT, visit)

    def get_user_visits(
        self,
        user_id: int,
        limit: int = 50,
        offset: int = 0,
        page_type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> dict:
        """Admin only: a user's visits plus stats and popular pages."""
        params: dict = {"limit": limit, "offset": offset}
        if page_type:
            params["page_type"] = page_type
        if start_date:
            params["start_date"] = start_date
        if end_date:
            params["end_date"] = end_date
        return self.get(f"/analytics/user/{user_id}/visits", params=params)

    def get_analytics_stats(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> dict:
        """Admin only: site-wide visit stats."""
        params: dict = {}
        if start_date:
            params["start_date"] = start_date
        if end_date:
            params["end_date"] = end_date
        return self.get("/analytics/stats", params=params or None)
