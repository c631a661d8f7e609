"""
Client-side session handle shared by the state objects (comment thread, notification feed,
profile editor). It owns the HTTP client and the caller's identity; nothing here is global.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any

import httpx

from lostfound.authentication.schemas import ADMIN_ROLES

API_PREFIX = "/api"


@dataclass
class MutationResult:
    ok: bool
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


@dataclass
class Session:
    http: httpx.Client
    token: Optional[str] = None
    user_id: Optional[str] = None
    role: Optional[str] = None
    locale: str = "en"
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user_id)

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def auth_headers(self) -> Dict[str, str]:
        headers = {"Accept-Language": self.locale, **self.headers}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {**self.auth_headers(), **kwargs.pop("headers", {})}
        return self.http.request(method, f"{API_PREFIX}{path}", headers=headers, **kwargs)

    @classmethod
    def login(cls, http: httpx.Client, username: str, password: str, locale: str = "en") -> "Session":
        """Sign in and resolve the caller's identity; raises httpx.HTTPStatusError on bad credentials."""
        response = http.post(
            f"{API_PREFIX}/auth/login",
            data={"username": username, "password": password},
            headers={"Accept-Language": locale},
        )
        response.raise_for_status()
        token = response.json()["access_token"]
        me = http.get(f"{API_PREFIX}/auth/whoami", headers={"Authorization": f"Bearer {token}"})
        me.raise_for_status()
        identity = me.json()
        return cls(http=http, token=token, user_id=identity["user_id"], role=identity["role"], locale=locale)


def error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("error")
        if isinstance(detail, str):
            return detail
    return fallback
