from dataclasses import dataclass
from typing import Any, Optional

import requests

from repositories.supabase_rest_client import SupabaseHttpError, _parse_json


DEFAULT_PER_PAGE = 1000
DEFAULT_MAX_PAGES = 20


def normalize_email(value):
    return str(value or "").strip().lower()


def _auth_headers(api_key, bearer_token=None):
    return {
        "apikey": api_key,
        "Authorization": f"Bearer {bearer_token or api_key}",
        "Content-Type": "application/json",
    }


class SupabaseAuthAdmin:
    """GoTrue admin API (`/auth/v1/admin/users`), service role key required."""

    def __init__(self, supabase_url, service_role_key, timeout_seconds=None):
        self.supabase_url = str(supabase_url or "").rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.headers = _auth_headers(service_role_key)

    def _request(self, method, path, params=None, json_body=None):
        resp = requests.request(
            method=method,
            url=f"{self.supabase_url}{path}",
            headers=dict(self.headers),
            params=params,
            json=json_body,
            timeout=self.timeout_seconds,
        )
        if resp.status_code < 200 or resp.status_code >= 300:
            raise SupabaseHttpError.from_response(resp)
        return _parse_json(resp)

    def list_users(self, page=1, per_page=DEFAULT_PER_PAGE):
        data = self._request(
            "GET",
            "/auth/v1/admin/users",
            params={"page": str(page), "per_page": str(per_page)},
        )
        if isinstance(data, dict):
            return list(data.get("users") or [])
        return []

    def iter_users(self, per_page=DEFAULT_PER_PAGE, max_pages=DEFAULT_MAX_PAGES):
        for page in range(1, max_pages + 1):
            users = self.list_users(page=page, per_page=per_page)
            for user in users:
                yield user
            if len(users) < per_page:
                return

    def find_user_by_email(self, email, per_page=DEFAULT_PER_PAGE, max_pages=DEFAULT_MAX_PAGES):
        # No email index on the admin API: this walks the whole listing.
        target = normalize_email(email)
        if not target:
            return None
        for user in self.iter_users(per_page=per_page, max_pages=max_pages):
            if normalize_email(user.get("email")) == target:
                return user
        return None

    def create_user(self, attributes):
        data = self._request("POST", "/auth/v1/admin/users", json_body=attributes)
        return _unwrap_user(data)

    def update_user_by_id(self, user_id, attributes):
        data = self._request("PUT", f"/auth/v1/admin/users/{user_id}", json_body=attributes)
        return _unwrap_user(data)


def _unwrap_user(data):
    if not isinstance(data, dict):
        return {}
    if isinstance(data.get("user"), dict):
        return data["user"]
    return data


def get_user(supabase_url, anon_key, access_token, timeout_seconds=None):
    """Return the signed-in user for an access token, or None when the token is rejected."""
    resp = requests.request(
        method="GET",
        url=f"{str(supabase_url).rstrip('/')}/auth/v1/user",
        headers=_auth_headers(anon_key, bearer_token=access_token),
        timeout=timeout_seconds,
    )
    if resp.status_code in (401, 403):
        return None
    if resp.status_code < 200 or resp.status_code >= 300:
        raise SupabaseHttpError.from_response(resp)
    data = _parse_json(resp)
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return data


@dataclass(frozen=True)
class PasswordGrantResult:
    ok: bool
    status: int
    status_text: str = ""
    user_id: Optional[str] = None
    error: Any = None

    def to_report(self):
        if not self.ok:
            return {
                "ok": False,
                "status": self.status,
                "statusText": self.status_text,
                "error": self.error,
            }
        return {"ok": True, "status": self.status, "user_id": self.user_id}


def password_grant(supabase_url, anon_key, email, password, timeout_seconds=None):
    """Try a password sign-in; a rejected login is a result, not an exception."""
    resp = requests.request(
        method="POST",
        url=f"{str(supabase_url).rstrip('/')}/auth/v1/token",
        headers=_auth_headers(anon_key),
        params={"grant_type": "password"},
        json={"email": str(email).strip(), "password": str(password)},
        timeout=timeout_seconds,
    )
    payload = _parse_json(resp)
    if resp.status_code < 200 or resp.status_code >= 300:
        return PasswordGrantResult(
            ok=False,
            status=resp.status_code,
            status_text=resp.reason or "",
            error=payload if payload is not None else resp.text,
        )

    user_id = None
    if isinstance(payload, dict):
        user = payload.get("user") if isinstance(payload.get("user"), dict) else {}
        user_id = user.get("id") or payload.get("user_id") or None
    return PasswordGrantResult(ok=True, status=resp.status_code, status_text=resp.reason or "", user_id=user_id)
