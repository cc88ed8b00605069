"""Role lookup for the signed-in user and the route guard built on it.

A request's role is resolved once into a `RoleState` (loading, resolved or
error) and cached on `flask.g`; `require_role` compares it case-insensitively
with the role a view needs and redirects everyone else to the not-authorized
route.
"""

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import current_app, g, jsonify, redirect, request

from repositories.supabase_auth_client import get_user
from repositories.supabase_rest_client import SupabaseRestClient


STATUS_LOADING = "loading"
STATUS_RESOLVED = "resolved"
STATUS_ERROR = "error"

ACCESS_PENDING = "pending"
ACCESS_GRANTED = "granted"
ACCESS_DENIED = "denied"

RESOLVER_EXTENSION_KEY = "eachr_role_resolver"


@dataclass(frozen=True)
class RoleState:
    status: str
    role: Optional[str] = None
    error: str = ""
    user_id: Optional[str] = None

    @classmethod
    def loading(cls):
        return cls(status=STATUS_LOADING)

    @classmethod
    def resolved(cls, role, user_id=None):
        return cls(status=STATUS_RESOLVED, role=role or None, user_id=user_id)

    @classmethod
    def failed(cls, error, user_id=None):
        return cls(status=STATUS_ERROR, role=None, error=str(error or ""), user_id=user_id)

    @property
    def is_loading(self):
        return self.status == STATUS_LOADING


def normalize_role(value):
    return str(value or "").strip().lower()


def evaluate_access(required_role, state):
    if state is None or state.is_loading:
        return ACCESS_PENDING
    role = normalize_role(state.role)
    if role and role == normalize_role(required_role):
        return ACCESS_GRANTED
    return ACCESS_DENIED


def fetch_user_role(settings, access_token, user_lookup=get_user, rest_client_factory=SupabaseRestClient):
    """Resolve the profile role for an access token. Failures leave the role unset."""
    if not access_token:
        return RoleState.resolved(None)
    user_id = None
    try:
        user = user_lookup(settings.supabase_url, settings.anon_key, access_token)
        if not user:
            return RoleState.resolved(None)
        user_id = user["id"]
        rest = rest_client_factory(settings.supabase_url, settings.anon_key, bearer_token=access_token)
        rows = rest.fetch_all("profiles", {"select": "role", "id": f"eq.{user_id}", "limit": "1"})
    except Exception as exc:
        return RoleState.failed(exc, user_id=user_id)
    if len(rows) != 1:
        return RoleState.failed("Profile row not found", user_id=user_id)
    return RoleState.resolved(rows[0].get("role"), user_id=user_id)


def bearer_token_from_request():
    auth = request.headers.get("Authorization", "").strip()
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip()
    return ""


def current_role_state():
    if "role_state" not in g:
        resolver = current_app.extensions.get(RESOLVER_EXTENSION_KEY)
        if resolver is None:
            g.role_state = RoleState.resolved(None)
        else:
            g.role_state = resolver(bearer_token_from_request())
    return g.role_state


def not_authorized_route():
    return current_app.config.get("NOT_AUTHORIZED_ROUTE", "/not-authorized")


def require_role(required_role):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            decision = evaluate_access(required_role, current_role_state())
            if decision == ACCESS_PENDING:
                return jsonify({"loading": True, "message": "Loading..."}), 202
            if decision == ACCESS_DENIED:
                return redirect(not_authorized_route(), code=302)
            return view(*args, **kwargs)
        return wrapped
    return decorator
