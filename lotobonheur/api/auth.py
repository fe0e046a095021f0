"""
lotobonheur/api/auth.py
Admin gate for the training endpoints: bearer token → Supabase user → role.
"""
from __future__ import annotations

from functools import wraps

from flask import g, request

from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.errors import AuthorizationError
from lotobonheur.utils.logger import get_logger

log = get_logger("api.auth")

ADMIN_ROLE = "admin"


def bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_admin(view):
    """Reject the request with 401/403 unless the caller holds the admin role."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        if token is None:
            raise AuthorizationError("Unauthorized - Missing bearer token")

        user = db.get_user_for_token(token)
        if user is None:
            raise AuthorizationError("Unauthorized - Invalid token")

        if not db.user_has_role(user["id"], ADMIN_ROLE):
            log.warning(f"User {user['id']} denied admin access to {request.path}")
            raise AuthorizationError("Forbidden - Admin role required", status=403)

        g.user = user
        return view(*args, **kwargs)

    return wrapper
