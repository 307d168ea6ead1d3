from flask import request
from flask_login import current_user
from .errors import AuthenticationRequired


def current_actor():
    """The signed-in user, or None for guests."""
    if getattr(current_user, "is_authenticated", False):
        return current_user._get_current_object()
    return None


def require_actor(actor):
    if actor is None or not getattr(actor, "id", None):
        raise AuthenticationRequired()
    return actor


def wants_json() -> bool:
    return (
        "application/json" in (request.headers.get("Accept") or "").lower()
        or request.is_json
        or request.path.startswith("/api/")
    )

