import hmac
from functools import wraps
from flask import request, current_app
from .http import jerror


def bearer_token() -> str | None:
    auth = request.authorization
    if auth is None or auth.type != "bearer" or not auth.token:
        return None
    return auth.token.strip()


def admin_required(view):
    """Rejects the request with 401 unless it carries the configured admin bearer token."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        expected = current_app.config["ADMIN_TOKEN"]
        if not token or not hmac.compare_digest(token.encode(), expected.encode()):
            return jerror(401, "UNAUTHORIZED", "Missing or invalid bearer token.")
        return view(*args, **kwargs)
    return wrapper
