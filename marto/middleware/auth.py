from functools import wraps
from flask import request, jsonify, g

from marto.errors import AuthError
from marto.models.database import Role
from marto.services.auth_service import AuthService


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme != "Bearer":
        return ""
    return token.strip()


def require_auth(f):
    """Middleware to require JWT authentication.

    The decoded claims ({id, email, role}) are stored on ``g.current_user``.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            g.current_user = AuthService.authenticate(_bearer_token())
        except AuthError as e:
            return jsonify(e.to_dict()), e.status_code

        return f(*args, **kwargs)
    return decorated


def current_role() -> Role:
    return Role(g.current_user["role"])


def require_role(role: Role):
    """Middleware to require an authenticated caller with the given role."""
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated(*args, **kwargs):
            if current_role() is not role:
                return jsonify({"error": f"Access restricted to role '{role.value}'"}), 403
            return f(*args, **kwargs)
        return decorated
    return decorator
