# Overview: Request authentication decorator for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import token_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets g.current_user to the User the token was issued for. Every
    item/sale query downstream filters on g.current_user.id.

    Returns 401 if:
    - No Authorization header, or not a Bearer header
    - Bad signature, malformed or expired token
    - The token's user no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        user = token_service.validate_access_token(token)
        if not user:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        return f(*args, **kwargs)

    return decorated_function
