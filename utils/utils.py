from functools import wraps
from flask import request, jsonify, g, current_app
from utils.tokens import decode_jwt


def _token_from_request():
    token = request.cookies.get("access_token")
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):]
    return None


def login_required(f):
    """Resolve the caller's identity from the platform-issued token into ``g.user``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _token_from_request()
        if not token:
            current_app.logger.debug("No access_token found in cookies or headers")
            return jsonify({"error": "Unauthorized"}), 401

        decoded = decode_jwt(token)
        if not decoded or decoded.get("user_id") is None:
            return jsonify({"error": "Invalid token"}), 401

        g.user = decoded
        return f(*args, **kwargs)

    return decorated_function
