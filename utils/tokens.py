import datetime
import jwt
from flask import current_app, g


def get_jwt_token(user_data, hours=24):
    """Generate JWT token with user payload"""
    if not user_data:
        raise ValueError("User data must be provided to generate JWT token")

    expiration = datetime.datetime.utcnow() + datetime.timedelta(hours=hours)
    payload = {"exp": expiration, **user_data}

    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def decode_jwt(token):
    """Decode and validate JWT token and store user in `g`."""
    try:
        payload = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
        g.user = payload
        return payload
    except jwt.ExpiredSignatureError:
        current_app.logger.info("Token Expired")
        return None
    except jwt.InvalidTokenError:
        current_app.logger.info("Invalid Token Provided")
        return None
