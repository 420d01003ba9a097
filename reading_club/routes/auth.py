"""
Authentication helpers
Resolves the calling user from an API token sent as a bearer credential
"""
from functools import wraps

from flask import request

from reading_club.error_handlers.exceptions import AuthenticationException
from reading_club.models import get_db, get_models


def _bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def get_current_user():
    """Get the active User for the request's bearer token, or None"""
    token = _bearer_token()
    if not token:
        return None
    User = get_models()['User']
    return get_db().session.query(User).filter_by(api_token=token, is_active=True).first()


def is_authenticated():
    """Check if the request carries a valid token"""
    return get_current_user() is not None


def require_authentication():
    """Decorator to require authentication for routes"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not is_authenticated():
                raise AuthenticationException('A valid bearer token is required')
            return f(*args, **kwargs)
        return decorated_function
    return decorator
