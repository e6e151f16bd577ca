# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, g

from .extensions import db
from .errors import (
    AccessDeniedError,
    AccountBlockedError,
    ServiceError,
    UnauthorizedError,
    error_response,
)
from .models import User
from .services import token_service
from .services.token_service import AuthContext


def _authenticate() -> tuple[User, AuthContext]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise UnauthorizedError("Unauthorized")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise UnauthorizedError("Unauthorized")

    claims = token_service.decode_access_token(token)

    user = db.session.get(User, claims["id"])
    if not user:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise AccountBlockedError("Your account is blocked. Please contact the administrator.")

    return user, AuthContext(user_id=user.id, role=user.role)


def require_auth(f):
    """
    Require a valid access token from an existing, active user.

    Sets on Flask g:
    - g.current_user: the User row
    - g.auth: AuthContext(user_id, role) handed to services

    401 for a missing/malformed header or a vanished user, 403 for a bad or
    expired token and for blocked accounts.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            user, context = _authenticate()
        except ServiceError as exc:
            return error_response(exc)

        g.current_user = user
        g.auth = context
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles):
    """
    Allow only the given roles. Must run after @require_auth.

    Accepts Role members or an allow-set such as ADMIN_ONLY / STAFF.
    """
    allowed = set()
    for role in roles:
        if isinstance(role, (set, frozenset, list, tuple)):
            allowed.update(role)
        else:
            allowed.add(role)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            context = getattr(g, "auth", None)
            if context is None or context.role not in allowed:
                return error_response(AccessDeniedError("Access denied"))
            return f(*args, **kwargs)

        return decorated_function
    return decorator
