"""Authentication / authorization helpers.

- credentials: email/password verification against the users table
- session: JWT claims snapshot of the verified user, materialized per request
- deps: the authorization guard and its FastAPI dependencies

The API accepts the session token both as ``Authorization: Bearer <token>``
and as the httpOnly cookie set by ``/api/auth/login``.
"""

from .credentials import UserProjection, authorize
from .deps import AuthorizationGuard, get_auth_session, get_guard, require_auth
from .session import AuthSession, SessionClaims, SessionCodec, SessionUser

__all__ = [
    "authorize",
    "UserProjection",
    "AuthorizationGuard",
    "get_auth_session",
    "get_guard",
    "require_auth",
    "AuthSession",
    "SessionClaims",
    "SessionCodec",
    "SessionUser",
]
