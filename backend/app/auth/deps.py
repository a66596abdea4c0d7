from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import ForbiddenError, UnauthorizedError

from .session import AuthSession, SessionCodec, SessionUser

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class AuthorizationGuard:
    """requireAuth / requireSameUser for route handlers.

    ``same_user_bypass`` turns requireSameUser into a no-op. It exists for
    test and development runs only and is never a security boundary; the
    app factory enables it solely for APP_ENV=test|development.
    """

    def __init__(self, codec: SessionCodec, *, cookie_name: str = "session_token", same_user_bypass: bool = False):
        self.codec = codec
        self.cookie_name = cookie_name
        self.same_user_bypass = same_user_bypass

    def token_from_request(self, request: Request, credentials: Optional[HTTPAuthorizationCredentials] = None) -> Optional[str]:
        # Prefer Bearer token when explicitly provided.
        if credentials is not None and credentials.credentials:
            return credentials.credentials
        return request.cookies.get(self.cookie_name) or None

    def require_auth(self, token: Optional[str]) -> AuthSession:
        if not token:
            raise UnauthorizedError()
        session = self.codec.materialize(self.codec.decode(token))
        if not session.user.id:
            raise UnauthorizedError()
        return session

    def require_same_user(self, session_user_id: int, target_user_id: int) -> None:
        if self.same_user_bypass:
            return
        if session_user_id != target_user_id:
            logger.warning("user %s denied access to user %s", session_user_id, target_user_id)
            raise ForbiddenError()

    def set_session_cookie(self, response: Response, token: str, *, secure: bool = False) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.codec.max_age,
            httponly=True,
            secure=secure,
            samesite="lax",
            path="/",
        )

    def clear_session_cookie(self, response: Response) -> None:
        response.delete_cookie(key=self.cookie_name, path="/")


def get_guard(request: Request) -> AuthorizationGuard:
    guard = getattr(request.app.state, "guard", None)
    if guard is None:
        raise RuntimeError("server_config_missing")
    return guard


def get_auth_session(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    guard: AuthorizationGuard = Depends(get_guard),
) -> AuthSession:
    """Authenticate a request, rotating the token once it is older than the update age.

    Supports both:
      - Authorization: Bearer <jwt>
      - the httpOnly session cookie set by /auth/login
    """
    session = guard.require_auth(guard.token_from_request(request, credentials))

    if guard.codec.needs_refresh(session.claims):
        fresh = guard.codec.encode(guard.codec.refresh(session.claims))
        secure = request.url.scheme == "https"
        guard.set_session_cookie(response, fresh, secure=secure)
        response.headers["X-Session-Token"] = fresh

    return session


def require_auth(session: AuthSession = Depends(get_auth_session)) -> SessionUser:
    return session.user
