import pytest

from app.auth.credentials import UserProjection
from app.auth.deps import AuthorizationGuard
from app.auth.session import SessionCodec
from app.errors import ForbiddenError, UnauthorizedError


def _codec():
    return SessionCodec(secret="guard-secret", max_age=3600, update_age=600)


def test_same_user_is_enforced_by_default():
    guard = AuthorizationGuard(_codec())

    guard.require_same_user(5, 5)
    with pytest.raises(ForbiddenError):
        guard.require_same_user(5, 6)


@pytest.mark.parametrize("session_id,target_id", [(1, 2), (2, 1), (10, 999)])
def test_bypass_lets_any_pair_through(session_id, target_id):
    guard = AuthorizationGuard(_codec(), same_user_bypass=True)

    guard.require_same_user(session_id, target_id)


def test_require_auth_without_token():
    guard = AuthorizationGuard(_codec())

    with pytest.raises(UnauthorizedError):
        guard.require_auth(None)
    with pytest.raises(UnauthorizedError):
        guard.require_auth("")


def test_require_auth_returns_session_user():
    codec = _codec()
    guard = AuthorizationGuard(codec)
    token = codec.issue(UserProjection(id="3", email="c@x.com", name="Cam"))

    session = guard.require_auth(token)

    assert session.user.id == 3
    assert session.user.email == "c@x.com"


def test_require_auth_rejects_zero_subject():
    codec = _codec()
    guard = AuthorizationGuard(codec)
    token = codec.issue(UserProjection(id="0", email="z@x.com", name="Zed"))

    with pytest.raises(UnauthorizedError):
        guard.require_auth(token)


def test_forbidden_body_uses_message_key():
    assert ForbiddenError().body() == {"message": "Forbidden"}
    assert UnauthorizedError().body() == {"error": "Unauthorized"}
