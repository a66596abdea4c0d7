"""Shared helpers for API tests."""

from sqlmodel import Session

from app.auth.credentials import UserProjection
from app.models.user import User, UserContactLink

DEFAULT_PASSWORD = "P@ssw0rd!"


def link_contact(session: Session, owner: User, contact: User) -> None:
    """Make ``contact`` appear in ``owner``'s contact list."""
    session.add(UserContactLink(user_id=owner.id, contact_id=contact.id))
    session.commit()


def auth_headers(app, user: User) -> dict:
    """Bearer header for ``user``, issued by the app's own codec."""
    token = app.state.guard.codec.issue(UserProjection.from_user(user))
    return {"Authorization": f"Bearer {token}"}
