from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from sqlmodel import Session, select

from app.errors import BadRequestError, UnauthorizedError
from app.models.user import User

from .security import verify_password

logger = logging.getLogger(__name__)


class InvalidInputError(BadRequestError):
    default_message = "Email and password are required"


class CredentialError(UnauthorizedError):
    """Login rejected. The body never says which half of the pair was wrong."""

    default_message = "Invalid credentials"
    reason = "invalid_credentials"


class UserNotFoundError(CredentialError):
    reason = "user_not_found"


class InvalidCredentialError(CredentialError):
    reason = "password_mismatch"


@dataclass(frozen=True)
class UserProjection:
    """What a successful login hands to the session codec."""

    id: str
    email: str
    name: str
    surnames: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserProjection":
        return cls(
            id=str(user.id),
            email=user.email,
            name=user.name,
            surnames=user.surnames,
            phone=user.phone,
            country=user.country,
            image=user.image_url,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def get_user_by_email(session: Session, email: str) -> Optional[User]:
    """Exact, case-sensitive lookup."""
    return session.exec(select(User).where(User.email == email)).first()


def authorize(session: Session, email: Optional[str], password: Optional[str]) -> UserProjection:
    """Verify an email/password pair.

    Raises InvalidInputError when either field is blank, UserNotFoundError when
    no user has that email and InvalidCredentialError when the hash does not
    match. On success the projection carries no password material.
    """
    if not email or not password:
        raise InvalidInputError()

    user = get_user_by_email(session, email)
    if user is None:
        logger.info("login rejected: %s", UserNotFoundError.reason)
        raise UserNotFoundError()

    if not verify_password(password, user.password):
        logger.info("login rejected for user %s: %s", user.id, InvalidCredentialError.reason)
        raise InvalidCredentialError()

    logger.info("credentials verified for user %s", user.id)
    return UserProjection.from_user(user)
