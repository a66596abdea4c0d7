import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.auth.deps import AuthorizationGuard, get_guard, require_auth
from app.auth.security import hash_password
from app.auth.session import SessionUser
from app.database import get_session
from app.errors import BadRequestError, NotFoundError
from app.models.user import User
from app.schemas.user import UserPage, UserPublic, UserUpdate
from app.utils.clock import utcnow
from app.utils.pagination import normalize
from app.utils.sql import count_rows

logger = logging.getLogger(__name__)

router = APIRouter()

# Columns that cannot be cleared through a profile update.
_REQUIRED_FIELDS = ("email", "password", "name", "surnames")


def email_taken(session: Session, email: str, exclude_id: int) -> bool:
    return session.exec(select(User).where(User.email == email, User.id != exclude_id)).first() is not None


def get_user_or_404(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError()
    return user


@router.get("/users", response_model=UserPage)
def list_users(
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    current_user: SessionUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """Paginated list of every user, newest first"""
    pagination = normalize(page, limit)

    statement = select(User)
    total = count_rows(session, statement)
    if pagination.past_end(total):
        # Offsets this far out can exceed the database integer range
        return {"meta": pagination.meta(total), "data": []}

    users = session.exec(
        statement.order_by(User.created_at.desc(), User.id.desc()).offset(pagination.skip).limit(pagination.limit)
    ).all()

    return {"meta": pagination.meta(total), "data": users}


@router.get("/users/{user_id}", response_model=UserPublic)
def get_user(
    user_id: int,
    current_user: SessionUser = Depends(require_auth),
    guard: AuthorizationGuard = Depends(get_guard),
    session: Session = Depends(get_session),
):
    """Own profile"""
    guard.require_same_user(current_user.id, user_id)
    return get_user_or_404(session, user_id)


@router.put("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    body: Any = Body(default=None),
    current_user: SessionUser = Depends(require_auth),
    guard: AuthorizationGuard = Depends(get_guard),
    session: Session = Depends(get_session),
):
    """Update own profile.

    The session keeps the name/phone/country captured at login; callers must
    log in again to see these edits reflected in /api/auth/session.
    """
    guard.require_same_user(current_user.id, user_id)
    validated = UserUpdate.model_validate(body if body is not None else {})

    user = get_user_or_404(session, user_id)

    update_data = validated.model_dump(exclude_unset=True, mode="json")
    for field in _REQUIRED_FIELDS:
        if field in update_data and update_data[field] is None:
            del update_data[field]

    new_email = update_data.get("email")
    if new_email and new_email != user.email and email_taken(session, new_email, user.id):
        raise BadRequestError("Email already in use")

    if "password" in update_data:
        update_data["password"] = hash_password(update_data["password"])

    for field, value in update_data.items():
        setattr(user, field, value)

    user.updated_at = utcnow()
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Another request claimed the email between the check and the commit
        session.rollback()
        raise BadRequestError("Email already in use")
    session.refresh(user)

    logger.info("user %s updated fields: %s", user.id, ", ".join(sorted(update_data)) or "-")
    return user
