"""Contact list routes.

Reads are always scoped to the session user, whatever id sits in the path:
a user that exists but is not one of the caller's contacts answers 404
exactly like a user that does not exist. Writes act on the path user and
require it to be the session user.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends
from sqlmodel import Session, select

from app.auth.deps import AuthorizationGuard, get_guard, require_auth
from app.auth.session import SessionUser
from app.database import get_session
from app.errors import BadRequestError, NotFoundError
from app.models.user import User, UserContactLink
from app.schemas.user import AddContact, ContactResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def contacts_query(owner_id: int):
    return (
        select(User)
        .join(UserContactLink, UserContactLink.contact_id == User.id)
        .where(UserContactLink.user_id == owner_id)
    )


def find_contact(session: Session, owner_id: int, contact_id: int):
    return session.exec(contacts_query(owner_id).where(User.id == contact_id)).first()


@router.get("/users/{user_id}/contacts", response_model=List[ContactResponse])
def list_contacts(
    user_id: int,
    current_user: SessionUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """Contacts of the session user (bare array, no pagination envelope)"""
    contacts = session.exec(contacts_query(current_user.id).order_by(User.created_at.desc(), User.id.desc())).all()
    return contacts


@router.get("/users/{user_id}/contacts/{contact_id}", response_model=ContactResponse)
def get_contact(
    user_id: int,
    contact_id: int,
    current_user: SessionUser = Depends(require_auth),
    session: Session = Depends(get_session),
):
    """One contact of the session user"""
    contact = find_contact(session, current_user.id, contact_id)
    if not contact:
        raise NotFoundError()
    return contact


@router.post("/users/{user_id}/contacts", status_code=201)
def add_contact(
    user_id: int,
    body: Any = Body(default=None),
    current_user: SessionUser = Depends(require_auth),
    guard: AuthorizationGuard = Depends(get_guard),
    session: Session = Depends(get_session),
):
    """Add a user to the path user's contact list"""
    guard.require_same_user(current_user.id, user_id)
    contact_id = AddContact.model_validate(body if body is not None else {}).contact_id

    if contact_id == user_id:
        raise BadRequestError("Cannot add yourself as a contact")

    if session.get(User, user_id) is None:
        raise NotFoundError()
    target = session.get(User, contact_id)
    if target is None:
        raise NotFoundError("Contact user not found")

    if session.get(UserContactLink, (user_id, contact_id)) is not None:
        raise BadRequestError("Contact already exists")

    session.add(UserContactLink(user_id=user_id, contact_id=contact_id))
    session.commit()
    session.refresh(target)

    logger.info("user %s added contact %s", user_id, contact_id)
    return {"message": "Contact added", "data": ContactResponse.model_validate(target).model_dump(by_alias=True)}


@router.delete("/users/{user_id}/contacts/{contact_id}")
def remove_contact(
    user_id: int,
    contact_id: int,
    current_user: SessionUser = Depends(require_auth),
    guard: AuthorizationGuard = Depends(get_guard),
    session: Session = Depends(get_session),
):
    """Remove a user from the path user's contact list"""
    guard.require_same_user(current_user.id, user_id)

    if contact_id == user_id:
        raise BadRequestError("Cannot remove yourself as a contact")

    link = session.get(UserContactLink, (user_id, contact_id))
    if link is None:
        raise NotFoundError("Contact not found")

    session.delete(link)
    session.commit()

    logger.info("user %s removed contact %s", user_id, contact_id)
    return {"message": "Contact removed successfully"}
