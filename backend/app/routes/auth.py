import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.auth.credentials import authorize
from app.auth.deps import AuthorizationGuard, get_auth_session, get_guard
from app.auth.security import hash_password
from app.auth.session import AuthSession
from app.database import get_session
from app.errors import BadRequestError
from app.models.user import User
from app.schemas.user import LoginRequest, UserCreate, UserPublic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=UserPublic, status_code=201)
def register(user_data: UserCreate, session: Session = Depends(get_session)):
    """Create an account. The password is stored hashed and never returned."""
    existing = session.exec(select(User).where(User.email == user_data.email)).first()
    if existing:
        raise BadRequestError("Email already in use")

    data = user_data.model_dump(mode="json")
    data["password"] = hash_password(user_data.password)
    user = User(**data)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration with the same email
        session.rollback()
        raise BadRequestError("Email already in use")
    session.refresh(user)

    logger.info("registered user %s", user.id)
    return user


@router.post("/login")
def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    guard: AuthorizationGuard = Depends(get_guard),
    session: Session = Depends(get_session),
):
    """Verify email/password and start a session (cookie + token in the body)"""
    user = authorize(session, credentials.email, credentials.password)

    claims = guard.codec.claims_for(user)
    token = guard.codec.encode(claims)
    settings = request.app.state.settings
    guard.set_session_cookie(response, token, secure=settings.is_production)

    session_user = guard.codec.materialize(claims)
    return {
        "user": user.to_dict(),
        "token": token,
        "expires": session_user.expires.isoformat(),
    }


@router.post("/logout", status_code=204)
def logout(guard: AuthorizationGuard = Depends(get_guard)):
    response = Response(status_code=204)
    guard.clear_session_cookie(response)
    return response


@router.get("/session")
def get_current_session(auth_session: AuthSession = Depends(get_auth_session)):
    """The session as materialized from the token.

    Display fields are the snapshot taken at login, not the live profile.
    """
    user = auth_session.user
    return {
        "user": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "surnames": user.surnames,
            "phone": user.phone,
            "country": user.country,
        },
        "expires": auth_session.expires.isoformat(),
    }
