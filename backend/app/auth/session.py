"""
Session codec: verified user -> signed JWT claims -> per-request session.

The token carries a snapshot of the user's display fields taken at login.
Materializing a session never touches the database, so profile edits made
after login only show up in the session once the user logs in again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import jwt

from app.errors import UnauthorizedError

from .credentials import UserProjection

logger = logging.getLogger(__name__)

_JWT_ALG = "HS256"


@dataclass(frozen=True)
class SessionClaims:
    sub: str
    email: str
    name: str
    surnames: Optional[str]
    phone: Optional[str]
    country: Optional[str]
    iat: int
    exp: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "sub": self.sub,
            "email": self.email,
            "name": self.name,
            "surnames": self.surnames,
            "phone": self.phone,
            "country": self.country,
            "iat": self.iat,
            "exp": self.exp,
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SessionClaims":
        return cls(
            sub=str(payload.get("sub") or ""),
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
            surnames=payload.get("surnames"),
            phone=payload.get("phone"),
            country=payload.get("country"),
            iat=int(payload.get("iat") or 0),
            exp=int(payload.get("exp") or 0),
        )


@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str
    name: str
    surnames: Optional[str]
    phone: Optional[str]
    country: Optional[str]


@dataclass(frozen=True)
class AuthSession:
    user: SessionUser
    claims: SessionClaims

    @property
    def expires(self) -> datetime:
        return datetime.fromtimestamp(self.claims.exp, tz=timezone.utc)


class SessionCodec:
    def __init__(self, *, secret: str, max_age: int, update_age: int):
        if not secret:
            raise ValueError("jwt_secret_blank")
        self.secret = secret
        self.max_age = max(1, int(max_age))
        self.update_age = max(0, int(update_age))

    def claims_for(self, user: UserProjection, now: Optional[datetime] = None) -> SessionClaims:
        issued = int((now or datetime.now(timezone.utc)).timestamp())
        return SessionClaims(
            sub=str(user.id),
            email=user.email,
            name=user.name,
            surnames=user.surnames,
            phone=user.phone,
            country=user.country,
            iat=issued,
            exp=issued + self.max_age,
        )

    def encode(self, claims: SessionClaims) -> str:
        return jwt.encode(claims.to_payload(), self.secret, algorithm=_JWT_ALG)

    def issue(self, user: UserProjection, now: Optional[datetime] = None) -> str:
        return self.encode(self.claims_for(user, now))

    def decode(self, token: str) -> SessionClaims:
        if not token:
            raise UnauthorizedError()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[_JWT_ALG])
        except jwt.ExpiredSignatureError:
            logger.info("session token expired")
            raise UnauthorizedError()
        except jwt.InvalidTokenError as e:
            logger.info("session token rejected: %s", e)
            raise UnauthorizedError()
        return SessionClaims.from_payload(payload)

    def materialize(self, claims: SessionClaims) -> AuthSession:
        """Turn verified claims into the session object handlers see."""
        try:
            user_id = int(claims.sub)
        except (TypeError, ValueError):
            raise UnauthorizedError()
        return AuthSession(
            user=SessionUser(
                id=user_id,
                email=claims.email,
                name=claims.name,
                surnames=claims.surnames,
                phone=claims.phone,
                country=claims.country,
            ),
            claims=claims,
        )

    def needs_refresh(self, claims: SessionClaims, now: Optional[datetime] = None) -> bool:
        current = int((now or datetime.now(timezone.utc)).timestamp())
        return current - claims.iat >= self.update_age

    def refresh(self, claims: SessionClaims, now: Optional[datetime] = None) -> SessionClaims:
        """Same snapshot, new issue time and expiry."""
        issued = int((now or datetime.now(timezone.utc)).timestamp())
        return SessionClaims(
            sub=claims.sub,
            email=claims.email,
            name=claims.name,
            surnames=claims.surnames,
            phone=claims.phone,
            country=claims.country,
            iat=issued,
            exp=issued + self.max_age,
        )
